"""Bootstrap orchestrator: brings the server up and takes it down once.

Startup runs strictly in this order:

1. load configuration, buffering diagnostics
2. build the logging sink from configuration
3. replay the buffered diagnostics into the sink
4. register the sink in the lifecycle container
5. check interpreter compatibility (warnings only)
6. build and start the server chosen by the variant
7. register the shutdown hook

No startup ``Exception`` escapes ``start()``; each is logged and turned into
an ``ExitCode``. An interrupt still releases whatever was started, then
propagates. Shutdown is reached either through ``stop()`` or the hook, and
both go through the coordinator's single-use token.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Mapping, Sequence
from enum import Enum
from functools import partial
from pathlib import Path

from server_bootstrap.bootstrap.exit_codes import ExitCode, StopCode
from server_bootstrap.bootstrap.shutdown import ShutdownCoordinator
from server_bootstrap.bootstrap.variants import BootstrapVariant
from server_bootstrap.config.loader import ConfigurationLoader
from server_bootstrap.config.models import BootstrapConfig, LoggingConfig
from server_bootstrap.errors import (
    BootstrapStateError,
    DependencyStartupError,
    LifecycleShutdownError,
)
from server_bootstrap.lifecycle.container import LifecycleContainer
from server_bootstrap.logging.buffer import BufferedLog
from server_bootstrap.logging.service import LoggingService
from server_bootstrap.runtime.checker import RuntimeChecker
from server_bootstrap.server.base import Server

logger = logging.getLogger(__name__)

ConfigLoaderFactory = Callable[[BufferedLog], ConfigurationLoader]
LoggingFactory = Callable[[LoggingConfig], LoggingService]
CheckerFactory = Callable[[logging.Logger], RuntimeChecker]


class LifecycleState(Enum):
    """Orchestrator states. RUNNING, STOPPED and FAILED are the rest states."""

    CREATED = "created"
    STARTING = "starting"
    RUNNING = "running"
    STOPPING = "stopping"
    STOPPED = "stopped"
    FAILED = "failed"


class BootstrapOrchestrator:
    """Owns the lifecycle container, the server handle and the shutdown hook."""

    def __init__(
        self,
        variant: BootstrapVariant,
        *,
        config_loader_factory: ConfigLoaderFactory = ConfigurationLoader,
        logging_factory: LoggingFactory = LoggingService.from_config,
        checker_factory: CheckerFactory = RuntimeChecker,
        coordinator: ShutdownCoordinator | None = None,
    ) -> None:
        self._variant = variant
        self._config_loader_factory = config_loader_factory
        self._logging_factory = logging_factory
        self._checker_factory = checker_factory
        self._coordinator = coordinator or ShutdownCoordinator()
        self._life = LifecycleContainer()
        self._log: logging.Logger = logger
        self._config: BootstrapConfig | None = None
        self._server: Server | None = None
        self._state = LifecycleState.CREATED
        self._exit_code: ExitCode | None = None
        self._stop_code: StopCode | None = None
        self._shutdown_complete = threading.Event()

    @property
    def variant(self) -> BootstrapVariant:
        return self._variant

    @property
    def state(self) -> LifecycleState:
        return self._state

    @property
    def server(self) -> Server | None:
        return self._server

    @property
    def config(self) -> BootstrapConfig | None:
        return self._config

    @property
    def lifecycle(self) -> LifecycleContainer:
        return self._life

    @property
    def coordinator(self) -> ShutdownCoordinator:
        return self._coordinator

    @property
    def exit_code(self) -> ExitCode | None:
        """Result of start(), None until start() has returned."""
        return self._exit_code

    @property
    def stop_code(self) -> StopCode | None:
        """Result of the teardown, None until one has run."""
        return self._stop_code

    def start(self, args: Sequence[str] = ()) -> ExitCode:
        """Run the startup sequence.

        Args:
            args: Startup arguments. Accepted but currently unused.

        Returns:
            ExitCode.OK when the server is running, otherwise the code for
            the failure class.

        Raises:
            BootstrapStateError: If start() was already called.
            KeyboardInterrupt: Re-raised after partial startup is torn down.
        """
        if self._state is not LifecycleState.CREATED:
            raise BootstrapStateError(
                f"Cannot start orchestrator in state {self._state.name}"
            )
        self._state = LifecycleState.STARTING

        buffer = BufferedLog()
        logging_service: LoggingService | None = None
        if args:
            buffer.debug("Ignoring startup arguments: %s", " ".join(args))

        try:
            loader = self._config_loader_factory(buffer)
            self._config = loader.configuration()

            logging_service = self._logging_factory(loader.logging_config())
            self._log = logging_service.get_console_log(type(self))
            self._coordinator.set_log(self._log)
            buffer.replay_into(self._log)

            self._life.add(logging_service, name="logging")

            self._check_compatibility(logging_service)

            self._server = self._variant.create_server(self._config, logging_service)
            self._server.start()

            self._coordinator.register_hook(self._teardown)
        except DependencyStartupError as e:
            location = self._diagnostic_location()
            self._log_startup_failure(
                buffer,
                "Failed to start server on port [%s], because %s. "
                "Another process may be using database location %s",
                self._diagnostic_port(),
                e,
                location,
                cause=e,
                location=location,
            )
            return self._abort_startup(logging_service, ExitCode.DEPENDENCY_STARTUP_ERROR)
        except ValueError as e:
            # Malformed configuration value or startup argument
            self._log_startup_failure(
                buffer,
                "Failed to start server on port [%s]: %s",
                self._diagnostic_port(),
                e,
                cause=e,
            )
            return self._abort_startup(logging_service, ExitCode.SERVER_STARTUP_ERROR)
        except Exception as e:
            self._log_startup_failure(
                buffer,
                "Failed to start server on port [%s]: %s",
                self._diagnostic_port(),
                e,
                cause=e,
            )
            return self._abort_startup(logging_service, ExitCode.SERVER_STARTUP_ERROR)
        except BaseException:
            # KeyboardInterrupt or SystemExit: nothing may stay half started
            self._log.warning("Startup interrupted, releasing started resources")
            self._abort_startup(logging_service, ExitCode.SERVER_STARTUP_ERROR)
            raise

        self._state = LifecycleState.RUNNING
        self._exit_code = ExitCode.OK
        return ExitCode.OK

    def stop(self) -> StopCode:
        """Stop the server and release everything started by start().

        Safe to call from any thread, any number of times, and concurrently
        with the shutdown hook: only the first caller performs the teardown.

        Returns:
            StopCode.OK on a clean shutdown, when there is nothing to stop,
            or when another caller already claimed the teardown.
            StopCode.FAILED if a shutdown step raised.
        """
        if self._state is not LifecycleState.RUNNING:
            self._log.debug("stop() ignored in state %s", self._state.name)
            return StopCode.OK
        if not self._coordinator.claim("stop()"):
            self._log.debug(
                "Shutdown already in progress (claimed by %s)",
                self._coordinator.token.claimed_by,
            )
            return StopCode.OK
        return self._teardown("stop()")

    def wait_for_shutdown(self, timeout: float | None = None) -> bool:
        """Block until a teardown has completed.

        Returns:
            True if the teardown completed, False on timeout.
        """
        return self._shutdown_complete.wait(timeout)

    def _teardown(self, trigger: str) -> StopCode:
        # Only ever called by the shutdown token holder.
        self._state = LifecycleState.STOPPING
        port = self._diagnostic_port()
        location = self._diagnostic_location()
        diagnostics = {"port": port, "location": location, "trigger": trigger}
        try:
            if self._server is not None:
                self._server.stop()
            self._log.info(
                "Successfully shutdown server on port [%s], database [%s]",
                port,
                location,
                extra=diagnostics,
            )

            self._coordinator.remove_hook()

            failures = self._life.shutdown()
            if failures:
                raise LifecycleShutdownError(failures)
        except Exception as e:
            self._log.error(
                "Failed to cleanly shutdown server on port [%s], database [%s]. "
                "Reason [%s]",
                port,
                location,
                e,
                exc_info=True,
                extra=diagnostics,
            )
            self._state = LifecycleState.FAILED
            self._stop_code = StopCode.FAILED
        except BaseException:
            self._log.warning(
                "Shutdown interrupted on port [%s], releasing remaining resources",
                port,
                extra=diagnostics,
            )
            self._state = LifecycleState.FAILED
            self._stop_code = StopCode.FAILED
            self._coordinator.remove_hook()
            self._life.shutdown()
            raise
        else:
            self._log.debug("Shutdown triggered by %s complete", trigger)
            self._state = LifecycleState.STOPPED
            self._stop_code = StopCode.OK
        finally:
            self._shutdown_complete.set()
        return self._stop_code

    def _check_compatibility(self, logging_service: LoggingService) -> None:
        log = logging_service.get_messages_log(RuntimeChecker)
        try:
            self._checker_factory(log).check_compatibility_and_issue_warning()
        except Exception as e:
            log.warning("Runtime compatibility check failed: %s", e)

    def _log_startup_failure(
        self,
        buffer: BufferedLog,
        msg: str,
        *args: object,
        cause: Exception,
        location: str | None = None,
    ) -> None:
        if not buffer.exhausted:
            # The sink was never built; keep the early diagnostics anyway.
            buffer.replay_into(self._log)
        extra: dict[str, object] = {"port": self._diagnostic_port()}
        if location is not None:
            extra["location"] = location
        self._log.error(msg, *args, exc_info=cause, extra=extra)

    def _abort_startup(
        self, logging_service: LoggingService | None, code: ExitCode
    ) -> ExitCode:
        """Tear down whatever startup got to before failing."""
        server, self._server = self._server, None
        if server is not None:
            try:
                server.stop()
            except Exception as e:
                self._log.warning("Failed to stop partially started server: %s", e)

        self._coordinator.remove_hook()
        self._life.shutdown()
        if logging_service is not None and not logging_service.closed:
            # Built but never registered in the container
            logging_service.stop()

        self._state = LifecycleState.FAILED
        self._exit_code = code
        return code

    def _diagnostic_port(self) -> int | str:
        if self._config is None:
            return "unknown"
        return self._config.server.port

    def _diagnostic_location(self) -> str:
        if self._server is not None:
            try:
                return self._server.location()
            except Exception:
                self._log.debug("Server location unavailable", exc_info=True)
        if self._config is not None:
            return str(self._config.database.location)
        return "unknown location"


def create_orchestrator(
    variant: BootstrapVariant | None = None,
    *,
    config_path: Path | None = None,
    env: Mapping[str, str] | None = None,
    config_loader_factory: ConfigLoaderFactory | None = None,
    logging_factory: LoggingFactory = LoggingService.from_config,
    checker_factory: CheckerFactory = RuntimeChecker,
    coordinator: ShutdownCoordinator | None = None,
) -> BootstrapOrchestrator:
    """Build an orchestrator for a variant.

    Args:
        variant: Variant to run. Defaults to the most specialized installed one.
        config_path: Explicit configuration file.
        env: Environment mapping for configuration (defaults to os.environ).
        config_loader_factory: Overrides the loader built from
            ``config_path`` and ``env``.
        logging_factory: Builds the logging sink from logging configuration.
        checker_factory: Builds the runtime compatibility checker.
        coordinator: Shutdown coordinator (a new one by default).

    Returns:
        An orchestrator in the CREATED state.
    """
    if variant is None:
        from server_bootstrap.bootstrap.selector import load_most_specialized_variant

        variant = load_most_specialized_variant()
    if config_loader_factory is None:
        config_loader_factory = partial(
            ConfigurationLoader, config_path=config_path, env=env
        )
    return BootstrapOrchestrator(
        variant,
        config_loader_factory=config_loader_factory,
        logging_factory=logging_factory,
        checker_factory=checker_factory,
        coordinator=coordinator,
    )
