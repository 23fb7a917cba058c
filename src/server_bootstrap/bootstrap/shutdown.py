"""Shutdown coordination between OS signals, interpreter exit and stop().

Every route into teardown goes through one ``ShutdownToken``. The first
caller to acquire it runs the teardown; everyone else returns at once.
Acquisition never blocks, so a signal delivered while the main thread is
already inside ``stop()`` cannot deadlock.
"""

from __future__ import annotations

import atexit
import logging
import signal
import threading
from collections.abc import Callable, Sequence
from types import FrameType

from server_bootstrap.errors import BootstrapStateError

logger = logging.getLogger(__name__)

# Receives the trigger name, returns the stop code.
Teardown = Callable[[str], int]

DEFAULT_SIGNALS: tuple[signal.Signals, ...] = (signal.SIGTERM, signal.SIGINT)


def _restorable(handler: object) -> object:
    # None means the handler was not installed from Python
    return handler if handler is not None else signal.SIG_DFL


class ShutdownToken:
    """Single-use guard; exactly one acquire() ever succeeds."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._claimed_by: str | None = None

    def acquire(self, claimant: str) -> bool:
        if not self._lock.acquire(blocking=False):
            return False
        self._claimed_by = claimant
        return True

    @property
    def claimed(self) -> bool:
        return self._lock.locked()

    @property
    def claimed_by(self) -> str | None:
        """Trigger that acquired the token, None while unclaimed."""
        return self._claimed_by


class ShutdownCoordinator:
    """Binds one teardown path to SIGTERM/SIGINT, interpreter exit and stop().

    Signal handlers can only be installed from the main thread. When
    registration happens elsewhere they are skipped with a warning and only
    the atexit hook is installed.
    """

    def __init__(
        self,
        log: logging.Logger | None = None,
        signals: Sequence[signal.Signals] = DEFAULT_SIGNALS,
        install_signal_handlers: bool = True,
    ) -> None:
        self._log = log or logger
        self._signals = tuple(signals)
        self._install_signal_handlers = install_signal_handlers
        self._token = ShutdownToken()
        self._teardown: Teardown | None = None
        self._previous_handlers: dict[signal.Signals, object] = {}
        self._registered = False
        self._exiting = False
        self._fired_by: str | None = None

    @property
    def token(self) -> ShutdownToken:
        return self._token

    @property
    def is_registered(self) -> bool:
        return self._registered

    @property
    def fired_by(self) -> str | None:
        """Trigger that fired the hook, None if it never fired."""
        return self._fired_by

    def set_log(self, log: logging.Logger) -> None:
        """Route coordinator messages to the configured logging sink."""
        self._log = log

    def claim(self, trigger: str) -> bool:
        """Try to acquire the shutdown token for ``trigger``."""
        return self._token.acquire(trigger)

    def register_hook(self, teardown: Teardown) -> None:
        """Install the atexit hook and signal handlers.

        Raises:
            BootstrapStateError: If a hook is already registered.
        """
        if self._registered:
            raise BootstrapStateError("Shutdown hook is already registered")
        self._teardown = teardown
        atexit.register(self._on_exit)

        if self._install_signal_handlers:
            for sig in self._signals:
                try:
                    previous = signal.signal(sig, self._on_signal)
                except (ValueError, OSError) as e:
                    # ValueError: not in main thread
                    self._log.warning(
                        "Failed to register handler for %s: %s", sig.name, e
                    )
                    continue
                self._previous_handlers[sig] = previous
                self._log.debug("Registered handler for %s", sig.name)

        self._registered = True

    def remove_hook(self) -> bool:
        """Uninstall the atexit hook and restore previous signal handlers.

        Returns:
            True if everything was removed (or nothing was registered).
            False if a signal handler could not be restored; this is logged
            as a warning and does not affect the stop result.
        """
        if not self._registered:
            return True
        self._registered = False
        if not self._exiting:
            atexit.unregister(self._on_exit)

        removed = True
        for sig, previous in list(self._previous_handlers.items()):
            try:
                signal.signal(sig, _restorable(previous))
            except (ValueError, OSError) as e:
                # Kept so that _on_signal can hand the signal on later
                self._log.warning("Unable to remove shutdown hook for %s: %s", sig.name, e)
                removed = False
            else:
                del self._previous_handlers[sig]
        return removed

    def fire(self, trigger: str) -> int | None:
        """Run the teardown on behalf of the hook, if nobody else has.

        Returns:
            The stop code, or None when the token was already claimed or no
            hook is registered.
        """
        teardown = self._teardown
        if teardown is None or not self._registered:
            return None
        if not self.claim(trigger):
            self._log.debug(
                "Shutdown already claimed by %s, not running it for %s",
                self._token.claimed_by,
                trigger,
            )
            return None
        self._fired_by = trigger
        self._log.info(
            "Server shutdown initiated by request (%s)",
            trigger,
            extra={"trigger": trigger},
        )
        return teardown(trigger)

    def _on_signal(self, signum: int, frame: FrameType | None) -> None:
        sig = signal.Signals(signum)
        if self.fire(f"signal {sig.name}") is None:
            self._pass_on(sig, frame)

    def _pass_on(self, sig: signal.Signals, frame: FrameType | None) -> None:
        """Give a signal the hook did not act on to the handler it replaced.

        Reached when the teardown already ran (or is running) but this
        handler is still installed, for example because it could not be
        restored from a worker thread. A second SIGTERM during teardown
        therefore terminates the process the way it would without the hook.
        Signal handlers run on the main thread, so the previous handler can
        be reinstated here.
        """
        previous = _restorable(self._previous_handlers.pop(sig, None))
        signal.signal(sig, previous)
        self._log.debug("Passing %s on to the previous handler", sig.name)
        if previous is signal.SIG_DFL:
            signal.raise_signal(sig)
        elif callable(previous):
            previous(sig, frame)

    def _on_exit(self) -> None:
        self._exiting = True
        self.fire("atexit")
