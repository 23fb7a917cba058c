"""HTTP endpoint for the community server.

This module provides the aiohttp Application with a health check endpoint,
and runs it on a private event loop thread so that ``start()`` and
``stop()`` can be called from synchronous bootstrap code.
"""

from __future__ import annotations

import asyncio
import logging
import threading
from collections.abc import Callable
from dataclasses import asdict, dataclass

from aiohttp import web

from server_bootstrap.errors import ServerStartupError

logger = logging.getLogger(__name__)


@dataclass
class HealthStatus:
    """Health check response payload."""

    status: str
    """Overall status: 'healthy' or 'stopping'."""

    variant: str
    """Name of the bootstrap variant serving the request."""

    location: str
    """Database location."""

    uptime_seconds: float
    """Seconds since the endpoint started."""

    version: str
    """server-bootstrap version string."""

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return asdict(self)


async def health_handler(request: web.Request) -> web.Response:
    """Handle GET /health requests."""
    provider: Callable[[], HealthStatus] = request.app["health_provider"]
    return web.json_response(provider().to_dict())


def create_app(health_provider: Callable[[], HealthStatus]) -> web.Application:
    """Create and configure the aiohttp Application.

    Args:
        health_provider: Callable building the current health payload.

    Returns:
        Configured aiohttp Application instance.
    """
    app = web.Application()
    app["health_provider"] = health_provider
    app.router.add_get("/health", health_handler)
    return app


class HttpEndpoint:
    """aiohttp site running on its own event loop thread."""

    def __init__(
        self,
        bind: str,
        port: int,
        health_provider: Callable[[], HealthStatus],
    ) -> None:
        self._bind = bind
        self._requested_port = port
        self._health_provider = health_provider
        self._loop: asyncio.AbstractEventLoop | None = None
        self._thread: threading.Thread | None = None
        self._runner: web.AppRunner | None = None
        self._port: int | None = None

    @property
    def bind(self) -> str:
        return self._bind

    @property
    def port(self) -> int:
        """The bound port, or the requested one before start()."""
        return self._port if self._port is not None else self._requested_port

    @property
    def is_running(self) -> bool:
        return self._runner is not None

    async def _start_site(self) -> int:
        runner = web.AppRunner(create_app(self._health_provider))
        await runner.setup()
        try:
            site = web.TCPSite(runner, self._bind, self._requested_port)
            await site.start()
        except BaseException:
            await runner.cleanup()
            raise
        self._runner = runner
        return runner.addresses[0][1]

    def start(self) -> None:
        """Bind and start serving.

        Raises:
            ServerStartupError: If the address cannot be bound.
        """
        loop = asyncio.new_event_loop()
        thread = threading.Thread(
            target=loop.run_forever, name="http-endpoint", daemon=True
        )
        thread.start()
        self._loop, self._thread = loop, thread

        future = asyncio.run_coroutine_threadsafe(self._start_site(), loop)
        try:
            self._port = future.result()
        except OSError as e:
            self._stop_loop()
            raise ServerStartupError(
                f"Cannot bind HTTP endpoint to {self._bind}:{self._requested_port}: {e}"
            ) from e
        except BaseException:
            self._stop_loop()
            raise

        logger.info("HTTP endpoint listening on http://%s:%d", self._bind, self._port)

    def stop(self) -> None:
        """Stop serving and shut the event loop thread down."""
        if self._loop is None:
            return
        if self._runner is not None:
            runner, self._runner = self._runner, None
            asyncio.run_coroutine_threadsafe(runner.cleanup(), self._loop).result()
        self._stop_loop()
        logger.info("HTTP endpoint on %s:%d stopped", self._bind, self.port)

    def _stop_loop(self) -> None:
        loop, thread = self._loop, self._thread
        self._loop = self._thread = None
        if loop is None:
            return
        loop.call_soon_threadsafe(loop.stop)
        if thread is not None:
            thread.join()
        loop.close()
