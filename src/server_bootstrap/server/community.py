"""Community server: data store plus HTTP endpoint."""

from __future__ import annotations

import logging
import time

from server_bootstrap import __version__
from server_bootstrap.config.models import BootstrapConfig
from server_bootstrap.server.http import HealthStatus, HttpEndpoint
from server_bootstrap.server.store import DataStore

logger = logging.getLogger(__name__)


class CommunityServer:
    """Default server built by the community bootstrap variant.

    Starts the data store before the HTTP endpoint and stops them in the
    opposite order. A failure starting the endpoint closes the store again.
    """

    def __init__(
        self,
        config: BootstrapConfig,
        log: logging.Logger | None = None,
        variant_name: str = "community",
    ) -> None:
        self._config = config
        self._log = log or logger
        self._variant_name = variant_name
        self._store = DataStore(config.database.location)
        self._endpoint = HttpEndpoint(
            config.server.bind, config.server.port, self.health
        )
        self._started_at: float | None = None

    @property
    def store(self) -> DataStore:
        return self._store

    @property
    def endpoint(self) -> HttpEndpoint:
        return self._endpoint

    def location(self) -> str:
        return str(self._store.location)

    def health(self) -> HealthStatus:
        uptime = 0.0 if self._started_at is None else time.monotonic() - self._started_at
        return HealthStatus(
            status="healthy" if self._endpoint.is_running else "stopping",
            variant=self._variant_name,
            location=self.location(),
            uptime_seconds=round(uptime, 3),
            version=__version__,
        )

    def start(self) -> None:
        self._store.open()
        try:
            self._endpoint.start()
        except BaseException:
            self._store.close()
            raise
        self._started_at = time.monotonic()
        self._log.info(
            "Server started on http://%s:%d, database [%s]",
            self._endpoint.bind,
            self._endpoint.port,
            self.location(),
            extra={"port": self._endpoint.port, "location": self.location()},
        )

    def stop(self) -> None:
        try:
            self._endpoint.stop()
        finally:
            self._store.close()
        self._started_at = None
