"""SQLite-backed data store guarded by an exclusive location lock."""

from __future__ import annotations

import fcntl
import logging
import os
import sqlite3
from pathlib import Path

from server_bootstrap.errors import DependencyStartupError, StoreLocationInUseError

logger = logging.getLogger(__name__)


def lock_path_for(location: Path) -> Path:
    """Return the lock file guarding a database location."""
    return location.with_name(location.name + ".lock")


class DataStore:
    """Database opened for the lifetime of the server.

    Only one process may hold a location at a time. The lock is an advisory
    ``flock`` on a sibling ``.lock`` file, released by the kernel if the
    process dies.
    """

    def __init__(self, location: Path, timeout: float = 30.0) -> None:
        self._location = Path(location)
        self._timeout = timeout
        self._lock_fd: int | None = None
        self._conn: sqlite3.Connection | None = None

    @property
    def location(self) -> Path:
        return self._location

    @property
    def is_open(self) -> bool:
        return self._conn is not None

    @property
    def connection(self) -> sqlite3.Connection:
        if self._conn is None:
            raise DependencyStartupError(f"Data store is not open: {self._location}")
        return self._conn

    def open(self) -> None:
        """Acquire the location lock and open the database.

        Raises:
            StoreLocationInUseError: If another holder has the location.
            DependencyStartupError: If the database cannot be opened.
        """
        try:
            self._location.parent.mkdir(parents=True, exist_ok=True)
            self._lock_fd = os.open(
                lock_path_for(self._location), os.O_RDWR | os.O_CREAT, 0o644
            )
        except OSError as e:
            raise DependencyStartupError(
                f"Cannot prepare database location {self._location}: {e}"
            ) from e

        try:
            fcntl.flock(self._lock_fd, fcntl.LOCK_EX | fcntl.LOCK_NB)
        except BlockingIOError as e:
            self._release_lock(unlock=False)
            raise StoreLocationInUseError(str(self._location)) from e

        conn: sqlite3.Connection | None = None
        try:
            conn = sqlite3.connect(str(self._location), timeout=self._timeout)
            conn.execute("PRAGMA foreign_keys = ON")
            conn.execute("PRAGMA journal_mode = WAL")
            conn.execute("PRAGMA synchronous = NORMAL")
            conn.execute("SELECT 1")
        except sqlite3.Error as e:
            if conn is not None:
                conn.close()
            self._release_lock()
            raise DependencyStartupError(
                f"Cannot open database {self._location}: {e}"
            ) from e

        self._conn = conn
        logger.debug("Opened data store at %s", self._location)

    def close(self) -> None:
        """Close the database and release the location lock."""
        if self._conn is not None:
            self._conn.close()
            self._conn = None
        self._release_lock()
        logger.debug("Closed data store at %s", self._location)

    def _release_lock(self, unlock: bool = True) -> None:
        if self._lock_fd is None:
            return
        try:
            if unlock:
                fcntl.flock(self._lock_fd, fcntl.LOCK_UN)
        finally:
            os.close(self._lock_fd)
            self._lock_fd = None
