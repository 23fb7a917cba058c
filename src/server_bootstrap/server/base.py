"""Server handle contract."""

from typing import Protocol, runtime_checkable


@runtime_checkable
class Server(Protocol):
    """A managed server the bootstrap starts and stops.

    ``location()`` is a diagnostic identifier (typically the storage path).
    The bootstrap only embeds it in log messages.
    """

    def start(self) -> None: ...

    def stop(self) -> None: ...

    def location(self) -> str: ...
