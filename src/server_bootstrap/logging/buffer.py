"""Buffered log for diagnostics emitted before logging is configured.

Building the logging sink needs configuration, and loading configuration
must itself be able to report problems. ``BufferedLog`` holds those early
messages and replays them into the real sink once it exists.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass


@dataclass(frozen=True)
class BufferedRecord:
    """A message captured before the sink existed."""

    level: int
    message: str
    cause: BaseException | None = None


class BufferedLog:
    """Ordered, replay-once message buffer.

    Messages are formatted when emitted, so later mutation of the arguments
    does not change what gets replayed. After :meth:`replay_into` the buffer
    is exhausted and every further call is forwarded to the sink directly.
    """

    def __init__(self) -> None:
        self._records: list[BufferedRecord] = []
        self._sink: logging.Logger | None = None

    @property
    def records(self) -> tuple[BufferedRecord, ...]:
        return tuple(self._records)

    @property
    def exhausted(self) -> bool:
        return self._sink is not None

    def log(
        self,
        level: int,
        msg: str,
        *args: object,
        exc_info: BaseException | None = None,
    ) -> None:
        if self._sink is not None:
            self._sink.log(level, msg, *args, exc_info=exc_info)
            return
        message = msg % args if args else msg
        self._records.append(BufferedRecord(level, message, exc_info))

    def debug(self, msg: str, *args: object) -> None:
        self.log(logging.DEBUG, msg, *args)

    def info(self, msg: str, *args: object) -> None:
        self.log(logging.INFO, msg, *args)

    def warning(self, msg: str, *args: object) -> None:
        self.log(logging.WARNING, msg, *args)

    def error(
        self, msg: str, *args: object, exc_info: BaseException | None = None
    ) -> None:
        self.log(logging.ERROR, msg, *args, exc_info=exc_info)

    def replay_into(self, sink: logging.Logger) -> int:
        """Forward every buffered record to the sink, in emission order.

        Args:
            sink: Logger that receives the records.

        Returns:
            Number of records replayed. 0 if the buffer was already replayed.
        """
        if self._sink is not None:
            return 0
        records, self._records = self._records, []
        self._sink = sink
        for record in records:
            # Pre-formatted; pass no args so "%" in the text is left alone.
            sink.log(record.level, record.message, exc_info=record.cause)
        return len(records)
