"""JSON rendering for the structured log file.

Startup and shutdown messages carry the diagnostics an operator searches
for (bound port, database location, what triggered the shutdown) as
``extra=`` fields. The JSON format lifts them to top-level keys so they can
be queried without parsing the message text.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import Any

# Record attributes emitted as top-level keys when a call sets them.
DIAGNOSTIC_FIELDS: tuple[str, ...] = ("port", "location", "trigger")


class JSONFormatter(logging.Formatter):
    """One JSON object per record.

    Always present: ``timestamp`` (UTC, millisecond precision), ``level``,
    ``logger``, ``thread`` and ``message``. Diagnostic fields follow when
    set, then ``exception`` when the record carries one. Other ``extra=``
    attributes are not emitted.
    """

    def format(self, record: logging.LogRecord) -> str:
        created = datetime.fromtimestamp(record.created, tz=timezone.utc)
        entry: dict[str, Any] = {
            "timestamp": created.isoformat(timespec="milliseconds"),
            "level": record.levelname,
            "logger": record.name,
            # Shutdown may run on a signal, atexit or a caller's thread
            "thread": record.threadName,
            "message": record.getMessage(),
        }
        for name in DIAGNOSTIC_FIELDS:
            value = getattr(record, name, None)
            if value is not None:
                entry[name] = value

        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(entry, default=str)
