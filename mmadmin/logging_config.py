"""Logging configuration: JSON lines for automation, short text for terminals."""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from typing import TextIO

# Extra attributes the client and the commands attach to log records
EXTRA_FIELDS = (
    "command",
    "entity_kind",
    "identifier",
    "page",
    "records",
    "duration_s",
    "status_code",
)

TEXT_FORMAT = "%(levelname)s %(name)s: %(message)s"


class JsonFormatter(logging.Formatter):
    """Emit one JSON object per log line."""

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info and record.exc_info[1]:
            log_entry["exception"] = self.formatException(record.exc_info)
        for key in EXTRA_FIELDS:
            val = getattr(record, key, None)
            if val is not None:
                log_entry[key] = val
        return json.dumps(log_entry)


def configure_logging(
    level: str = "WARNING",
    fmt: str = "text",
    stream: TextIO | None = None,
) -> logging.Logger:
    """Attach a single stderr handler to the ``mmadmin`` logger.

    Command output goes to stdout through the printer, so logs never mix with
    results a caller may be piping into another tool.
    """
    handler = logging.StreamHandler(stream or sys.stderr)
    if fmt == "json":
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(logging.Formatter(TEXT_FORMAT))
    root = logging.getLogger("mmadmin")
    root.setLevel(getattr(logging, level.upper(), logging.WARNING))
    root.handlers.clear()
    root.addHandler(handler)
    root.propagate = False
    return root
