"""Result rendering for the command layer."""

from __future__ import annotations

import json
import sys
from dataclasses import asdict, is_dataclass
from typing import Any, Optional, TextIO


class Printer:
    """Writes entities to stdout and errors to stderr, keeping a record of both.

    ``plain`` writes the given text (or ``str(entity)``), ``json`` writes one
    object per line from the raw API payload merged with any extra fields.
    """

    def __init__(
        self,
        fmt: str = "plain",
        out: Optional[TextIO] = None,
        err: Optional[TextIO] = None,
    ) -> None:
        self.format = fmt
        self._out = out or sys.stdout
        self._err = err or sys.stderr
        self.lines: list[Any] = []
        self.error_lines: list[str] = []

    def print(self, entity: Any, text: Optional[str] = None, **extra: Any) -> None:
        self.lines.append(entity)
        if self.format == "json":
            self._out.write(json.dumps(_to_json(entity, extra), sort_keys=True) + "\n")
        else:
            self._out.write(f"{entity if text is None else text}\n")

    def print_error(self, message: str) -> None:
        self.error_lines.append(message)
        self._err.write(f"Error: {message}\n")


def _to_json(entity: Any, extra: dict[str, Any]) -> Any:
    data = getattr(entity, "raw", None) or (asdict(entity) if is_dataclass(entity) else entity)
    if extra:
        data = dict(data)
        for name, value in extra.items():
            data[name] = _to_json(value, {}) if value is not None else None
    return data
