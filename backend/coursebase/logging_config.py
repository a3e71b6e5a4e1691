"""
Logging setup shared by the API and the seeding commands.

Plain text by default; JSON lines when ``json_output`` is set, carrying the
structured extras the seeder attaches (entity, row_name, stage, ...).
"""
from __future__ import annotations

import json
import logging
import sys
from typing import Any

EXTRA_KEYS = ("entity", "row_name", "stage", "count", "path", "error", "counts")


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:  # type: ignore[override]
        base: dict[str, Any] = {
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key in EXTRA_KEYS:
            if hasattr(record, key):
                base[key] = getattr(record, key)
        if record.exc_info:
            base["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(base, ensure_ascii=False, default=str)


def configure_logging(level: int | str = logging.INFO, json_output: bool = False) -> None:
    handler = logging.StreamHandler(stream=sys.stdout)
    if json_output:
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(logging.Formatter("%(asctime)s [%(levelname)s] %(name)s: %(message)s"))

    root = logging.getLogger()
    root.handlers.clear()
    root.setLevel(level)
    root.addHandler(handler)

    # Engine echo is noisy during row-by-row seeding.
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
