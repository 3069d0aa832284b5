"""Structured logging configuration.

JSON lines outside development, a terse ``LEVEL: message`` format otherwise.
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from typing import IO, Optional

from scripts.intune_export.config import LoggingConfig

ROOT_LOGGER = "intune_export"


class JsonFormatter(logging.Formatter):
    """Emit one JSON object per log line."""

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname.lower(),
            "logger": record.name,
            "message": record.getMessage(),
            "service": "app",
        }
        if record.exc_info and record.exc_info[1]:
            log_entry["exception"] = self.formatException(record.exc_info)
        # Merge extra fields attached by pipeline stages
        for key in ("platform", "platform_app_key", "records", "duration_s"):
            val = getattr(record, key, None)
            if val is not None:
                log_entry[key] = val
        return json.dumps(log_entry)


class DevFormatter(logging.Formatter):
    def __init__(self) -> None:
        super().__init__("%(levelname)s: %(message)s")

    def format(self, record: logging.LogRecord) -> str:
        record = logging.makeLogRecord(record.__dict__)
        record.levelname = record.levelname.lower()
        return super().format(record)


def configure_logging(
    config: LoggingConfig, stream: Optional[IO[str]] = None
) -> logging.Logger:
    """Set up the package root logger. Call once at startup."""
    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(JsonFormatter() if config.json_format else DevFormatter())
    root = logging.getLogger(ROOT_LOGGER)
    root.setLevel(getattr(logging, config.level.upper(), logging.INFO))
    root.handlers.clear()
    root.addHandler(handler)
    root.propagate = False
    return root
