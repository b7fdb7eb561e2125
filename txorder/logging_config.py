"""Logging setup for the txorder command line.

Library modules only create ``logging.getLogger(__name__)`` loggers and attach
structured fields through ``extra={"event": ...}``. The CLI calls
``setup_logging`` once to choose plain text or JSON output on stderr.
"""

from __future__ import annotations

import logging
import sys
from datetime import datetime, timezone
from typing import Any

from pythonjsonlogger import jsonlogger

TEXT_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


class OrderingJsonFormatter(jsonlogger.JsonFormatter):
    """JSON formatter adding timestamp, level and service fields."""

    def __init__(self, service_name: str = "txorder") -> None:
        super().__init__(fmt="%(timestamp)s %(level)s %(name)s %(message)s")
        self.service_name = service_name

    def add_fields(
        self,
        log_record: dict[str, Any],
        record: logging.LogRecord,
        message_dict: dict[str, Any],
    ) -> None:
        super().add_fields(log_record, record, message_dict)
        if not log_record.get("timestamp"):
            log_record["timestamp"] = datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")
        if not log_record.get("level"):
            log_record["level"] = record.levelname.lower()
        log_record["service"] = self.service_name


def setup_logging(level: str = "WARNING", json_format: bool = False, name: str = "txorder") -> logging.Logger:
    logger = logging.getLogger(name)
    numeric_level = getattr(logging, str(level).upper(), None)
    if not isinstance(numeric_level, int):
        raise ValueError(f"Unknown log level '{level}'")
    logger.setLevel(numeric_level)

    # Drop handlers from a previous call.
    logger.handlers = []

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(numeric_level)
    if json_format:
        handler.setFormatter(OrderingJsonFormatter(service_name=name.split(".")[0]))
    else:
        handler.setFormatter(logging.Formatter(TEXT_FORMAT))
    logger.addHandler(handler)
    logger.propagate = False
    return logger
