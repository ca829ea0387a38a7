"""JSON log output for the reward and learning services."""

import logging
import sys
from typing import Any

from pythonjsonlogger import jsonlogger

from culturebridge.core.config import settings

SERVICE_NAME = "culturebridge"

# Libraries that log per statement or per request at INFO
QUIET_LOGGERS = ("uvicorn.access", "sqlalchemy.engine", "aiosqlite", "asyncio")


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """Renames the standard record fields and stamps service and env."""

    def add_fields(self, log_record: dict[str, Any], record: logging.LogRecord, message_dict: dict) -> None:
        super().add_fields(log_record, record, message_dict)

        log_record["timestamp"] = self.formatTime(record, self.datefmt)
        log_record["level"] = record.levelname
        log_record["logger"] = record.name
        log_record["event"] = record.getMessage()
        log_record["service"] = SERVICE_NAME
        log_record["env"] = settings.ENV
        for key in ("message", "asctime"):
            log_record.pop(key, None)


def setup_logging(level: str | None = None) -> None:
    """Send JSON records to stdout; replaces any handlers already installed."""
    level_name = (level or settings.LOG_LEVEL).upper()
    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, level_name, logging.INFO))
    root_logger.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        CustomJsonFormatter(
            "%(timestamp)s %(level)s %(logger)s %(event)s",
            datefmt="%Y-%m-%dT%H:%M:%S",
        )
    )
    root_logger.addHandler(handler)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
