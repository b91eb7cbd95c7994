"""
Structured logging for menu_core and the CLI.

Keyword arguments passed to a logger call become structured data. Records
emitted inside an operation_scope() also carry the operation ID and the
branch being changed (see shared.infrastructure.correlation).

Production writes one JSON object per line; development writes coloured
single lines such as:

    [12:00:01] INFO     op=3f2a9c01d4e7 branch=4 menu_core...: Product flag set (product_id=42 active=True)
"""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any

from shared.config.settings import settings

OPERATION_FIELDS = ("operation_id", "branch_id")


def operation_context(record: logging.LogRecord) -> dict[str, Any]:
    """Operation fields present on the record, in OPERATION_FIELDS order."""
    return {
        key: getattr(record, key)
        for key in OPERATION_FIELDS
        if getattr(record, key, None) is not None
    }


class StructuredFormatter(logging.Formatter):
    """JSON lines for log aggregation."""

    def format(self, record: logging.LogRecord) -> str:
        log_data: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            **operation_context(record),
        }
        if getattr(record, "extra_data", None):
            log_data["data"] = record.extra_data
        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)
        if settings.debug:
            log_data["source"] = f"{record.filename}:{record.lineno}"
        return json.dumps(log_data, default=str)


class DevelopmentFormatter(logging.Formatter):

    COLORS = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[35m",
    }
    RESET = "\033[0m"
    DIM = "\033[2m"

    def format(self, record: logging.LogRecord) -> str:
        color = self.COLORS.get(record.levelname, self.RESET)
        timestamp = datetime.fromtimestamp(record.created).strftime("%H:%M:%S")
        parts = [f"{color}[{timestamp}] {record.levelname:8}{self.RESET}"]

        context = operation_context(record)
        if context:
            tags = " ".join(f"{key.removesuffix('_id')}={value}" for key, value in context.items())
            parts.append(f"{self.DIM}{tags}{self.RESET}")

        parts.append(f"{record.name}: {record.getMessage()}")
        if getattr(record, "extra_data", None):
            parts.append("(" + " ".join(f"{k}={v}" for k, v in record.extra_data.items()) + ")")

        message = " ".join(parts)
        if record.exc_info:
            message += f"\n{self.formatException(record.exc_info)}"
        return message


class StructuredLogger(logging.Logger):
    """
    Logger whose keyword arguments are attached to the record as `extra_data`.

        logger.warning("Skipping missing group during propagation", group_id=7)
    """

    def _log_with_data(
        self, level: int, msg: str, args: tuple, exc_info: Any = None, **kwargs: Any
    ) -> None:
        if self.isEnabledFor(level):
            super()._log(level, msg, args, exc_info=exc_info, extra={"extra_data": kwargs or None})

    def debug(self, msg: str, *args: Any, **kwargs: Any) -> None:
        self._log_with_data(logging.DEBUG, msg, args, **kwargs)

    def info(self, msg: str, *args: Any, **kwargs: Any) -> None:
        self._log_with_data(logging.INFO, msg, args, **kwargs)

    def warning(self, msg: str, *args: Any, **kwargs: Any) -> None:
        self._log_with_data(logging.WARNING, msg, args, **kwargs)

    def error(self, msg: str, *args: Any, **kwargs: Any) -> None:
        self._log_with_data(logging.ERROR, msg, args, **kwargs)

    def critical(self, msg: str, *args: Any, **kwargs: Any) -> None:
        self._log_with_data(logging.CRITICAL, msg, args, **kwargs)


logging.setLoggerClass(StructuredLogger)


def _resolve_level() -> int:
    if settings.log_level:
        return logging.getLevelName(settings.log_level.upper())
    return logging.DEBUG if settings.debug else logging.INFO


def setup_logging() -> None:
    """
    Configure the root logger. Call once at startup.
    """
    # Import here to avoid circular imports
    from shared.infrastructure.correlation import CorrelationIdFilter

    log_level = _resolve_level()

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(log_level)
    handler.addFilter(CorrelationIdFilter())
    if settings.environment == "production":
        handler.setFormatter(StructuredFormatter())
    else:
        handler.setFormatter(DevelopmentFormatter())

    root = logging.getLogger()
    root.setLevel(log_level)
    root.handlers.clear()
    root.addHandler(handler)

    logging.getLogger("sqlalchemy.engine").setLevel(
        logging.INFO if settings.sql_echo else logging.WARNING
    )


def get_logger(name: str) -> StructuredLogger:
    """
    Usage:
        from shared.config.logging import get_logger
        logger = get_logger(__name__)
        logger.info("Product enabled", product_id=42)
    """
    return logging.getLogger(name)  # type: ignore
