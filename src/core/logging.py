"""
core/logging.py

Logging setup for the API process.

JSON lines in production so the output can be shipped as-is, a readable
coloured format everywhere else. Call `setup_logging()` once at startup and
use `get_logger(__name__)` in modules.
"""

import json
import logging
import sys
from datetime import datetime

from core.config import settings

ROOT_LOGGER_NAME = "chainsign"

# Attributes passed through `extra=` that are worth surfacing.
CONTEXT_FIELDS = ("contract_id", "user_id", "email", "transaction_hash")


class StructuredFormatter(logging.Formatter):

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.utcnow().isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "line": record.lineno,
        }
        for field in CONTEXT_FIELDS:
            if hasattr(record, field):
                log_data[field] = getattr(record, field)
        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)
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

    def format(self, record: logging.LogRecord) -> str:
        color = self.COLORS.get(record.levelname, "")
        timestamp = datetime.fromtimestamp(record.created).strftime("%H:%M:%S")
        message = f"{timestamp} {color}{record.levelname:<8}{self.RESET} {record.name}: {record.getMessage()}"

        context = [
            f"{field}={getattr(record, field)}"
            for field in CONTEXT_FIELDS
            if hasattr(record, field)
        ]
        if context:
            message += f" [{', '.join(context)}]"

        if record.exc_info:
            message += "\n" + self.formatException(record.exc_info)
        return message


def setup_logging() -> logging.Logger:
    level = getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO)

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(StructuredFormatter() if settings.is_production else DevelopmentFormatter())

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers.clear()
    root_logger.addHandler(handler)

    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("passlib").setLevel(logging.ERROR)
    logging.getLogger("multipart").setLevel(logging.WARNING)
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)

    logger = logging.getLogger(ROOT_LOGGER_NAME)
    logger.info(
        "Logging configured",
        extra={"environment": settings.ENVIRONMENT, "log_level": settings.LOG_LEVEL},
    )
    return logger


def get_logger(name: str) -> logging.Logger:
    """Return a logger under the application namespace."""
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")
