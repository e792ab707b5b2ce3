"""
Structured logging configuration.
"""

import logging
import sys
from typing import Any

from pythonjsonlogger import jsonlogger


def configure_logging(app_name: str, log_level: str = "INFO") -> logging.Logger:
    """
    Configure structured logging for the application.

    Both the application logger and the shared packages log through the same
    JSON handler so console output stays machine-readable.

    Args:
        app_name: Name of the application
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)

    Returns:
        Configured logger instance
    """
    level = getattr(logging, log_level.upper(), logging.INFO)
    logger = logging.getLogger(app_name)
    logger.setLevel(level)

    if logger.handlers:
        return logger

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        jsonlogger.JsonFormatter(
            "%(asctime)s %(levelname)s %(name)s %(message)s",
            rename_fields={"levelname": "level", "name": "logger", "asctime": "timestamp"},
            datefmt="%Y-%m-%dT%H:%M:%S",
        )
    )
    logger.addHandler(handler)

    for package in ("cafe_shared", "cafe_console"):
        package_logger = logging.getLogger(package)
        package_logger.setLevel(level)
        if not package_logger.handlers:
            package_logger.addHandler(handler)

    return logger


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


class TableLogAdapter(logging.LoggerAdapter):
    """Stamps the backend table on every record so JSON logs can be filtered by table."""

    def __init__(self, logger: logging.Logger, table: str):
        super().__init__(logger, {"table": table})

    def process(self, msg: str, kwargs: dict[str, Any]) -> tuple[str, dict[str, Any]]:
        kwargs["extra"] = {**self.extra, **kwargs.get("extra", {})}
        return msg, kwargs
