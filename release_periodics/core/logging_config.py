"""Logging configuration for the controller."""

import logging
import sys
from typing import Any, Dict, Optional

from pythonjsonlogger import jsonlogger

from release_periodics.config import get_settings

PLAIN_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# Third-party loggers that are chatty at INFO
QUIET_LOGGERS = ("apscheduler", "redis")


class PeriodicsJsonFormatter(jsonlogger.JsonFormatter):
    """JSON formatter stamping every record with the controller identity."""

    def __init__(self, *args, service: str = "", version: str = "", environment: str = "", **kwargs):
        super().__init__(*args, **kwargs)
        self.service = service
        self.version = version
        self.environment = environment

    def add_fields(
        self,
        log_record: Dict[str, Any],
        record: logging.LogRecord,
        message_dict: Dict[str, Any],
    ) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record["level"] = record.levelname
        log_record["service"] = self.service
        log_record["version"] = self.version
        log_record["environment"] = self.environment


class _ControllerHandler(logging.StreamHandler):
    """Marker type so repeated setup replaces the previous handler."""


def setup_logging(level: Optional[str] = None, json_format: Optional[bool] = None) -> logging.Handler:
    """
    Configure the root logger for the controller.

    Calling it again replaces the handler installed by the previous call.

    Args:
        level: Log level name (default: settings.log_level)
        json_format: Emit JSON lines (default: only in production)

    Returns:
        The installed handler
    """
    settings = get_settings()
    level = (level or settings.log_level).upper()
    if json_format is None:
        json_format = settings.environment == "production"

    handler = _ControllerHandler(sys.stdout)
    handler.setLevel(level)
    if json_format:
        handler.setFormatter(
            PeriodicsJsonFormatter(
                "%(timestamp)s %(level)s %(name)s %(message)s",
                timestamp=True,
                service=settings.app_name,
                version=settings.app_version,
                environment=settings.environment,
            )
        )
    else:
        handler.setFormatter(logging.Formatter(PLAIN_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))

    root_logger = logging.getLogger()
    for existing in list(root_logger.handlers):
        if isinstance(existing, _ControllerHandler):
            root_logger.removeHandler(existing)
    root_logger.setLevel(level)
    root_logger.addHandler(handler)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    return handler


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
