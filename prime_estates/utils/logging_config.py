"""Logging setup for processes that embed the listing store."""

import os
import logging
import sys
from typing import Optional

from pythonjsonlogger.json import JsonFormatter

# Attribute set on handlers installed here so a second setup replaces them
_HANDLER_MARKER = "_prime_estates_handler"


class LoggingConfig:
    """Environment-driven logging settings."""

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()
    LOG_FORMAT = os.environ.get("LOG_FORMAT", "json").lower()
    LOG_SERVICE_NAME = os.environ.get("LOG_SERVICE_NAME", "prime-estates-store")
    LOG_CORRELATION_ID_HEADER = os.environ.get("LOG_CORRELATION_ID_HEADER", "X-Correlation-ID")
    LOG_SLOW_OPERATION_THRESHOLD_MS = int(os.environ.get("LOG_SLOW_OPERATION_THRESHOLD_MS", "1000"))
    # Transport libraries log every request at INFO
    LOG_TRANSPORT_LEVEL = os.environ.get("LOG_TRANSPORT_LEVEL", "WARNING").upper()

    @classmethod
    def setup_logging(cls, level: Optional[str] = None, log_format: Optional[str] = None) -> logging.Handler:
        """
        Install a stdout handler on the root logger and return it.

        JSON output carries the service name on every line and renames
        `levelname` to `level`. Handlers installed by an earlier call are
        replaced; handlers owned by the host application are left alone.
        """
        level_name = (level or cls.LOG_LEVEL).upper()
        numeric_level = getattr(logging, level_name, logging.INFO)
        log_format = (log_format or cls.LOG_FORMAT).lower()

        root_logger = logging.getLogger()
        root_logger.setLevel(numeric_level)
        for existing in list(root_logger.handlers):
            if getattr(existing, _HANDLER_MARKER, False):
                root_logger.removeHandler(existing)

        handler = logging.StreamHandler(sys.stdout)
        handler.setLevel(numeric_level)
        setattr(handler, _HANDLER_MARKER, True)

        if log_format == "json":
            formatter = JsonFormatter(
                "%(timestamp)s %(levelname)s %(name)s %(message)s",
                timestamp=True,
                rename_fields={"levelname": "level"},
                static_fields={"service": cls.LOG_SERVICE_NAME},
            )
        else:
            formatter = logging.Formatter(
                f"%(asctime)s {cls.LOG_SERVICE_NAME} %(name)s %(levelname)s %(message)s"
            )

        handler.setFormatter(formatter)
        root_logger.addHandler(handler)

        transport_level = getattr(logging, cls.LOG_TRANSPORT_LEVEL, logging.WARNING)
        for name in ("httpx", "httpcore"):
            logging.getLogger(name).setLevel(transport_level)

        return handler


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
