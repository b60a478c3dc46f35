"""Logging configuration with structured JSON formatter.

This module provides a custom JSON formatter and a `dictConfig` dictionary so
every log line the launcher writes is a single JSON object on stdout. The
surrounding automation (a CronJob, a CI runner) can then parse the final
diagnostic line without scraping free text.
"""

import copy
import json
import logging
import logging.config
from typing import Any

# LOG_LEVEL values accepted on the command line / environment.
LOG_LEVELS: dict[str, int] = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}


class CustomJSONFormatter(logging.Formatter):
    """Custom JSON formatter for structured logging.

    This formatter converts log records to JSON format, including:
    - Standard log fields (time, level, message, etc.)
    - Error information passed as `extra={"error": {...}}`
    - All extra attributes passed via the extra parameter
    """

    def __init__(self, fmt: str) -> None:
        """Initialize the formatter.

        Args:
            fmt: Format string (used for asctime, but output is JSON).
        """
        logging.Formatter.__init__(self, fmt)

    def format(self, record: logging.LogRecord) -> str:
        """Format a log record as JSON.

        Args:
            record: The log record to format.

        Returns:
            JSON string representation of the log record.
        """
        logging.Formatter.format(self, record)
        return json.dumps(self.get_log(record), indent=None, default=str)

    def get_log(self, record: logging.LogRecord) -> dict[str, Any]:
        """Extract log data from record into a dictionary.

        Args:
            record: The log record to extract data from.

        Returns:
            Dictionary containing log data.
        """
        d: dict[str, Any] = {
            "time": record.asctime,
            "process_id": record.process,
            "level": record.levelname,
            "logger_name": record.name,
            "pathname": record.pathname,
            "line": record.lineno,
            "message": record.message,
        }

        # Add error information if present
        error_data = getattr(record, "error", None)
        if error_data is not None:
            if isinstance(error_data, dict):
                error_dict: dict[str, Any] = error_data.copy()
                if record.exc_info:
                    error_dict["trace"] = self.formatException(record.exc_info)
                d["error"] = error_dict
            else:
                d["error"] = error_data
        elif record.exc_info:
            d["trace"] = self.formatException(record.exc_info)

        # Standard LogRecord attributes to exclude (already handled above or internal)
        standard_attrs = {
            "name",
            "msg",
            "args",
            "created",
            "filename",
            "funcName",
            "levelname",
            "levelno",
            "lineno",
            "module",
            "msecs",
            "message",
            "pathname",
            "process",
            "processName",
            "relativeCreated",
            "thread",
            "threadName",
            "taskName",
            "exc_info",
            "exc_text",
            "stack_info",
            "asctime",
            "error",
        }
        # Include all non-standard attributes (from extra parameter)
        for key, value in record.__dict__.items():
            if key not in standard_attrs:
                d[key] = value

        return d


LOGGING_CONFIG: dict[str, Any] = {
    "version": 1,
    "disable_existing_loggers": False,  # Keep existing loggers, just configure them
    "formatters": {
        "standard": {"()": lambda: CustomJSONFormatter(fmt="%(asctime)s")},
    },
    "handlers": {
        "default": {
            "formatter": "standard",
            "class": "logging.StreamHandler",
            "stream": "ext://sys.stdout",
        },
    },
    "loggers": {
        "backup_launcher": {
            "handlers": ["default"],
            "level": "INFO",
            "propagate": False,
        },
        # The kubernetes client logs every request body at DEBUG
        "kubernetes": {
            "handlers": ["default"],
            "level": "WARNING",
            "propagate": False,
        },
        "pymongo": {
            "handlers": ["default"],
            "level": "WARNING",
            "propagate": False,
        },
    },
    "root": {
        "handlers": ["default"],
        "level": "INFO",
    },
}


def parse_log_level(value: str | None) -> int:
    """Translate a LOG_LEVEL string into a `logging` level.

    Unknown or empty values fall back to INFO.
    """
    if not value:
        return logging.INFO
    return LOG_LEVELS.get(value.strip().lower(), logging.INFO)


def configure_logging(level: str | None = None) -> dict[str, Any]:
    """Apply `LOGGING_CONFIG` with the launcher's logger set to `level`.

    Args:
        level: LOG_LEVEL string (e.g. "debug"). Unknown values mean INFO.

    Returns:
        The configuration dictionary that was applied.
    """
    log_config = copy.deepcopy(LOGGING_CONFIG)
    level_name = logging.getLevelName(parse_log_level(level))
    log_config["loggers"]["backup_launcher"]["level"] = level_name
    log_config["root"]["level"] = level_name
    logging.config.dictConfig(log_config)
    return log_config
