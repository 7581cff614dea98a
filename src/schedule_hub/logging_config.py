"""Structured JSON logging configuration.

Configures Python stdlib logging to emit one JSON object per line on stdout,
with `severity`, `timestamp` and `logger` field names so the output can be
shipped to a log collector unchanged.

Usage:
    from schedule_hub.logging_config import configure_logging
    configure_logging()
"""

import copy
import logging
import logging.config

LOGGING_CONFIG: dict = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "json": {
            "()": "pythonjsonlogger.json.JsonFormatter",
            "format": "%(asctime)s %(levelname)s %(name)s %(funcName)s %(message)s",
            "rename_fields": {
                "levelname": "severity",
                "asctime": "timestamp",
                "name": "logger",
            },
            "static_fields": {
                "service": "schedule-hub",
            },
        },
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "json",
            "stream": "ext://sys.stdout",
        },
    },
    "loggers": {
        # SQL echo and Slack SDK request logs are noise at INFO
        "sqlalchemy": {"level": "WARNING"},
        "slack_sdk": {"level": "WARNING"},
    },
    "root": {
        "level": "INFO",
        "handlers": ["console"],
    },
}


def configure_logging(level: str = "INFO") -> None:
    """Apply structured JSON logging configuration.

    Call once at application startup (FastAPI lifespan or CLI callback).
    All subsequent ``logging.getLogger()`` calls will emit JSON to stdout.

    Args:
        level: Root log level name, usually ``Settings.log_level``.
    """
    config = copy.deepcopy(LOGGING_CONFIG)
    config["root"]["level"] = level.upper()
    logging.config.dictConfig(config)
