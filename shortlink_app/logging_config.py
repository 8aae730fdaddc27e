"""
Logging setup for the service and the standalone sweeper worker.

Every module logs through ``logging.getLogger(__name__)``; this module only
wires handlers and formatters once at process start.
"""

import logging.config
from typing import Any, Dict

from shortlink_app.config import settings


def build_logging_config(level: str) -> Dict[str, Any]:
    level = level.upper()
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "default": {
                "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            },
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "default",
                "stream": "ext://sys.stdout",
            },
        },
        "loggers": {
            "shortlink_app": {
                "handlers": ["console"],
                "level": level,
                "propagate": False,
            },
            "main": {
                "handlers": ["console"],
                "level": level,
                "propagate": False,
            },
        },
        "root": {
            "handlers": ["console"],
            "level": "WARNING",
        },
    }


def setup_logging(level: str = settings.log_level) -> None:
    """Apply the logging configuration for the given level name."""
    logging.config.dictConfig(build_logging_config(level))
