"""Logging setup shared by the Flask app and the scripts.

Modules log through ``logging.getLogger(__name__)``; this only decides where
records go and how they are rendered (plain text or JSON lines).
"""

from __future__ import annotations

import logging.config
from typing import Any, Dict

PLAIN_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
JSON_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"


def build_logging_config(*, level: str = "INFO", json_format: bool = False) -> Dict[str, Any]:
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "standard": {"format": PLAIN_FORMAT},
            "json": {
                "()": "pythonjsonlogger.jsonlogger.JsonFormatter",
                "format": JSON_FORMAT,
            },
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "json" if json_format else "standard",
                "stream": "ext://sys.stdout",
            },
        },
        "root": {"level": level.upper(), "handlers": ["console"]},
    }


def configure_logging(*, level: str = "INFO", json_format: bool = False) -> None:
    logging.config.dictConfig(build_logging_config(level=level, json_format=json_format))
