"""Process-wide logging setup."""

from __future__ import annotations

import logging.config

from paymonitor.core.config import Settings


def configure_logging(settings: Settings) -> None:
    level = "DEBUG" if settings.debug else settings.logging.level
    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "default": {
                    "format": "%(asctime)s %(levelname)s [%(name)s] %(message)s",
                },
            },
            "handlers": {
                "console": {
                    "class": "logging.StreamHandler",
                    "formatter": "default",
                },
            },
            "loggers": {
                "paymonitor": {"handlers": ["console"], "level": level, "propagate": False},
            },
        }
    )


__all__ = ["configure_logging"]
