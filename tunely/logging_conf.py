"""Logging configuration for the Tunely payment service.

Service loggers (``tunely.*``) follow LOG_LEVEL. The Stripe SDK logs every
request it makes at INFO, which would flood webhook and tip logs, so it is
held at WARNING.
"""
import logging
from logging.config import dictConfig

from tunely.config import LOG_LEVEL


LOGGING_CONFIG = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "default": {
            "format": "%(asctime)s %(levelname)s [%(name)s] %(message)s",
        }
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "default",
        }
    },
    "loggers": {
        "tunely": {"level": LOG_LEVEL},
        "stripe": {"level": "WARNING"},
    },
    "root": {
        "handlers": ["console"],
        "level": "WARNING",
    },
}


def configure_logging() -> None:
    dictConfig(LOGGING_CONFIG)
    logging.getLogger(__name__).debug("Logging configured at %s", LOG_LEVEL)
