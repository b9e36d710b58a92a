"""Console logging setup shared by the API process and the CLI runner."""
from __future__ import annotations

import logging
from logging.config import dictConfig

_configured = False


def configure_logging(level: str = "INFO") -> None:
    """Install a single console handler on the root logger.

    Safe to call more than once; only the first call takes effect.
    """

    global _configured
    if _configured:
        return

    dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "console": {
                    "format": "%(asctime)s %(levelname)s [%(name)s] %(message)s",
                },
            },
            "handlers": {
                "console": {
                    "class": "logging.StreamHandler",
                    "formatter": "console",
                },
            },
            "root": {"level": level.upper(), "handlers": ["console"]},
        }
    )
    logging.getLogger(__name__).debug("Logging configured at %s", level.upper())
    _configured = True
