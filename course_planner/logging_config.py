import logging
import os
from logging.config import dictConfig
from typing import Optional

DEFAULT_LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"
HTTP_LOGGERS = ("httpx", "httpcore")


def configure_logging(level: Optional[str] = None) -> None:
    """Install the stream handler; ``level`` overrides ``COURSE_PLANNER_LOG_LEVEL``."""
    resolved = (level or os.getenv("COURSE_PLANNER_LOG_LEVEL", "INFO")).upper()

    dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "default": {"format": DEFAULT_LOG_FORMAT},
            },
            "handlers": {
                "stderr": {
                    "class": "logging.StreamHandler",
                    "formatter": "default",
                    "stream": "ext://sys.stderr",
                },
            },
            "root": {
                "handlers": ["stderr"],
                "level": resolved,
            },
        }
    )

    # Request lines from httpx drown out the fetch progress unless asked for.
    http_level = logging.DEBUG if os.getenv("COURSE_PLANNER_DEBUG_HTTP", "0") == "1" else logging.WARNING
    for name in HTTP_LOGGERS:
        logging.getLogger(name).setLevel(http_level)
