"""
Course access configuration.

Values are read from the environment once at import time.
"""

import logging
import os

DATABASE_URL = os.getenv("COURSE_ACCESS_DATABASE_URL", "sqlite:///./course_access.db")

DB_ECHO = os.getenv("COURSE_ACCESS_DB_ECHO", "false").lower() == "true"

LOG_LEVEL = os.getenv("COURSE_ACCESS_LOG_LEVEL", "INFO").upper()

SECONDS_PER_DAY = 60 * 60 * 24


def configure_logging(level: str = LOG_LEVEL) -> None:
    """Apply the configured log level to the course_access loggers."""
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )
    logging.getLogger("course_access").setLevel(getattr(logging, level, logging.INFO))
