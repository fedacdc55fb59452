"""Process-wide logging setup."""
import logging
import sys

from campus_events.config import settings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(level: str | None = None) -> None:
    """Attach a single stdout handler to the package logger."""
    logger = logging.getLogger("campus_events")
    logger.setLevel((level or settings.LOG_LEVEL).upper())
    if any(getattr(h, "_campus_events", False) for h in logger.handlers):
        return
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    handler._campus_events = True
    logger.addHandler(handler)
