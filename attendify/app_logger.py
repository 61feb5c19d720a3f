"""Logging setup for the attendify package."""

import logging

from attendify import settings

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
_DEFAULT_LEVEL = settings.LOG_LEVEL


def setup_logging() -> logging.Logger:
    """Configure the attendify logger once and return it."""
    logger = logging.getLogger("attendify")
    logger.setLevel(getattr(logging, _DEFAULT_LEVEL, logging.INFO))

    # Avoid duplicate console handlers on re-import
    if not any(isinstance(h, logging.StreamHandler) for h in logger.handlers):
        ch = logging.StreamHandler()
        ch.setFormatter(logging.Formatter(LOG_FORMAT))
        ch.setLevel(logger.level)
        logger.addHandler(ch)

    logger.propagate = False
    return logger


def get_logger(name: str | None = None) -> logging.Logger:
    """Get the attendify logger or one of its children."""
    base = logging.getLogger("attendify")
    return base.getChild(name) if name else base


logger = setup_logging()
