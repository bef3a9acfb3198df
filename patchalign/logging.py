import logging
import os

LOGGER_NAME = "patchalign"
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def parse_level(raw: str | None, default: int = logging.WARNING) -> int:
    if not raw:
        return default
    level = logging.getLevelName(raw.strip().upper())
    return level if isinstance(level, int) else default


def setup_logging(level: int | str | None = None) -> logging.Logger:
    """
    Configure the `patchalign` logger.

    Attaches a single stderr handler; calling it again only updates the level.
    The level defaults to `PATCHALIGN_LOG_LEVEL`, then WARNING.
    """

    if level is None:
        level = parse_level(os.getenv("PATCHALIGN_LOG_LEVEL"))
    elif isinstance(level, str):
        level = parse_level(level)

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)
    logger.propagate = False

    if not any(getattr(h, "_patchalign_handler", False) for h in logger.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler._patchalign_handler = True
        logger.addHandler(handler)

    return logger


def get_logger(name: str) -> logging.Logger:
    """
    Public helper for code embedding patchalign.

    Package modules use `logging.getLogger(__name__)` directly; this returns
    the same logger objects, so handlers set up by `setup_logging` apply.
    """
    return logging.getLogger(name)
