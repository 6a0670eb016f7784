"""Logging configuration helpers."""

import logging

DEFAULT_LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(
    level: str = "INFO", log_format: str = DEFAULT_LOG_FORMAT
) -> None:
    """Attach one stream handler to the package logger and apply the level.

    Repeated calls only update the level, so app factories can call this
    freely. httpx request logging is held at WARNING because every backend
    call would otherwise be logged at INFO.
    """
    logger = logging.getLogger("macrocoach_photos")
    logger.setLevel(level.upper())
    logging.getLogger("httpx").setLevel(logging.WARNING)
    if logger.handlers:
        return
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(log_format))
    logger.addHandler(handler)
    logger.propagate = False
