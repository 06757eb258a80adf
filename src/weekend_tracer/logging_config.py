"""Logging configuration for weekend-tracer."""

import logging

LOGGER_NAME = "weekend_tracer"
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(level: str = "INFO") -> logging.Logger:
    """
    Set up logging for the package.

    Installs a single console handler on the package logger. Calling this
    again only updates the level.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)

    Returns:
        The package logger
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(log_level)

    handler = next((h for h in logger.handlers if getattr(h, "_weekend_tracer", False)), None)
    if handler is None:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler._weekend_tracer = True  # type: ignore[attr-defined]
        logger.addHandler(handler)
    handler.setLevel(log_level)

    return logger
