"""Logging configuration helpers."""

import logging

LOGGER_NAME = "makeup_studio"
LOG_FORMAT = "%(levelname)s: %(name)s: %(message)s"

# Chatty at INFO and below; they would log every outbound request.
_QUIET_LOGGERS = ("httpx", "httpcore", "openai")


def configure_logging(level: str | int = logging.INFO) -> logging.Logger:
    """Configure the package logger once and return it.

    Later calls only adjust the level, so repeated app factories in tests do not
    stack handlers.
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(_resolve_level(level))
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
    if logger.handlers:
        return logger
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(handler)
    logger.propagate = False
    return logger


def _resolve_level(level: str | int) -> int:
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(level.strip().upper())
    return resolved if isinstance(resolved, int) else logging.INFO
