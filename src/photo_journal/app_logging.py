"""Logging configuration helpers."""

import logging

_HTTP_CLIENT_LOGGERS = ("httpx", "httpcore")


def configure_logging(level: int | str = logging.INFO) -> logging.Logger:
    """Configure the ``photo_journal`` logger with a single stream handler.

    HTTP client loggers are held at WARNING; picker polling would otherwise
    log a line per request.
    """
    logger = logging.getLogger("photo_journal")
    logger.setLevel(level)
    for name in _HTTP_CLIENT_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
    if logger.handlers:
        return logger
    handler = logging.StreamHandler()
    handler.setFormatter(
        logging.Formatter("%(asctime)s %(levelname)s: %(name)s: %(message)s")
    )
    logger.addHandler(handler)
    logger.propagate = False
    return logger
