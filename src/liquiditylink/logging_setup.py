"""Logging configuration."""

import logging
import sys

LOG_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"

# Chatty third-party loggers kept at WARNING
NOISY_LOGGERS = ("aiohttp", "gql", "urllib3")


def configure_logging(level: str = "INFO") -> None:
    """
    Configure root logging for the CLI and services.

    Unknown level names fall back to INFO.

    Args:
        level: Level name, e.g. "DEBUG"
    """
    numeric = logging.getLevelName(str(level).upper())
    if not isinstance(numeric, int):
        numeric = logging.INFO

    root = logging.getLogger()
    if not root.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root.addHandler(handler)
    root.setLevel(numeric)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
