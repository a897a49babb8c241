"""Logging configuration helpers."""

import logging

from nosh import APP_NAME


def configure_logging(level: str = "WARNING") -> None:
    """Configure nosh logging with a single stderr stream handler."""
    logger = logging.getLogger(APP_NAME)
    logger.setLevel(level.upper())
    if logger.handlers:
        return
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter("%(levelname)s: %(name)s: %(message)s"))
    logger.addHandler(handler)
    logger.propagate = False
