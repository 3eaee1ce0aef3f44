"""Rich logging bound to stderr; stdout carries the JSON-RPC stream."""
from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler

ROOT_LOGGER = "websearch_mcp"


def configure_logging(level: str = "INFO") -> logging.Logger:
    """Attach a single RichHandler to the package logger and set its level."""
    logger = logging.getLogger(ROOT_LOGGER)
    log_level = logging.getLevelName(level.upper())
    if not isinstance(log_level, int):
        log_level = logging.INFO
    logger.setLevel(log_level)

    if not logger.handlers:
        handler = RichHandler(
            console=Console(stderr=True),
            rich_tracebacks=True,
            show_time=True,
            show_level=True,
            show_path=False,
        )
        handler.setFormatter(logging.Formatter("%(message)s"))
        logger.addHandler(handler)
        logger.propagate = False
    return logger


def get_logger(name: str) -> logging.Logger:
    """Return a child of the package logger, e.g. ``get_logger("search")``."""
    return logging.getLogger(f"{ROOT_LOGGER}.{name}")
