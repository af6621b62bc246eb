# a4blend/logging_config.py
"""
Logging setup and exception types for a4blend.
"""
import logging
from pathlib import Path
from typing import Optional

from textual.logging import TextualHandler


def setup_logging(level: str = "INFO", log_file: Optional[Path] = None) -> None:
    """Configure the ``a4blend`` logger tree.

    Console output goes through textual's handler so it shows up in the
    devtools console instead of being drawn over the TUI.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional log file path
    """
    logger = logging.getLogger("a4blend")
    logger.setLevel(getattr(logging, str(level).upper(), logging.INFO))
    logger.handlers.clear()

    console_handler = TextualHandler()
    console_handler.setFormatter(logging.Formatter("%(name)s - %(levelname)s - %(message)s"))
    logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s"
        ))
        logger.addHandler(file_handler)


def get_logger(name: str) -> logging.Logger:
    """Get a logger for one module, e.g. ``get_logger("metadata")``."""
    return logging.getLogger(f"a4blend.{name}")


class A4BlendError(Exception):
    """Base exception for a4blend."""


class CatalogError(A4BlendError):
    """The music folder could not be enumerated."""


class MetadataError(A4BlendError):
    """Tag data could not be read or decoded."""


class SinkCommandError(A4BlendError):
    """The media sink rejected a command."""


class ConfigurationError(A4BlendError):
    """Configuration related errors."""
