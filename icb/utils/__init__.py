"""Utility modules for the ICB client."""

from .logging import get_logger, setup_logging

__all__ = [
    "setup_logging",
    "get_logger",
]
