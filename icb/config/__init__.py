"""Configuration management for the ICB client."""

from .loader import load_config
from .models import ConnectionConfig, LoggingConfig, Settings


__all__ = [
    "ConnectionConfig",
    "LoggingConfig",
    "Settings",
    "load_config",
]
