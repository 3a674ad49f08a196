"""Configuration module - settings and environment management."""

from src.config.settings import (
    ConfigurationError,
    DEFAULT_API_BASE,
    DEFAULT_BATCH_MULTIPLIER,
    Settings,
    load_settings,
)

__all__ = [
    "ConfigurationError",
    "DEFAULT_API_BASE",
    "DEFAULT_BATCH_MULTIPLIER",
    "Settings",
    "load_settings",
]
