"""Configuration settings for the Quiet HN server."""

from dataclasses import dataclass
from pathlib import Path
import os

from dotenv import load_dotenv


# Public Hacker News Firebase API
DEFAULT_API_BASE = "https://hacker-news.firebaseio.com/v0"

# 30 stories * 1.17 gives a first window of 35 ids
DEFAULT_BATCH_MULTIPLIER = 1.17


class ConfigurationError(Exception):
    """Raised when configuration validation fails."""

    pass


@dataclass
class Settings:
    """Configuration settings for the Quiet HN server.

    Attributes:
        api_base: Base URL of the Hacker News API
        num_stories: Number of top stories to display
        port: Port the web server listens on
        host: Interface the web server binds to
        batch_multiplier: Window size factor applied to num_stories
        request_timeout_seconds: Timeout for a single HTTP request
        max_workers: Cap on concurrent fetches per window (0 = one per id)
    """

    api_base: str = DEFAULT_API_BASE
    num_stories: int = 30
    port: int = 3000
    host: str = "127.0.0.1"
    batch_multiplier: float = DEFAULT_BATCH_MULTIPLIER
    request_timeout_seconds: float = 10.0
    max_workers: int = 0

    def validate(self) -> None:
        """Validate configuration values.

        Raises:
            ConfigurationError: If any configuration value is invalid.
        """
        errors: list[str] = []

        if not self.api_base:
            errors.append("api_base must not be empty")

        if self.num_stories < 1:
            errors.append("num_stories must be at least 1")

        if self.port < 1 or self.port > 65535:
            errors.append("port must be between 1 and 65535")

        if self.batch_multiplier < 1.0:
            errors.append("batch_multiplier must be at least 1.0")

        if self.request_timeout_seconds <= 0.0:
            errors.append("request_timeout_seconds must be positive")

        if self.max_workers < 0:
            errors.append("max_workers must be non-negative")

        if errors:
            raise ConfigurationError("; ".join(errors))


def _parse_float(value: str | None, default: float) -> float:
    """Parse a string to float, returning default if None or invalid."""
    if value is None:
        return default
    try:
        return float(value)
    except ValueError:
        return default


def _parse_int(value: str | None, default: int) -> int:
    """Parse a string to int, returning default if None or invalid."""
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        return default


def load_settings(env_path: str | Path | None = None, validate: bool = True) -> Settings:
    """Load settings from environment variables and .env file.

    Args:
        env_path: Optional path to .env file. If None, searches for .env
                  in current directory and parent directories.
        validate: If True, validate settings after loading.

    Returns:
        Settings instance with loaded configuration.

    Raises:
        ConfigurationError: If validate=True and configuration is invalid.
    """
    if env_path:
        load_dotenv(env_path)
    else:
        load_dotenv()

    settings = Settings(
        api_base=os.getenv("HN_API_BASE", DEFAULT_API_BASE).rstrip("/"),
        num_stories=_parse_int(os.getenv("NUM_STORIES"), 30),
        port=_parse_int(os.getenv("PORT"), 3000),
        host=os.getenv("HOST", "127.0.0.1"),
        batch_multiplier=_parse_float(
            os.getenv("BATCH_MULTIPLIER"), DEFAULT_BATCH_MULTIPLIER
        ),
        request_timeout_seconds=_parse_float(
            os.getenv("REQUEST_TIMEOUT_SECONDS"), 10.0
        ),
        max_workers=_parse_int(os.getenv("MAX_WORKERS"), 0),
    )

    if validate:
        settings.validate()

    return settings
