"""Runner module for the Quiet HN server.

This module wires together settings, the web application and the server.
"""

import logging
import sys

import uvicorn

from src.config.settings import ConfigurationError, load_settings
from src.web.app import create_app


# Exit codes
EXIT_SUCCESS = 0
EXIT_CONFIG_ERROR = 1
EXIT_SERVER_ERROR = 2


def _setup_logging(verbose: bool = False) -> None:
    """Configure logging for the application.

    Args:
        verbose: If True, set log level to DEBUG. Otherwise INFO.
    """
    level = logging.DEBUG if verbose else logging.INFO

    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stdout,
    )


def run(
    port: int | None = None,
    num_stories: int | None = None,
    host: str | None = None,
    verbose: bool = False,
) -> int:
    """Run the Quiet HN web server.

    Values passed here override those loaded from the environment.

    Args:
        port: Port to listen on
        num_stories: Number of top stories to display
        host: Interface to bind to
        verbose: If True, enable verbose/debug logging.

    Returns:
        Exit code:
        - 0: Success
        - 1: Configuration error
        - 2: Server error
    """
    _setup_logging(verbose)
    logger = logging.getLogger(__name__)

    try:
        settings = load_settings(validate=False)
        if port is not None:
            settings.port = port
        if num_stories is not None:
            settings.num_stories = num_stories
        if host is not None:
            settings.host = host
        settings.validate()
        logger.info("Configuration loaded successfully")
    except ConfigurationError as e:
        logger.error(f"Configuration error: {e}")
        return EXIT_CONFIG_ERROR

    app = create_app(settings)

    logger.info(f"Server running at http://{settings.host}:{settings.port}")
    try:
        uvicorn.run(
            app,
            host=settings.host,
            port=settings.port,
            log_level="debug" if verbose else "info",
            log_config=None,
        )
    except Exception as e:
        logger.exception(f"Server failed with unexpected error: {e}")
        return EXIT_SERVER_ERROR
    finally:
        app.state.source.close()

    return EXIT_SUCCESS
