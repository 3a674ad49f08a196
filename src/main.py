#!/usr/bin/env python3
"""Main entry point for Quiet HN.

This module provides the CLI interface for serving the front page.

Usage:
    python -m src.main                    # Serve on port 3000
    python -m src.main --port 8080        # Custom port
    python -m src.main --num-stories 50   # Show more stories
    python -m src.main -v                 # Run with verbose logging
"""

import argparse
import sys

from src.agent.runner import run


def parse_args(args: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments.

    Args:
        args: Command line arguments. If None, uses sys.argv.

    Returns:
        Parsed arguments namespace.
    """
    parser = argparse.ArgumentParser(
        prog="quiet-hn",
        description="Quiet HN - Hacker News top stories without the noise",
    )

    parser.add_argument(
        "--port",
        type=int,
        default=None,
        help="the port to start the web server on (default: 3000)",
    )

    parser.add_argument(
        "--num-stories",
        type=int,
        default=None,
        help="the number of top stories to display (default: 30)",
    )

    parser.add_argument(
        "--host",
        default=None,
        help="the interface to bind to (default: 127.0.0.1)",
    )

    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose logging output",
    )

    return parser.parse_args(args)


def main(args: list[str] | None = None) -> int:
    """Main entry point for Quiet HN.

    Args:
        args: Command line arguments. If None, uses sys.argv.

    Returns:
        Exit code (0 for success, non-zero for failure).
    """
    parsed = parse_args(args)
    return run(
        port=parsed.port,
        num_stories=parsed.num_stories,
        host=parsed.host,
        verbose=parsed.verbose,
    )


if __name__ == "__main__":
    sys.exit(main())
