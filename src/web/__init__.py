"""Web module - the rendered front page."""

from src.web.app import create_app

__all__ = ["create_app"]
