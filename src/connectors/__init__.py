"""Connectors module - external service integrations."""

from src.connectors.hacker_news import (
    FeedFetchError,
    HackerNewsClient,
    HackerNewsError,
    ItemFetchError,
)

__all__ = ["FeedFetchError", "HackerNewsClient", "HackerNewsError", "ItemFetchError"]
