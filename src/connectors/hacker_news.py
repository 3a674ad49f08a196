"""Hacker News API connector for the ranked feed and single items."""

import logging
from typing import Any

import requests

from src.engines.item import Item


logger = logging.getLogger(__name__)


class HackerNewsError(Exception):
    """Base class for Hacker News API failures."""

    pass


class FeedFetchError(HackerNewsError):
    """Raised when the ranked id feed cannot be retrieved."""

    pass


class ItemFetchError(HackerNewsError):
    """Raised when a single item cannot be retrieved."""

    def __init__(self, item_id: int, message: str):
        self.item_id = item_id
        super().__init__(f"Item {item_id}: {message}")


class HackerNewsClient:
    """Client for the Hacker News Firebase API.

    The API base is passed explicitly; requests are never retried.

    Attributes:
        api_base: Base URL of the API, without a trailing slash
        timeout: Timeout in seconds for each request
    """

    def __init__(
        self,
        api_base: str,
        timeout: float = 10.0,
        session: requests.Session | None = None,
    ):
        """Initialize the client.

        Args:
            api_base: Base URL, e.g. "https://hacker-news.firebaseio.com/v0"
            timeout: Timeout in seconds for each request
            session: Optional shared requests session
        """
        if not api_base:
            raise ValueError("api_base must not be empty")
        self.api_base = api_base.rstrip("/")
        self.timeout = timeout
        self._session = session or requests.Session()
        self._session.headers.setdefault("User-Agent", "QuietHN/1.0")

    def top_items(self) -> list[int]:
        """Return the ids of roughly 500 top items in decreasing rank.

        Job listings and other non-story items are included; their type is
        unknown without fetching each item.

        Raises:
            FeedFetchError: On network errors or a malformed payload
        """
        url = f"{self.api_base}/topstories.json"
        try:
            payload = self._get_json(url)
        except (requests.RequestException, ValueError) as e:
            logger.error(f"Failed to fetch top stories: {e}")
            raise FeedFetchError(f"Failed to fetch top stories: {e}") from e

        if not isinstance(payload, list):
            raise FeedFetchError(
                f"Expected a list of ids, got {type(payload).__name__}"
            )
        if not all(isinstance(item_id, int) and not isinstance(item_id, bool) for item_id in payload):
            raise FeedFetchError("Expected a list of integer ids")
        return list(payload)

    def get_item(self, item_id: int) -> Item:
        """Return the Item with the given id.

        Raises:
            ItemFetchError: On network errors, a malformed or wrongly typed
                payload, or an unknown item (the API answers with null)
        """
        url = f"{self.api_base}/item/{item_id}.json"
        try:
            payload = self._get_json(url)
        except (requests.RequestException, ValueError) as e:
            raise ItemFetchError(item_id, str(e)) from e

        if payload is None:
            raise ItemFetchError(item_id, "no such item")
        if not isinstance(payload, dict):
            raise ItemFetchError(
                item_id, f"expected an object, got {type(payload).__name__}"
            )
        try:
            return Item.from_payload(payload)
        except ValueError as e:
            raise ItemFetchError(item_id, str(e)) from e

    def _get_json(self, url: str) -> Any:
        response = self._session.get(url, timeout=self.timeout)
        response.raise_for_status()
        return response.json()

    def close(self) -> None:
        """Close the underlying HTTP session."""
        self._session.close()
