"""Unit tests for the Hacker News connector."""

from unittest.mock import MagicMock

import pytest
import requests

from src.connectors.hacker_news import (
    FeedFetchError,
    HackerNewsClient,
    HackerNewsError,
    ItemFetchError,
)
from src.engines.aggregator import fetch_items
from src.engines.item import Item


API_BASE = "https://hn.test/v0"


def _response(payload=None, status_code=200, json_error=None):
    response = MagicMock()
    response.status_code = status_code
    if status_code >= 400:
        response.raise_for_status.side_effect = requests.HTTPError(
            f"{status_code} Server Error"
        )
    if json_error is not None:
        response.json.side_effect = json_error
    else:
        response.json.return_value = payload
    return response


def _client(response=None, side_effect=None) -> tuple[HackerNewsClient, MagicMock]:
    session = MagicMock()
    session.headers = {}
    if side_effect is not None:
        session.get.side_effect = side_effect
    else:
        session.get.return_value = response
    return HackerNewsClient(API_BASE, timeout=2.5, session=session), session


class TestClientConstruction:
    """Tests for explicit client configuration."""

    def test_api_base_required(self):
        with pytest.raises(ValueError):
            HackerNewsClient("")

    def test_trailing_slash_removed(self):
        client = HackerNewsClient(f"{API_BASE}/", session=MagicMock(headers={}))

        assert client.api_base == API_BASE

    def test_user_agent_set(self):
        client, session = _client(_response([]))

        assert session.headers["User-Agent"] == "QuietHN/1.0"


class TestTopItems:
    """Tests for the ranked feed."""

    def test_returns_ids_in_order(self):
        client, session = _client(_response([9, 3, 7]))

        assert client.top_items() == [9, 3, 7]
        session.get.assert_called_once_with(f"{API_BASE}/topstories.json", timeout=2.5)

    def test_network_error_raises_feed_error(self):
        client, _ = _client(side_effect=requests.ConnectionError("refused"))

        with pytest.raises(FeedFetchError, match="refused"):
            client.top_items()

    def test_http_error_raises_feed_error(self):
        client, _ = _client(_response(status_code=503))

        with pytest.raises(FeedFetchError):
            client.top_items()

    def test_non_list_payload_raises_feed_error(self):
        client, _ = _client(_response({"error": "nope"}))

        with pytest.raises(FeedFetchError, match="list of ids"):
            client.top_items()

    @pytest.mark.parametrize("payload", [[1, None, 3], [1, "2", 3], [1, True]])
    def test_non_integer_ids_raise_feed_error(self, payload):
        client, _ = _client(_response(payload))

        with pytest.raises(FeedFetchError, match="integer ids"):
            client.top_items()

    def test_feed_error_is_hacker_news_error(self):
        client, _ = _client(_response(json_error=ValueError("bad json")))

        with pytest.raises(HackerNewsError):
            client.top_items()


class TestGetItem:
    """Tests for single item lookups."""

    def test_returns_item(self):
        payload = {"id": 42, "type": "story", "title": "Hi", "url": "https://example.com"}
        client, session = _client(_response(payload))

        item = client.get_item(42)

        assert item == Item(id=42, type="story", title="Hi", url="https://example.com")
        session.get.assert_called_once_with(f"{API_BASE}/item/42.json", timeout=2.5)

    def test_null_payload_raises(self):
        client, _ = _client(_response(None))

        with pytest.raises(ItemFetchError, match="no such item") as exc_info:
            client.get_item(13)

        assert exc_info.value.item_id == 13

    def test_timeout_raises_item_error(self):
        client, _ = _client(side_effect=requests.Timeout("read timed out"))

        with pytest.raises(ItemFetchError, match="read timed out"):
            client.get_item(1)

    def test_invalid_json_raises_item_error(self):
        client, _ = _client(_response(json_error=ValueError("Expecting value")))

        with pytest.raises(ItemFetchError):
            client.get_item(1)

    def test_non_object_payload_raises(self):
        client, _ = _client(_response([1, 2]))

        with pytest.raises(ItemFetchError, match="expected an object"):
            client.get_item(1)

    def test_wrongly_typed_field_raises_item_error(self):
        client, _ = _client(_response({"id": 2, "type": "story", "url": 123}))

        with pytest.raises(ItemFetchError, match="url") as exc_info:
            client.get_item(2)

        assert exc_info.value.item_id == 2

    def test_malformed_item_skipped_by_aggregator(self):
        payloads = {
            1: {"id": 1, "type": "story", "title": "One", "url": "https://one.com"},
            2: {"id": 2, "type": "story", "title": "Two", "url": 123},
            3: {"id": 3, "type": "story", "title": "Three", "url": "https://three.com"},
        }
        client, session = _client()
        session.get.side_effect = lambda url, timeout: _response(
            payloads[int(url.rsplit("/", 1)[1].removesuffix(".json"))]
        )

        result = fetch_items([1, 2, 3], 2, client.get_item)

        assert [item.id for item in result] == [1, 3]

    def test_no_retry_on_failure(self):
        client, session = _client(side_effect=requests.ConnectionError("reset"))

        with pytest.raises(ItemFetchError):
            client.get_item(1)

        assert session.get.call_count == 1

    def test_close_closes_session(self):
        client, session = _client(_response([]))

        client.close()

        session.close.assert_called_once()
