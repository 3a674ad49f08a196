"""Unit tests for the web application."""

from unittest.mock import MagicMock, patch

import pytest
from fastapi.testclient import TestClient
from jinja2 import TemplateError

from src.config.settings import Settings
from src.connectors.hacker_news import FeedFetchError, HackerNewsClient
from src.engines.item import Item
from src.web.app import create_app


class StubSource:
    """Story source returning a fixed front page."""

    def __init__(self, items: list[Item], fail_feed: bool = False):
        self._items = {item.id: item for item in items}
        self._fail_feed = fail_feed

    def top_items(self) -> list[int]:
        if self._fail_feed:
            raise FeedFetchError("Failed to fetch top stories: refused")
        return list(self._items)

    def get_item(self, item_id: int) -> Item:
        return self._items[item_id]


FRONT_PAGE = [
    Item(id=1, type="story", title="Rust in the kernel", url="https://www.lwn.net/a",
         score=300, by="alice", descendants=120),
    Item(id=2, type="job", title="Hiring at Startup", url="https://startup.com/jobs"),
    Item(id=3, type="story", title="Show HN: <script>", url="https://example.org/show",
         score=42, by="bob", descendants=7),
]


class TestIndex:
    """Tests for GET /."""

    def test_renders_stories_in_rank_order(self):
        app = create_app(Settings(num_stories=2), source=StubSource(FRONT_PAGE))

        response = TestClient(app).get("/")

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/html")
        body = response.text
        assert body.index("Rust in the kernel") < body.index("Show HN")
        assert "(lwn.net)" in body
        assert "Hiring at Startup" not in body
        assert "rendered in" in body

    def test_titles_escaped(self):
        app = create_app(Settings(num_stories=2), source=StubSource(FRONT_PAGE))

        body = TestClient(app).get("/").text

        assert "<script>" not in body
        assert "&lt;script&gt;" in body

    def test_unsafe_link_not_rendered_as_href(self):
        items = [Item(id=1, type="story", title="Click me", url="javascript:alert(1)")]
        app = create_app(Settings(num_stories=1), source=StubSource(items))

        body = TestClient(app).get("/").text

        assert "javascript:alert(1)" not in body
        assert '<a href="#">Click me</a>' in body

    def test_partial_page_notice(self):
        app = create_app(Settings(num_stories=5), source=StubSource(FRONT_PAGE))

        response = TestClient(app).get("/")

        assert response.status_code == 200
        assert "Only 2 of 5 stories could be loaded." in response.text

    def test_feed_failure_returns_500(self):
        app = create_app(Settings(), source=StubSource([], fail_feed=True))

        response = TestClient(app).get("/")

        assert response.status_code == 500
        assert response.text == "Failed to load top stories"

    def test_malformed_feed_returns_500(self):
        client = HackerNewsClient("https://hn.test/v0", session=MagicMock(headers={}))
        client._session.get.return_value.json.return_value = [1, None, 3]
        app = create_app(Settings(), source=client)

        response = TestClient(app).get("/")

        assert response.status_code == 500
        assert response.text == "Failed to load top stories"

    def test_template_failure_returns_500(self):
        app = create_app(Settings(num_stories=1), source=StubSource(FRONT_PAGE))

        with patch.object(
            app.state.templates, "TemplateResponse", side_effect=TemplateError("boom")
        ):
            response = TestClient(app).get("/")

        assert response.status_code == 500
        assert response.text == "Failed to process the template"


class TestCreateApp:
    """Tests for application wiring."""

    def test_default_source_uses_settings(self):
        settings = Settings(api_base="https://hn.test/v0", request_timeout_seconds=3.0)

        app = create_app(settings)

        assert isinstance(app.state.source, HackerNewsClient)
        assert app.state.source.api_base == "https://hn.test/v0"
        assert app.state.source.timeout == 3.0
        assert app.state.settings is settings
