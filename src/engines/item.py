"""Hacker News item models, validity filter and enrichment."""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any
from urllib.parse import urlparse


logger = logging.getLogger(__name__)


STORY_TYPE = "story"

# Link schemes that are safe to place in an href
LINK_SCHEMES = frozenset({"http", "https"})


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _field(payload: dict[str, Any], name: str, kind: type, default: Any) -> Any:
    """Read one payload field, falling back to default when missing or null."""
    value = payload.get(name)
    if value is None:
        return default
    valid = _is_int(value) if kind is int else isinstance(value, kind)
    if not valid:
        raise ValueError(
            f"Field '{name}' must be {kind.__name__}, got {type(value).__name__}"
        )
    return value


@dataclass
class Item:
    """Represents a single item as returned by the Hacker News API.

    An item can have a type of "story", "comment", "job" (and a few
    others). At most one of ``text`` and ``url`` is populated.

    Attributes:
        by: Username of the item's author
        descendants: Total comment count (stories and polls)
        id: Unique item identifier
        kids: Identifiers of direct child comments, in ranked order
        score: Story score
        time: Creation time as a Unix timestamp
        title: Story title
        type: Item type ("story", "comment", "job", ...)
        text: HTML body for text posts
        url: Destination link for link posts
    """
    by: str = ""
    descendants: int = 0
    id: int = 0
    kids: list[int] = field(default_factory=list)
    score: int = 0
    time: int = 0
    title: str = ""
    type: str = ""
    text: str = ""
    url: str = ""

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> "Item":
        """Build an Item from a decoded JSON payload.

        Missing or null fields fall back to their zero values.

        Raises:
            ValueError: If a field holds a value of the wrong type
        """
        kids = _field(payload, "kids", list, [])
        if not all(_is_int(kid) for kid in kids):
            raise ValueError("Field 'kids' must hold integers")

        return cls(
            by=_field(payload, "by", str, ""),
            descendants=_field(payload, "descendants", int, 0),
            id=_field(payload, "id", int, 0),
            kids=list(kids),
            score=_field(payload, "score", int, 0),
            time=_field(payload, "time", int, 0),
            title=_field(payload, "title", str, ""),
            type=_field(payload, "type", str, ""),
            text=_field(payload, "text", str, ""),
            url=_field(payload, "url", str, ""),
        )


@dataclass
class EnrichedItem:
    """An Item plus the display host derived from its link.

    Attributes:
        item: The underlying Hacker News item
        host: Hostname of the link without a leading "www.", or ""
    """
    item: Item
    host: str = ""

    @property
    def id(self) -> int:
        return self.item.id

    @property
    def title(self) -> str:
        return self.item.title

    @property
    def url(self) -> str:
        return self.item.url

    @property
    def score(self) -> int:
        return self.item.score

    @property
    def by(self) -> str:
        return self.item.by

    @property
    def descendants(self) -> int:
        return self.item.descendants

    @property
    def href(self) -> str:
        """The link if it is an http(s) URL, otherwise "#"."""
        return self.item.url if is_safe_link(self.item.url) else "#"

    @property
    def created_at(self) -> datetime:
        return datetime.fromtimestamp(self.item.time, tz=timezone.utc)


def is_story_link(item: Item) -> bool:
    """Check whether an item is valid output material.

    Args:
        item: The item to check

    Returns:
        True if the item is a story and carries a non-empty link
    """
    return item.type == STORY_TYPE and item.url != ""


def derive_host(url: str) -> str:
    """Derive the display host from a link.

    The host keeps its original case and only a lowercase "www." prefix
    is stripped; the port and any userinfo are dropped.

    Example:
        >>> derive_host("http://www.example.com/x")
        'example.com'
        >>> derive_host("http://WWW.Example.com")
        'WWW.Example.com'
        >>> derive_host("")
        ''
    """
    try:
        netloc = urlparse(url).netloc
    except ValueError as e:
        logger.debug(f"Could not parse link '{url}': {e}")
        return ""

    hostinfo = netloc.rpartition("@")[2]
    if hostinfo.startswith("["):
        hostname = hostinfo[1:].partition("]")[0]
    else:
        hostname = hostinfo.partition(":")[0]
    return hostname.removeprefix("www.")


def is_safe_link(url: str) -> bool:
    """Check whether a link uses a scheme that is safe to render as an href."""
    try:
        return urlparse(url).scheme.lower() in LINK_SCHEMES
    except ValueError:
        return False


def enrich_item(item: Item) -> EnrichedItem:
    """Wrap an item with its derived display host."""
    return EnrichedItem(item=item, host=derive_host(item.url))
