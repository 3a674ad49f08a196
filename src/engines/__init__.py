"""Engines module - core processing components."""

from src.engines.aggregator import (
    FetchOutcome,
    InsufficientResultsError,
    OrderedAggregator,
    fetch_items,
)
from src.engines.item import (
    EnrichedItem,
    Item,
    derive_host,
    enrich_item,
    is_story_link,
)

__all__ = [
    # Aggregator
    "FetchOutcome",
    "OrderedAggregator",
    "fetch_items",
    # Items
    "EnrichedItem",
    "Item",
    "derive_host",
    "enrich_item",
    "is_story_link",
    # Exceptions
    "InsufficientResultsError",
]
