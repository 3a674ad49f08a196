"""Workflow for loading the Quiet HN front page.

This module coordinates the ranked feed, the ordered aggregator and the
run metrics for one page request.
"""

import logging
import time
from dataclasses import dataclass
from typing import Protocol, runtime_checkable

from src.config.settings import Settings
from src.engines.aggregator import InsufficientResultsError, OrderedAggregator
from src.engines.item import EnrichedItem, Item
from src.engines.observability import (
    AggregationMetrics,
    EventHook,
    MetricsCollector,
    chain_hooks,
    log_aggregation_summary,
    log_event,
)


logger = logging.getLogger(__name__)


@runtime_checkable
class StorySource(Protocol):
    """Protocol for the ranked feed and item lookups."""

    def top_items(self) -> list[int]:
        """Return ranked item ids."""
        ...

    def get_item(self, item_id: int) -> Item:
        """Return a single item, raising on failure."""
        ...


@dataclass
class PageResult:
    """Result of loading the front page.

    Attributes:
        stories: Valid stories in rank order
        requested: Number of stories that was asked for
        elapsed_seconds: Time spent loading the page
        metrics: Aggregation metrics for the request
    """
    stories: list[EnrichedItem]
    requested: int
    elapsed_seconds: float
    metrics: AggregationMetrics

    @property
    def complete(self) -> bool:
        """Whether the page holds as many stories as requested."""
        return len(self.stories) >= self.requested


def load_front_page(
    source: StorySource,
    settings: Settings,
    on_event: EventHook | None = None,
) -> PageResult:
    """Load the top valid stories for the front page.

    Fewer stories than requested is not an error here: the shortfall is
    logged and the partial list is returned.

    Args:
        source: Ranked feed and item lookup, usually a HackerNewsClient
        settings: Configuration settings
        on_event: Optional extra hook for aggregation events

    Returns:
        PageResult with the stories and metrics

    Raises:
        FeedFetchError: If the ranked id feed cannot be retrieved
    """
    start = time.monotonic()

    ids = source.top_items()
    logger.debug(f"Ranked feed returned {len(ids)} ids")

    collector = MetricsCollector(requested=settings.num_stories)
    aggregator = OrderedAggregator(
        source.get_item,
        batch_multiplier=settings.batch_multiplier,
        max_workers=settings.max_workers or None,
        on_event=chain_hooks(log_event, collector, on_event),
    )

    try:
        stories = aggregator.fetch(ids, settings.num_stories)
    except InsufficientResultsError as e:
        logger.warning(f"Could not load {settings.num_stories} stories: {e}")
        stories = e.items

    log_aggregation_summary(collector.metrics)

    return PageResult(
        stories=stories,
        requested=settings.num_stories,
        elapsed_seconds=time.monotonic() - start,
        metrics=collector.metrics,
    )
