"""Observability for the ordered aggregator.

This module provides the structured events emitted while aggregating, a
collector that folds them into run metrics, and the default logging sink.
"""

import logging
import time
from dataclasses import dataclass, field
from typing import Callable


logger = logging.getLogger(__name__)


# Event kinds
WINDOW_STARTED = "window_started"
WINDOW_COMPLETED = "window_completed"
ITEM_VALID = "item_valid"
ITEM_INVALID = "item_invalid"
ITEM_FAILED = "item_failed"
ITEM_CANCELLED = "item_cancelled"
TARGET_REACHED = "target_reached"
FINISHED = "finished"

ITEM_EVENTS = frozenset({ITEM_VALID, ITEM_INVALID, ITEM_FAILED, ITEM_CANCELLED})


@dataclass(frozen=True)
class AggregationEvent:
    """A single structured event emitted by the aggregator.

    Attributes:
        kind: One of the event kind constants in this module
        item_id: Identifier the event refers to, for item events
        window_start: Cursor position where the current window starts
        window_end: Cursor position one past the current window
        count: Accumulated valid items when the event was emitted
        detail: Free-form detail (error text for failures)
    """
    kind: str
    item_id: int | None = None
    window_start: int = 0
    window_end: int = 0
    count: int = 0
    detail: str = ""


EventHook = Callable[[AggregationEvent], None]


@dataclass
class AggregationMetrics:
    """Metrics collected during one aggregation call.

    Attributes:
        requested: Number of items requested
        returned: Number of items returned (or carried by the failure)
        windows: Number of windows processed
        valid: Items that passed the validity filter
        invalid: Items fetched but rejected by the filter
        failed: Items whose fetch raised
        cancelled: Tasks cancelled after the target was settled
        elapsed_seconds: Wall time from first window to finish
    """
    requested: int = 0
    returned: int = 0
    windows: int = 0
    valid: int = 0
    invalid: int = 0
    failed: int = 0
    cancelled: int = 0
    elapsed_seconds: float = 0.0

    @property
    def fetched(self) -> int:
        """Tasks that reported a fetch result (valid, invalid or failed)."""
        return self.valid + self.invalid + self.failed


class MetricsCollector:
    """Event hook that folds aggregation events into AggregationMetrics."""

    def __init__(self, requested: int = 0):
        self.metrics = AggregationMetrics(requested=requested)
        self._started_at: float | None = None

    def __call__(self, event: AggregationEvent) -> None:
        if event.kind == WINDOW_STARTED:
            if self._started_at is None:
                self._started_at = time.monotonic()
            self.metrics.windows += 1
        elif event.kind == ITEM_VALID:
            self.metrics.valid += 1
        elif event.kind == ITEM_INVALID:
            self.metrics.invalid += 1
        elif event.kind == ITEM_FAILED:
            self.metrics.failed += 1
        elif event.kind == ITEM_CANCELLED:
            self.metrics.cancelled += 1
        elif event.kind == FINISHED:
            self.metrics.returned = event.count
            if self._started_at is not None:
                self.metrics.elapsed_seconds = time.monotonic() - self._started_at


def log_event(event: AggregationEvent) -> None:
    """Default sink: write aggregation events to the module logger."""
    if event.kind == WINDOW_STARTED:
        logger.debug(
            f"Looking for ids in window {event.window_start}:{event.window_end}"
        )
    elif event.kind == ITEM_FAILED:
        logger.debug(f"Item {event.item_id} could not be fetched: {event.detail}")
    elif event.kind in ITEM_EVENTS:
        logger.debug(f"Item {event.item_id}: {event.kind}")
    elif event.kind == WINDOW_COMPLETED:
        logger.debug(
            f"Window {event.window_start}:{event.window_end} done, "
            f"{event.count} valid items so far"
        )
    elif event.kind == TARGET_REACHED:
        logger.debug(f"Target settled with {event.count} items, cancelling the rest")
    elif event.kind == FINISHED:
        logger.debug(f"Aggregation finished with {event.count} items")


def chain_hooks(*hooks: EventHook | None) -> EventHook:
    """Combine several event hooks into one, skipping None entries."""
    active = [hook for hook in hooks if hook is not None]

    def _emit(event: AggregationEvent) -> None:
        for hook in active:
            hook(event)

    return _emit


def log_aggregation_summary(metrics: AggregationMetrics) -> None:
    """Log a one-line summary of an aggregation call."""
    logger.info(
        f"Aggregated {metrics.returned}/{metrics.requested} stories in "
        f"{metrics.windows} window(s), {metrics.elapsed_seconds:.3f}s: "
        f"fetched={metrics.fetched} valid={metrics.valid} "
        f"invalid={metrics.invalid} failed={metrics.failed} "
        f"cancelled={metrics.cancelled}"
    )
