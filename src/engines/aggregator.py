"""Ordered concurrent aggregation of valid items from a ranked id feed.

The ranked feed carries no type information, so every candidate has to be
fetched before it can be judged. Ids are fetched concurrently in windows;
the coordinating thread collects one outcome per task, keeps the valid
ones in an id-keyed accumulator and finally rebuilds the original rank
order from the id sequence.
"""

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from typing import Callable, Sequence

from src.config.settings import DEFAULT_BATCH_MULTIPLIER
from src.engines.item import EnrichedItem, Item, enrich_item, is_story_link
from src.engines.observability import (
    FINISHED,
    ITEM_CANCELLED,
    ITEM_FAILED,
    ITEM_INVALID,
    ITEM_VALID,
    TARGET_REACHED,
    WINDOW_COMPLETED,
    WINDOW_STARTED,
    AggregationEvent,
    EventHook,
    log_event,
)


logger = logging.getLogger(__name__)


FetchItem = Callable[[int], Item]

# Outcome statuses
VALID = "valid"
INVALID = "invalid"
FAILED = "failed"
CANCELLED = "cancelled"

_STATUS_EVENTS = {
    VALID: ITEM_VALID,
    INVALID: ITEM_INVALID,
    FAILED: ITEM_FAILED,
    CANCELLED: ITEM_CANCELLED,
}


class InsufficientResultsError(Exception):
    """Raised when the id sequence runs out before enough valid items are found.

    Attributes:
        items: The valid items that were found, in rank order
        requested: The number of items that was asked for
    """

    def __init__(self, items: list[EnrichedItem], requested: int):
        self.items = items
        self.requested = requested
        super().__init__(
            f"Found {len(items)} valid items, {requested} were requested"
        )


@dataclass(frozen=True)
class FetchOutcome:
    """The single result reported by one fetch task.

    Attributes:
        item_id: Identifier the task was launched for
        status: One of VALID, INVALID, FAILED, CANCELLED
        item: The enriched item when status is VALID
        error: Error text when status is FAILED
    """
    item_id: int
    status: str
    item: EnrichedItem | None = None
    error: str = ""


def fetch_valid_item(
    fetch_item: FetchItem,
    item_id: int,
    stop: threading.Event,
) -> FetchOutcome:
    """Fetch, filter and enrich one item, reporting exactly one outcome.

    A fetch error and a failed validity check both mean "not usable";
    neither is retried.
    """
    if stop.is_set():
        return FetchOutcome(item_id=item_id, status=CANCELLED)

    try:
        item = fetch_item(item_id)
    except Exception as e:
        return FetchOutcome(item_id=item_id, status=FAILED, error=str(e))

    try:
        if not is_story_link(item):
            return FetchOutcome(item_id=item_id, status=INVALID)
        enriched = enrich_item(item)
    except Exception as e:
        return FetchOutcome(item_id=item_id, status=FAILED, error=str(e))

    return FetchOutcome(item_id=item_id, status=VALID, item=enriched)


def window_size_for(count: int, batch_multiplier: float = DEFAULT_BATCH_MULTIPLIER) -> int:
    """Number of ids fetched per window for a target count.

    Example:
        >>> window_size_for(30)
        35
    """
    return max(1, int(count * batch_multiplier))


def assemble_in_rank_order(
    ids: Sequence[int],
    accumulator: dict[int, EnrichedItem],
    count: int,
) -> list[EnrichedItem]:
    """Rebuild rank order from the id sequence.

    Each accumulated id is emitted once, at its first position in ``ids``.
    Scanning stops after ``count`` items or once every accumulated item
    has been emitted.
    """
    ordered: list[EnrichedItem] = []
    emitted: set[int] = set()

    for item_id in ids:
        if len(ordered) >= count or len(emitted) == len(accumulator):
            break
        if item_id in accumulator and item_id not in emitted:
            ordered.append(accumulator[item_id])
            emitted.add(item_id)

    return ordered


class OrderedAggregator:
    """Collects the top N valid items from a ranked id sequence.

    Attributes:
        fetch_item: Callable returning the Item for an id, raising on failure
        batch_multiplier: Window size factor applied to the target count
        window_size: Fixed window size, overriding batch_multiplier
        max_workers: Cap on concurrent fetches (None = one per window slot)
        on_event: Hook receiving AggregationEvents, called on the
                  coordinating thread only
    """

    def __init__(
        self,
        fetch_item: FetchItem,
        *,
        batch_multiplier: float = DEFAULT_BATCH_MULTIPLIER,
        window_size: int | None = None,
        max_workers: int | None = None,
        on_event: EventHook | None = None,
    ):
        if batch_multiplier < 1.0:
            raise ValueError("batch_multiplier must be at least 1.0")
        if window_size is not None and window_size < 1:
            raise ValueError("window_size must be at least 1")
        if max_workers is not None and max_workers < 1:
            raise ValueError("max_workers must be at least 1")

        self.fetch_item = fetch_item
        self.batch_multiplier = batch_multiplier
        self.window_size = window_size
        self.max_workers = max_workers
        self.on_event = on_event or log_event

    def fetch(self, ids: Sequence[int], count: int) -> list[EnrichedItem]:
        """Fetch the first ``count`` valid items of ``ids`` in rank order.

        Args:
            ids: Ranked identifiers, possibly empty or with duplicates
            count: Number of valid items wanted

        Returns:
            Exactly ``count`` enriched items, ordered as their ids in ``ids``

        Raises:
            ValueError: If count is less than 1
            InsufficientResultsError: If ``ids`` holds fewer than ``count``
                valid items; the partial ordered list is attached
        """
        if count < 1:
            raise ValueError("count must be at least 1")

        window = self.window_size or window_size_for(count, self.batch_multiplier)
        accumulator: dict[int, EnrichedItem] = {}
        attempted: set[int] = set()
        stop = threading.Event()

        with ThreadPoolExecutor(max_workers=self.max_workers or window) as executor:
            cursor = 0
            while len(accumulator) < count and cursor < len(ids):
                end = min(cursor + window, len(ids))
                self._run_window(
                    executor, ids, cursor, end, accumulator, attempted, count, stop
                )
                cursor = end

        stories = assemble_in_rank_order(ids, accumulator, count)
        self.on_event(AggregationEvent(kind=FINISHED, count=len(stories)))

        if len(stories) < count:
            raise InsufficientResultsError(stories, count)
        return stories

    def _run_window(
        self,
        executor: ThreadPoolExecutor,
        ids: Sequence[int],
        start: int,
        end: int,
        accumulator: dict[int, EnrichedItem],
        attempted: set[int],
        count: int,
        stop: threading.Event,
    ) -> None:
        """Fetch one window and wait for every task it launched."""
        self.on_event(AggregationEvent(
            kind=WINDOW_STARTED, window_start=start, window_end=end,
            count=len(accumulator),
        ))

        # Duplicates and ids seen by an earlier window are not refetched
        pending = [
            item_id for item_id in dict.fromkeys(ids[start:end])
            if item_id not in attempted
        ]
        attempted.update(pending)
        futures: dict[Future, int] = {
            executor.submit(fetch_valid_item, self.fetch_item, item_id, stop): item_id
            for item_id in pending
        }

        unresolved = set(pending)
        settled = len(accumulator)
        frontier = 0

        for future in as_completed(futures):
            item_id = futures[future]
            if future.cancelled():
                outcome = FetchOutcome(item_id=item_id, status=CANCELLED)
            else:
                outcome = future.result()

            unresolved.discard(item_id)
            if outcome.status == VALID:
                accumulator[item_id] = outcome.item

            self.on_event(AggregationEvent(
                kind=_STATUS_EVENTS[outcome.status], item_id=item_id,
                window_start=start, window_end=end, count=len(accumulator),
                detail=outcome.error,
            ))

            if stop.is_set():
                continue

            # Valid items ranked ahead of every still-running task are final
            while frontier < len(pending) and pending[frontier] not in unresolved:
                if pending[frontier] in accumulator:
                    settled += 1
                frontier += 1

            if settled >= count:
                stop.set()
                for other in futures:
                    other.cancel()
                self.on_event(AggregationEvent(
                    kind=TARGET_REACHED, window_start=start, window_end=end,
                    count=settled,
                ))

        self.on_event(AggregationEvent(
            kind=WINDOW_COMPLETED, window_start=start, window_end=end,
            count=len(accumulator),
        ))


def fetch_items(
    ids: Sequence[int],
    count: int,
    fetch_item: FetchItem,
    *,
    batch_multiplier: float = DEFAULT_BATCH_MULTIPLIER,
    window_size: int | None = None,
    max_workers: int | None = None,
    on_event: EventHook | None = None,
) -> list[EnrichedItem]:
    """Fetch the first ``count`` valid items of ``ids`` in rank order.

    Convenience wrapper around OrderedAggregator.fetch.

    Raises:
        InsufficientResultsError: If fewer than ``count`` valid items exist.
    """
    aggregator = OrderedAggregator(
        fetch_item,
        batch_multiplier=batch_multiplier,
        window_size=window_size,
        max_workers=max_workers,
        on_event=on_event,
    )
    return aggregator.fetch(ids, count)
