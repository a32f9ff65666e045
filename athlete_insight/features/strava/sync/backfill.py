"""
Bulk stream backfill.

Fetches detail + streams for a caller-chosen set of activities, one
request at a time with a fixed pause in between. Failures are counted
and skipped; the run never stops early unless cancelled.
"""

import asyncio
import inspect
import logging
from typing import Any, Awaitable, Callable, Iterable, Optional, Union

from ..schemas import Activity, ActivityDetail, BackfillResult
from .config import SyncConfig

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, int], Union[None, Awaitable[None]]]
DetailFetcher = Callable[[int], Awaitable[ActivityDetail]]


def _activity_ids(activities: Iterable[Union[Activity, int]]) -> list[int]:
    """
    Resolve the activity set to IDs, preserving order.

    Raises:
        ValueError: The set is missing or contains something without an ID
    """
    if activities is None:
        raise ValueError("Activity set is required")

    ids = []
    for item in activities:
        activity_id = item if isinstance(item, int) else getattr(item, "id", None)
        if isinstance(activity_id, bool) or not isinstance(activity_id, int):
            raise ValueError(f"Not an activity: {item!r}")
        ids.append(activity_id)
    return ids


class StreamBackfillRunner:
    """
    Sequential detail/stream fetcher.

    Usage:
        runner = StreamBackfillRunner(detail_sync.get_activity_detail)
        result = await runner.run(activities, on_progress=print)
    """

    def __init__(
        self,
        fetch_detail: DetailFetcher,
        delay_seconds: Optional[float] = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep
    ):
        self.fetch_detail = fetch_detail
        self.delay_seconds = (
            SyncConfig.STREAM_FETCH_DELAY_SECONDS
            if delay_seconds is None else delay_seconds
        )
        self._sleep = sleep

    async def run(
        self,
        activities: Iterable[Union[Activity, int]],
        on_progress: Optional[ProgressCallback] = None,
        cancel_event: Optional[asyncio.Event] = None
    ) -> BackfillResult:
        """
        Backfill details and streams in the given order.

        Args:
            activities: Activities (or activity IDs) to process
            on_progress: Called with (current, total) after each item
            cancel_event: When set, stops before the next item

        Returns:
            BackfillResult with success/error counts

        Raises:
            ValueError: If the activity set is invalid
        """
        activity_ids = _activity_ids(activities)
        total = len(activity_ids)
        result = BackfillResult(total=total)

        for current, activity_id in enumerate(activity_ids, start=1):
            if cancel_event is not None and cancel_event.is_set():
                result.cancelled = True
                logger.info(f"Stream backfill cancelled at {current - 1}/{total}")
                break

            try:
                await self.fetch_detail(activity_id)
                result.success_count += 1
            except Exception as e:
                logger.warning(f"Error fetching streams for activity {activity_id}: {e}")
                result.error_count += 1
                result.failed_ids.append(activity_id)

            if on_progress is not None:
                outcome = on_progress(current, total)
                if inspect.isawaitable(outcome):
                    await outcome

            if current < total:
                await self._sleep(self.delay_seconds)

        logger.info(
            f"Stream backfill completed: {result.success_count} successful, "
            f"{result.error_count} failed"
        )
        return result
