"""
Retention for stored datapoint history.

Every ingestion adds a point, so history grows without bound unless pruned.
Retention keeps, per datapoint, the newest ``max_entries`` points that are
also younger than ``max_age_days``. Removing a datapoint's history entirely
only happens through prune_disabled(), once the datapoint is no longer
enabled.
"""

import logging
from collections import defaultdict
from datetime import datetime, timedelta
from typing import Dict, Iterable, List, Optional

from datapoint_memory.config import DEFAULT_COLLECTION, RetentionPolicy
from datapoint_memory.models import CleanupResult, PruneResult
from datapoint_memory.storage.protocols import VectorStoreGateway
from datapoint_memory.storage.vector.models import DatapointPoint, PointFilter
from datapoint_memory.utils.timestamps import Clock, epoch_seconds, utc_now

logger = logging.getLogger(__name__)

SCROLL_LIMIT = 100_000


def select_expired(
    points: List[DatapointPoint], max_age_days: float, max_entries: int, now: datetime
) -> List[str]:
    """
    Pick the points to delete for one datapoint.

    Points are ranked newest first. A point is selected if its rank is at or
    beyond ``max_entries`` or it is older than ``max_age_days`` (union of both
    conditions). Points with unparseable timestamps count as oldest.
    """
    cutoff = (now - timedelta(days=max_age_days)).timestamp()
    ranked = sorted(points, key=lambda p: epoch_seconds(p.payload.timestamp), reverse=True)

    return [
        point.id
        for rank, point in enumerate(ranked)
        if rank >= max_entries or epoch_seconds(point.payload.timestamp) < cutoff
    ]


class RetentionManager:
    """Prunes datapoint history by age and entry count."""

    def __init__(
        self,
        store: VectorStoreGateway,
        collection_name: str = DEFAULT_COLLECTION,
        clock: Clock = utc_now,
    ):
        """
        Initialize the retention manager.

        Args:
            store: Vector store gateway
            collection_name: Collection holding datapoint points
            clock: Time source for age calculations (injectable for tests)
        """
        self.store = store
        self.collection_name = collection_name
        self._clock = clock

    async def prune_datapoint(
        self, datapoint_id: str, max_age_days: float, max_entries: int
    ) -> int:
        """
        Apply retention to a single datapoint.

        Args:
            datapoint_id: Datapoint whose history to prune
            max_age_days: Delete points older than this
            max_entries: Keep at most this many newest points

        Returns:
            Number of points removed

        Raises:
            StoreUnavailable: If the vector store fails
        """
        points = await self.store.scroll(
            self.collection_name, filter=PointFilter(datapoint_id=datapoint_id), limit=SCROLL_LIMIT
        )
        if not points:
            return 0

        to_delete = select_expired(points, max_age_days, max_entries, self._clock())
        if not to_delete:
            return 0

        await self.store.delete(self.collection_name, to_delete)
        logger.info(
            f"Removed {len(to_delete)} of {len(points)} entries for {datapoint_id} "
            f"(max_age_days={max_age_days}, max_entries={max_entries})"
        )
        return len(to_delete)

    async def prune_duplicates(self, datapoint_id: str) -> int:
        """
        Collapse a datapoint's history to its newest point.

        Returns:
            Number of points removed

        Raises:
            StoreUnavailable: If the vector store fails
        """
        points = await self.store.scroll(
            self.collection_name, filter=PointFilter(datapoint_id=datapoint_id), limit=SCROLL_LIMIT
        )
        if len(points) <= 1:
            return 0

        ranked = sorted(points, key=lambda p: epoch_seconds(p.payload.timestamp), reverse=True)
        to_delete = [point.id for point in ranked[1:]]

        await self.store.delete(self.collection_name, to_delete)
        logger.info(f"Deleted {len(to_delete)} older entries for {datapoint_id}")
        return len(to_delete)

    async def prune_all(
        self, enabled_datapoints: Iterable[str], policy: Optional[RetentionPolicy] = None
    ) -> PruneResult:
        """
        Apply retention to every enabled datapoint.

        Failures are logged per datapoint and do not abort the batch.

        Returns:
            PruneResult with processed/removed counts and the failed IDs
        """
        policy = policy or RetentionPolicy()
        result = PruneResult()

        for datapoint_id in sorted(set(enabled_datapoints)):
            try:
                result.removed += await self.prune_datapoint(
                    datapoint_id, policy.max_age_days, policy.max_entries
                )
                result.processed += 1
            except Exception as e:
                logger.error(f"Retention failed for {datapoint_id}: {e}")
                result.failed.append(datapoint_id)

        logger.info(
            f"Retention completed: processed {result.processed} datapoints, "
            f"removed {result.removed} entries, {len(result.failed)} failures"
        )
        return result

    async def prune_disabled(self, enabled_datapoints: Iterable[str]) -> int:
        """
        Delete the whole history of datapoints that are no longer enabled.

        Scans the entire collection for distinct datapoint IDs and removes
        every point whose datapoint is not in ``enabled_datapoints``.

        Returns:
            Number of disabled datapoints removed

        Raises:
            StoreUnavailable: If the collection cannot be scanned
        """
        enabled = set(enabled_datapoints)
        points = await self.store.scroll(self.collection_name, limit=SCROLL_LIMIT)

        by_datapoint: Dict[str, List[str]] = defaultdict(list)
        for point in points:
            by_datapoint[point.payload.datapoint_id].append(point.id)

        logger.info(
            f"Found {len(by_datapoint)} unique datapoints in vector database, "
            f"{len(enabled)} enabled"
        )

        disabled = sorted(set(by_datapoint) - enabled)
        if not disabled:
            logger.info("No disabled datapoints found to clean up")
            return 0

        removed = 0
        for datapoint_id in disabled:
            try:
                await self.store.delete(self.collection_name, by_datapoint[datapoint_id])
            except Exception as e:
                logger.error(f"Error removing entries for {datapoint_id}: {e}")
                continue

            removed += 1
            logger.info(
                f"Removed {len(by_datapoint[datapoint_id])} entries for disabled "
                f"datapoint: {datapoint_id}"
            )

        return removed

    async def cleanup(
        self, enabled_datapoints: Iterable[str], policy: Optional[RetentionPolicy] = None
    ) -> CleanupResult:
        """
        Complete cleanup: remove disabled datapoints, then apply retention.

        Returns:
            CleanupResult including the number of points left in the collection

        Raises:
            StoreUnavailable: If the collection cannot be scanned or read
        """
        enabled = set(enabled_datapoints)
        result = CleanupResult()

        logger.info("Starting complete vector database cleanup")
        result.disabled_removed = await self.prune_disabled(enabled)

        pruned = await self.prune_all(enabled, policy)
        result.processed = pruned.processed
        result.removed = pruned.removed
        result.errors = [f"Retention failed for {datapoint_id}" for datapoint_id in pruned.failed]

        stats = await self.store.get_collection_stats(self.collection_name)
        result.total_points_remaining = stats.points_count

        logger.info(
            f"Cleanup summary: {result.disabled_removed} disabled datapoints removed, "
            f"{result.processed} datapoints pruned ({result.removed} entries), "
            f"{result.total_points_remaining} points remaining, {len(result.errors)} errors"
        )
        return result
