"""
Background scheduling for retention runs.

Runs RetentionManager.prune_all on a fixed interval after an initial delay,
so start-up ingestion is not competing with a full collection scan.
"""

import asyncio
import logging
from datetime import datetime
from typing import Callable, Iterable, Optional

from datapoint_memory.config import RetentionPolicy
from datapoint_memory.models import PruneResult
from datapoint_memory.retention.manager import RetentionManager
from datapoint_memory.utils.timestamps import utc_now

logger = logging.getLogger(__name__)


class RetentionScheduler:
    """
    Periodic retention task on the running event loop.

    The set of enabled datapoints is read through a callable at every run,
    so datapoints enabled or disabled after start are picked up.
    """

    def __init__(
        self,
        manager: RetentionManager,
        enabled_datapoints: Callable[[], Iterable[str]],
        policy: Optional[RetentionPolicy] = None,
    ):
        self.manager = manager
        self.enabled_datapoints = enabled_datapoints
        self.policy = policy or RetentionPolicy()
        self._task: Optional[asyncio.Task] = None
        self.last_run: Optional[datetime] = None
        self.last_result: Optional[PruneResult] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def start(self) -> None:
        """Start the scheduled task (no-op if retention is disabled or already running)."""
        if not self.policy.enabled:
            logger.debug("Retention policy disabled - skipping scheduler")
            return
        if self.running:
            logger.warning("Retention scheduler already running")
            return

        self._task = asyncio.create_task(self._run_loop())
        logger.info(
            f"Retention scheduler started (every {self.policy.interval_hours}h, "
            f"first run in {self.policy.initial_delay_seconds}s)"
        )

    async def stop(self) -> None:
        """Cancel the scheduled task and wait for it to finish."""
        if self._task is None:
            return

        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        logger.info("Retention scheduler stopped")

    async def run_once(self) -> PruneResult:
        """Run retention now for the current enabled datapoints."""
        result = await self.manager.prune_all(list(self.enabled_datapoints()), self.policy)
        self.last_run = utc_now()
        self.last_result = result
        return result

    async def _run_loop(self) -> None:
        await asyncio.sleep(self.policy.initial_delay_seconds)
        while True:
            try:
                await self.run_once()
            except Exception as e:
                logger.error(f"Retention cycle failed: {e}")
            await asyncio.sleep(self.policy.interval_hours * 3600)
