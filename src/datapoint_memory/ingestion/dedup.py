"""
Deduplication and rate limiting for datapoint ingestion.

Two independent checks keyed off the datapoint ID keep redundant writes
(and the embedding calls behind them) out of the vector store:

1. Exact-value dedup: ``"<id>_<value>"`` seen within the value window
   (default 5 minutes) means the event is identical sensor chatter.
   Legitimate oscillation (on/off/on) still passes once the window has
   uncovered the earlier value.
2. Rate limit: ``"<id>_ratelimit"`` seen within the rate-limit window
   (default 30 seconds) means the datapoint was written too recently,
   whatever the value.
"""

import logging
import time
from typing import Callable, Literal, Optional

from datapoint_memory.config import DedupConfig
from datapoint_memory.models import DatapointValue
from datapoint_memory.storage.protocols import TTLCache

logger = logging.getLogger(__name__)

RejectReason = Literal["duplicate", "rate_limited"]


def value_key(datapoint_id: str, value: DatapointValue) -> str:
    if isinstance(value, bool):
        rendered = "true" if value else "false"
    elif value is None:
        rendered = "null"
    else:
        rendered = str(value)
    return f"{datapoint_id}_{rendered}"


def rate_limit_key(datapoint_id: str) -> str:
    return f"{datapoint_id}_ratelimit"


class DedupAndRateLimiter:
    """
    Time-windowed admission control for ingestion events.

    Entries hold the epoch-millis of the last admitted write. The cache's
    own TTL drops them once their window has passed; the window is also
    checked against the stored stamp so caches without TTL support behave
    the same.
    """

    def __init__(
        self,
        cache: TTLCache,
        value_window_seconds: float = 300.0,
        rate_limit_seconds: float = 30.0,
        clock: Callable[[], float] = time.time,
    ):
        """
        Initialize the limiter.

        Args:
            cache: Shared TTL cache (in-memory or Redis)
            value_window_seconds: Window for identical (id, value) pairs
            rate_limit_seconds: Minimum spacing between writes of one datapoint
            clock: Time source in seconds (injectable for tests)
        """
        self.cache = cache
        self.value_window_seconds = value_window_seconds
        self.rate_limit_seconds = rate_limit_seconds
        self._clock = clock

    @classmethod
    def from_config(
        cls, cache: TTLCache, config: DedupConfig, clock: Callable[[], float] = time.time
    ) -> "DedupAndRateLimiter":
        return cls(
            cache,
            value_window_seconds=config.value_window_seconds,
            rate_limit_seconds=config.rate_limit_seconds,
            clock=clock,
        )

    def _now_ms(self) -> int:
        return int(self._clock() * 1000)

    def _within(self, key: str, window_seconds: float, now_ms: int) -> bool:
        stamp = self.cache.get(key)
        if stamp is None:
            return False
        try:
            return now_ms - int(stamp) < window_seconds * 1000
        except (TypeError, ValueError):
            logger.warning(f"Ignoring malformed dedup stamp for {key}: {stamp!r}")
            return False

    def check(self, datapoint_id: str, value: DatapointValue) -> Optional[RejectReason]:
        """
        Check both windows without recording anything.

        Returns:
            "duplicate" or "rate_limited" if the event should be dropped, None if it passes
        """
        now_ms = self._now_ms()

        if self._within(value_key(datapoint_id, value), self.value_window_seconds, now_ms):
            return "duplicate"

        if self._within(rate_limit_key(datapoint_id), self.rate_limit_seconds, now_ms):
            return "rate_limited"

        return None

    def record(self, datapoint_id: str, value: DatapointValue) -> None:
        """Stamp both keys with the current time."""
        now_ms = self._now_ms()
        self.cache.set(value_key(datapoint_id, value), now_ms, ttl=self.value_window_seconds)
        self.cache.set(rate_limit_key(datapoint_id), now_ms, ttl=self.rate_limit_seconds)

    def admit(self, datapoint_id: str, value: DatapointValue) -> Optional[RejectReason]:
        """
        Check and, on pass, record in one step.

        There is no await between check and record, so two coroutines
        ingesting the same datapoint cannot both be admitted.

        Returns:
            None if admitted, otherwise the reason for rejection
        """
        reason = self.check(datapoint_id, value)
        if reason is not None:
            logger.debug(f"Skipping {datapoint_id}={value!r}: {reason}")
            return reason

        self.record(datapoint_id, value)
        return None

    def release(self, datapoint_id: str, value: DatapointValue) -> None:
        """
        Forget the value stamp of a failed ingestion.

        The rate-limit stamp stays, so a failing embedding API is not hit
        more often than once per rate-limit window per datapoint.
        """
        self.cache.delete(value_key(datapoint_id, value))
