"""Retention and cleanup of stored datapoint history."""

from datapoint_memory.retention.manager import RetentionManager, select_expired
from datapoint_memory.retention.scheduler import RetentionScheduler

__all__ = [
    "RetentionManager",
    "RetentionScheduler",
    "select_expired",
]
