"""Utility functions for datapoint memory."""

from datapoint_memory.utils.timestamps import (
    epoch_seconds,
    format_local,
    parse_timestamp,
    to_iso,
    utc_now,
)

__all__ = [
    "epoch_seconds",
    "format_local",
    "parse_timestamp",
    "to_iso",
    "utc_now",
]
