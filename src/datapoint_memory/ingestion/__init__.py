"""
Write side: turning datapoint state changes into vector-store points.
"""

from datapoint_memory.ingestion.dedup import DedupAndRateLimiter
from datapoint_memory.ingestion.formatter import (
    derive_device_channel,
    derive_device_name,
    format_datapoint_text,
)
from datapoint_memory.ingestion.pipeline import IngestionPipeline, generate_point_id

__all__ = [
    "DedupAndRateLimiter",
    "IngestionPipeline",
    "derive_device_channel",
    "derive_device_name",
    "format_datapoint_text",
    "generate_point_id",
]
