"""
datapoint-memory: Vector memory for smart home datapoints.

Core components:
- ingestion: State changes -> deduplicated, formatted, embedded points
- resolution: Free text -> readable datapoint IDs
- context: Search results -> chat context and answers
- retention: Age and count limits for stored history
- control: getState/setState function calls against the host
- storage: Protocol abstractions for the vector store and TTL cache
"""

__version__ = "0.1.0"

from datapoint_memory.config import DatapointMemoryConfig
from datapoint_memory.errors import (
    ConfigInvalid,
    DatapointMemoryError,
    EmbeddingUnavailable,
    StoreUnavailable,
)
from datapoint_memory.models import (
    AllowedDatapoints,
    CleanupResult,
    DatapointConfig,
    DatapointState,
    IngestResult,
    PruneResult,
)
from datapoint_memory.service import DatapointMemoryService

__all__ = [
    "__version__",
    # Models
    "AllowedDatapoints",
    "CleanupResult",
    "DatapointConfig",
    "DatapointState",
    "IngestResult",
    "PruneResult",
    # Errors
    "DatapointMemoryError",
    "ConfigInvalid",
    "EmbeddingUnavailable",
    "StoreUnavailable",
    "DatapointMemoryConfig",
    "DatapointMemoryService",
]
