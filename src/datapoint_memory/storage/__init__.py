"""
Storage protocols and implementations for datapoint memory.

Provides protocol definitions for the vector store gateway and the TTL cache
used by deduplication. Implementations can use various backends (Qdrant,
Redis, in-memory) as long as they satisfy the protocol interface.
"""

from datapoint_memory.storage.protocols import TTLCache, VectorStoreGateway
from datapoint_memory.storage.vector.models import (
    CollectionStats,
    DatapointPayload,
    DatapointPoint,
    PointFilter,
    ScoredDatapoint,
)
from datapoint_memory.storage.vector.memory import InMemoryDatapointStore
from datapoint_memory.storage.cache.memory import InMemoryTTLCache

__all__ = [
    "VectorStoreGateway",
    "TTLCache",
    "CollectionStats",
    "DatapointPayload",
    "DatapointPoint",
    "PointFilter",
    "ScoredDatapoint",
    "InMemoryDatapointStore",
    "InMemoryTTLCache",
]

try:
    from datapoint_memory.storage.vector.qdrant import QdrantDatapointStore  # noqa: F401

    __all__.append("QdrantDatapointStore")
except ImportError:
    pass

try:
    from datapoint_memory.storage.cache.redis import RedisTTLCache  # noqa: F401

    __all__.append("RedisTTLCache")
except ImportError:
    pass
