"""
Storage protocol definitions for datapoint memory.

These protocols define the interface that storage implementations must provide.
They are implementation-agnostic: the vector store can be backed by Qdrant or
held in memory for tests, the TTL cache by a local dict or Redis.
"""

from typing import Any, List, Optional, Protocol

from datapoint_memory.storage.vector.models import (
    CollectionStats,
    DatapointPoint,
    PointFilter,
    ScoredDatapoint,
)


class VectorStoreGateway(Protocol):
    """
    Protocol for the vector database holding datapoint points.

    Every backend failure must surface as ``StoreUnavailable``.
    """

    async def check_availability(self) -> bool:
        """
        Check that the backend answers.

        Returns:
            True if reachable

        Raises:
            StoreUnavailable: If the backend cannot be reached
        """
        ...

    async def ensure_collection(
        self, name: str, dimension: int, distance: str = "Cosine"
    ) -> bool:
        """
        Create a collection unless it already exists.

        Idempotent: calling it repeatedly with the same parameters never raises
        and never creates a second collection.

        Args:
            name: Collection name
            dimension: Vector dimension
            distance: Distance metric ("Cosine", "Dot", "Euclid")

        Returns:
            True if the collection was created by this call, False if it existed
        """
        ...

    async def upsert(self, collection: str, point: DatapointPoint) -> None:
        """
        Insert or overwrite a point by ID.

        Args:
            collection: Collection name
            point: Point to store
        """
        ...

    async def search(
        self,
        collection: str,
        vector: List[float],
        limit: int = 5,
        score_threshold: Optional[float] = None,
        filter: Optional[PointFilter] = None,
    ) -> List[ScoredDatapoint]:
        """
        Search for points by vector similarity.

        Args:
            collection: Collection name
            vector: Query embedding
            limit: Maximum number of results
            score_threshold: Minimum similarity score (None = no threshold)
            filter: Optional metadata filter

        Returns:
            Hits sorted by score descending
        """
        ...

    async def scroll(
        self,
        collection: str,
        filter: Optional[PointFilter] = None,
        limit: int = 10000,
    ) -> List[DatapointPoint]:
        """
        List points without a query vector.

        Args:
            collection: Collection name
            filter: Optional metadata filter
            limit: Maximum number of points to return

        Returns:
            Matching points in backend order (vectors may be empty)
        """
        ...

    async def delete(self, collection: str, point_ids: List[str]) -> int:
        """
        Delete points by ID.

        Args:
            collection: Collection name
            point_ids: IDs to delete

        Returns:
            Number of IDs submitted for deletion
        """
        ...

    async def get_collection_stats(self, collection: str) -> CollectionStats:
        """
        Get point counts and status of a collection.

        Args:
            collection: Collection name

        Returns:
            CollectionStats for the collection
        """
        ...


class TTLCache(Protocol):
    """
    Protocol for a bounded, time-aware key/value cache.

    Entries become invisible once their TTL has passed. Implementations may
    evict the oldest entries to bound memory.
    """

    def has(self, key: str) -> bool:
        """Return True if the key exists and has not expired."""
        ...

    def get(self, key: str) -> Optional[Any]:
        """Return the value for a live key, None otherwise."""
        ...

    def set(self, key: str, value: Any, ttl: Optional[float] = None) -> None:
        """
        Store a value.

        Args:
            key: Cache key
            value: Value to store
            ttl: Time to live in seconds (None = cache default)
        """
        ...

    def delete(self, key: str) -> bool:
        """Remove a key. Returns True if it existed."""
        ...

    def clear(self) -> None:
        """Remove all keys."""
        ...

    def size(self) -> int:
        """Number of stored keys (may include not yet purged expired keys)."""
        ...
