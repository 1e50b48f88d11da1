"""
In-memory vector storage implementation.

Provides a simple in-memory store for datapoint points with cosine similarity
search, suitable for testing and single-process deployments. For production,
use the Qdrant implementation.
"""

import logging
from typing import Dict, List, Optional

from datapoint_memory.errors import StoreUnavailable
from datapoint_memory.storage.vector.models import (
    CollectionStats,
    DatapointPoint,
    PointFilter,
    ScoredDatapoint,
)

logger = logging.getLogger(__name__)


def cosine_similarity(vec1: List[float], vec2: List[float]) -> float:
    """Calculate cosine similarity between two vectors."""
    if len(vec1) != len(vec2):
        raise ValueError("Vectors must have the same length")

    dot_product = sum(a * b for a, b in zip(vec1, vec2))
    magnitude1 = sum(a * a for a in vec1) ** 0.5
    magnitude2 = sum(b * b for b in vec2) ** 0.5

    if magnitude1 == 0 or magnitude2 == 0:
        return 0.0

    return dot_product / (magnitude1 * magnitude2)


class InMemoryDatapointStore:
    """
    In-memory implementation of the VectorStoreGateway protocol.

    Collections are dicts of point ID -> DatapointPoint. Data is lost on restart.
    Set ``available = False`` to simulate an unreachable backend.
    """

    def __init__(self):
        self._collections: Dict[str, Dict[str, DatapointPoint]] = {}
        self._dimensions: Dict[str, int] = {}
        self.available = True

        logger.info("InMemoryDatapointStore initialized")

    def _require_available(self):
        if not self.available:
            raise StoreUnavailable("In-memory store marked unavailable")

    def _collection(self, name: str) -> Dict[str, DatapointPoint]:
        self._require_available()
        if name not in self._collections:
            raise StoreUnavailable(f"Collection {name} does not exist")
        return self._collections[name]

    async def check_availability(self) -> bool:
        self._require_available()
        return True

    async def ensure_collection(
        self, name: str, dimension: int, distance: str = "Cosine"
    ) -> bool:
        self._require_available()
        if name in self._collections:
            return False

        self._collections[name] = {}
        self._dimensions[name] = dimension
        logger.info(f"Collection {name} created (size={dimension}, distance={distance})")
        return True

    async def upsert(self, collection: str, point: DatapointPoint) -> None:
        points = self._collection(collection)
        if len(point.vector) != self._dimensions[collection]:
            raise StoreUnavailable(
                f"Vector dimension {len(point.vector)} does not match "
                f"collection {collection} ({self._dimensions[collection]})"
            )
        points[point.id] = point.model_copy(deep=True)

    async def search(
        self,
        collection: str,
        vector: List[float],
        limit: int = 5,
        score_threshold: Optional[float] = None,
        filter: Optional[PointFilter] = None,
    ) -> List[ScoredDatapoint]:
        results = []

        for point in self._collection(collection).values():
            if filter is not None and not filter.matches(point.payload):
                continue

            score = cosine_similarity(vector, point.vector)
            if score_threshold is not None and score < score_threshold:
                continue

            results.append(ScoredDatapoint(id=point.id, score=score, payload=point.payload))

        results.sort(key=lambda hit: hit.score, reverse=True)
        results = results[:limit]

        logger.debug(f"{len(results)} results found (threshold={score_threshold})")
        return results

    async def scroll(
        self,
        collection: str,
        filter: Optional[PointFilter] = None,
        limit: int = 10000,
    ) -> List[DatapointPoint]:
        points = [
            point
            for point in self._collection(collection).values()
            if filter is None or filter.matches(point.payload)
        ]
        return points[:limit]

    async def delete(self, collection: str, point_ids: List[str]) -> int:
        points = self._collection(collection)
        for point_id in point_ids:
            points.pop(point_id, None)
        return len(point_ids)

    async def get_collection_stats(self, collection: str) -> CollectionStats:
        points = self._collection(collection)
        return CollectionStats(
            name=collection,
            points_count=len(points),
            indexed_vectors_count=len(points),
            status="green",
        )

    def collection_count(self) -> int:
        return len(self._collections)
