import logging
from typing import List, Optional

from pydantic import ValidationError
from qdrant_client import AsyncQdrantClient
from qdrant_client.models import (
    Distance,
    FieldCondition,
    Filter,
    MatchAny,
    MatchValue,
    PointIdsList,
    PointStruct,
    VectorParams,
)

from datapoint_memory.config import VectorStoreConfig
from datapoint_memory.errors import StoreUnavailable
from datapoint_memory.storage.vector.models import (
    CollectionStats,
    DatapointPayload,
    DatapointPoint,
    PointFilter,
    ScoredDatapoint,
)

logger = logging.getLogger(__name__)

SCROLL_PAGE_SIZE = 256


def build_qdrant_filter(filter: Optional[PointFilter]) -> Optional[Filter]:
    """Translate a PointFilter into a Qdrant filter (None when unrestricted)."""
    if filter is None:
        return None

    conditions = []
    if filter.datapoint_id is not None:
        conditions.append(
            FieldCondition(key="datapoint_id", match=MatchValue(value=filter.datapoint_id))
        )
    if filter.datapoint_ids is not None:
        conditions.append(
            FieldCondition(key="datapoint_id", match=MatchAny(any=list(filter.datapoint_ids)))
        )

    return Filter(must=conditions) if conditions else None


def _parse_payload(point_id, payload: Optional[dict]) -> Optional[DatapointPayload]:
    try:
        return DatapointPayload(**(payload or {}))
    except ValidationError as e:
        logger.warning(f"Skipping point {point_id} with invalid payload: {e}")
        return None


class QdrantDatapointStore:
    """
    Qdrant implementation of the VectorStoreGateway protocol.

    Stateless apart from the async client and a cache of collections known
    to exist; construct once and share.
    """

    def __init__(
        self,
        host: str = "localhost",
        port: int = 6333,
        api_key: Optional[str] = None,
        timeout: float = 10.0,
        client: Optional[AsyncQdrantClient] = None,
    ):
        """
        Initialize the Qdrant gateway.

        Args:
            host: Qdrant host (default: localhost)
            port: Qdrant port (default: 6333)
            api_key: Optional Qdrant API key
            timeout: Per-call timeout in seconds
            client: Pre-built client (overrides host/port, used in tests)
        """
        self.client = client or AsyncQdrantClient(
            host=host, port=port, api_key=api_key, timeout=int(timeout), https=False
        )
        self.url = f"http://{host}:{port}"
        self._known_collections: set[str] = set()

    @classmethod
    def from_config(cls, config: VectorStoreConfig) -> "QdrantDatapointStore":
        return cls(
            host=config.host, port=config.port, api_key=config.api_key, timeout=config.timeout
        )

    async def check_availability(self) -> bool:
        try:
            await self.client.get_collections()
        except Exception as e:
            logger.error(f"Error connecting to Qdrant at {self.url}: {e}")
            raise StoreUnavailable(f"Qdrant not reachable at {self.url}: {e}") from e

        logger.debug(f"Qdrant server available at {self.url}")
        return True

    async def ensure_collection(
        self, name: str, dimension: int, distance: str = "Cosine"
    ) -> bool:
        if name in self._known_collections:
            return False

        try:
            if await self.client.collection_exists(name):
                self._known_collections.add(name)
                return False

            try:
                await self.client.create_collection(
                    collection_name=name,
                    vectors_config=VectorParams(size=dimension, distance=Distance(distance)),
                )
            except Exception:
                # A concurrent caller may have created it between check and create
                if not await self.client.collection_exists(name):
                    raise
                self._known_collections.add(name)
                logger.debug(f"Collection {name} was created concurrently")
                return False
        except Exception as e:
            logger.error(f"Error ensuring collection {name}: {e}")
            raise StoreUnavailable(f"Failed to ensure collection {name}: {e}") from e

        self._known_collections.add(name)
        logger.info(f"Collection {name} created (size={dimension}, distance={distance})")
        return True

    async def upsert(self, collection: str, point: DatapointPoint) -> None:
        try:
            await self.client.upsert(
                collection_name=collection,
                wait=True,
                points=[
                    PointStruct(
                        id=point.id, vector=point.vector, payload=point.payload.model_dump()
                    )
                ],
            )
        except Exception as e:
            logger.error(f"Error storing point {point.id} in {collection}: {e}")
            raise StoreUnavailable(f"Upsert into {collection} failed: {e}") from e

        logger.debug(f"Upserted point {point.id}: '{point.payload.formatted_text[:50]}'")

    async def search(
        self,
        collection: str,
        vector: List[float],
        limit: int = 5,
        score_threshold: Optional[float] = None,
        filter: Optional[PointFilter] = None,
    ) -> List[ScoredDatapoint]:
        try:
            response = await self.client.query_points(
                collection_name=collection,
                query=vector,
                limit=limit,
                score_threshold=score_threshold,
                query_filter=build_qdrant_filter(filter),
                with_payload=True,
                with_vectors=False,
            )
        except Exception as e:
            logger.error(f"Qdrant search error in {collection}: {e}")
            raise StoreUnavailable(f"Search in {collection} failed: {e}") from e

        results = []
        for hit in response.points:
            payload = _parse_payload(hit.id, hit.payload)
            if payload is None:
                continue
            results.append(ScoredDatapoint(id=str(hit.id), score=hit.score, payload=payload))

        results.sort(key=lambda hit: hit.score, reverse=True)
        logger.debug(f"{len(results)} hits found in {collection}")
        return results

    async def scroll(
        self,
        collection: str,
        filter: Optional[PointFilter] = None,
        limit: int = 10000,
    ) -> List[DatapointPoint]:
        points: List[DatapointPoint] = []
        offset = None
        qdrant_filter = build_qdrant_filter(filter)

        try:
            while len(points) < limit:
                records, offset = await self.client.scroll(
                    collection_name=collection,
                    scroll_filter=qdrant_filter,
                    limit=min(SCROLL_PAGE_SIZE, limit - len(points)),
                    offset=offset,
                    with_payload=True,
                    with_vectors=False,
                )
                for record in records:
                    payload = _parse_payload(record.id, record.payload)
                    if payload is not None:
                        points.append(DatapointPoint(id=str(record.id), vector=[], payload=payload))
                if offset is None or not records:
                    break
        except Exception as e:
            logger.error(f"Qdrant scroll error in {collection}: {e}")
            raise StoreUnavailable(f"Scroll in {collection} failed: {e}") from e

        return points

    async def delete(self, collection: str, point_ids: List[str]) -> int:
        if not point_ids:
            return 0

        try:
            await self.client.delete(
                collection_name=collection,
                points_selector=PointIdsList(points=list(point_ids)),
                wait=True,
            )
        except Exception as e:
            logger.error(f"Error deleting {len(point_ids)} points from {collection}: {e}")
            raise StoreUnavailable(f"Delete in {collection} failed: {e}") from e

        logger.debug(f"Deleted {len(point_ids)} points from {collection}")
        return len(point_ids)

    async def get_collection_stats(self, collection: str) -> CollectionStats:
        try:
            info = await self.client.get_collection(collection)
        except Exception as e:
            raise StoreUnavailable(f"Failed to read collection {collection}: {e}") from e

        return CollectionStats(
            name=collection,
            points_count=info.points_count or 0,
            indexed_vectors_count=info.indexed_vectors_count or 0,
            status=str(getattr(info.status, "value", info.status)),
        )

    async def close(self) -> None:
        await self.client.close()
