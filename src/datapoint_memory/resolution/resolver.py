"""
Free-text datapoint resolution.

Maps whatever a user or a chat model calls a device ("Wohnzimmer Licht",
"licht", "0_userdata.0.Wohnzimmer_Licht") onto a full datapoint ID from the
readable set. Cheap string stages run first; vector search over stored
datapoint points is only the last resort.
"""

import logging
import re
from typing import List, Optional

from datapoint_memory.config import DEFAULT_COLLECTION, ResolverConfig
from datapoint_memory.embeddings.protocol import TextEmbedding
from datapoint_memory.errors import EmbeddingUnavailable, StoreUnavailable
from datapoint_memory.models import AllowedDatapoints
from datapoint_memory.resolution.aliases import AliasTable
from datapoint_memory.storage.protocols import VectorStoreGateway
from datapoint_memory.storage.vector.models import PointFilter, ScoredDatapoint

logger = logging.getLogger(__name__)

WORD_SPLIT = re.compile(r"[\s_\-.]+")


def _contains_either_way(text: str, query: str) -> bool:
    """Bidirectional substring check; empty text never matches."""
    return bool(text) and (query in text or text in query)


class DatapointResolver:
    """
    Resolves free text to a readable datapoint ID.

    Stages, first hit wins:

    1. Exact readable ID
    2. Alias lookup (as given, then lowercased)
    3. Substring match between the query and alias keys
    4. Full-ID containment or every query word appearing in the ID
    5. Vector search over stored points, restricted to readable datapoints

    The result is always a member of the readable set, or None.
    """

    def __init__(
        self,
        embedding: Optional[TextEmbedding] = None,
        store: Optional[VectorStoreGateway] = None,
        collection_name: str = DEFAULT_COLLECTION,
        config: Optional[ResolverConfig] = None,
        allowed: Optional[AllowedDatapoints] = None,
    ):
        """
        Initialize the resolver.

        Args:
            embedding: Embedding provider for the vector stage (optional)
            store: Vector store for the vector stage (optional)
            collection_name: Collection holding datapoint points
            config: Thresholds for the vector stage
            allowed: Initial readable/writable sets (default: nothing readable)
        """
        self.embedding = embedding
        self.store = store
        self.collection_name = collection_name
        self.config = config or ResolverConfig()
        self.allowed = AllowedDatapoints()
        self.aliases = AliasTable()

        if allowed is not None:
            self.set_allowed(allowed)

    def set_allowed(self, allowed: AllowedDatapoints) -> None:
        """Replace the readable/writable sets and rebuild the alias table."""
        self.allowed = allowed
        self.aliases = AliasTable.build(allowed.readable)
        logger.info(
            f"Datapoint mapping updated: {len(allowed.readable)} readable, "
            f"{len(allowed.writable)} writable, {len(self.aliases)} aliases"
        )

    @property
    def vector_enabled(self) -> bool:
        return (
            self.config.vector_enabled and self.embedding is not None and self.store is not None
        )

    async def resolve(self, query: str) -> Optional[str]:
        """
        Resolve free text to a readable datapoint ID.

        Args:
            query: Device name, alias or full datapoint ID

        Returns:
            Full datapoint ID, or None if nothing matches

        Raises:
            TypeError: If query is not a string
        """
        if not isinstance(query, str):
            raise TypeError(f"query must be a string, got {type(query).__name__}")

        query = query.strip()
        if not query or not self.allowed.readable:
            return None

        resolved = self._resolve_by_name(query)
        if resolved is not None:
            return resolved

        if self.vector_enabled:
            resolved = await self._resolve_by_vector(query)
            if resolved is not None:
                logger.info(f"Vector search resolved '{query}' -> {resolved}")
            return resolved

        return None

    async def resolve_writable(self, query: str) -> Optional[str]:
        """Resolve, then return the ID only if it may be written."""
        resolved = await self.resolve(query)
        if resolved is None or not self.allowed.can_write(resolved):
            return None
        return resolved

    def _resolve_by_name(self, query: str) -> Optional[str]:
        if self.allowed.can_read(query):
            return query

        lowered = query.lower()
        for key in (query, lowered):
            resolved = self.aliases.lookup(key)
            if resolved is not None:
                return resolved

        for key, datapoint_id in self.aliases.items():
            if _contains_either_way(key.lower(), lowered):
                logger.debug(f"Fuzzy matched '{query}' -> {datapoint_id}")
                return datapoint_id

        words = [
            word
            for word in WORD_SPLIT.split(lowered)
            if len(word) >= self.config.min_word_length
        ]
        for datapoint_id in sorted(self.allowed.readable):
            lowered_id = datapoint_id.lower()
            if lowered in lowered_id:
                logger.debug(f"Partial matched '{query}' -> {datapoint_id}")
                return datapoint_id
            if words and all(word in lowered_id for word in words):
                logger.debug(f"Word-based matched '{query}' -> {datapoint_id} (words: {words})")
                return datapoint_id

        return None

    async def _resolve_by_vector(self, query: str) -> Optional[str]:
        try:
            vector = await self.embedding.embed_query(query)
            hits = await self.store.search(
                self.collection_name,
                vector,
                limit=self.config.vector_top_k,
                filter=PointFilter(datapoint_ids=sorted(self.allowed.readable)),
            )
        except (EmbeddingUnavailable, StoreUnavailable) as e:
            logger.warning(f"Vector resolution failed for '{query}': {e}")
            return None

        return self._pick_hit(query, hits)

    def _pick_hit(self, query: str, hits: List[ScoredDatapoint]) -> Optional[str]:
        lowered = query.lower()

        for hit in hits:
            datapoint_id = hit.payload.datapoint_id
            if not self.allowed.can_read(datapoint_id):
                continue

            if _contains_either_way(hit.payload.deviceName.lower(), lowered):
                logger.debug(
                    f"Vector device name match: '{query}' -> {datapoint_id} "
                    f"(score={hit.score:.3f})"
                )
                return datapoint_id

            if hit.score > self.config.metadata_match_threshold and (
                _contains_either_way(hit.payload.description.lower(), lowered)
                or _contains_either_way(hit.payload.location.lower(), lowered)
            ):
                logger.debug(
                    f"Vector description/location match: '{query}' -> {datapoint_id} "
                    f"(score={hit.score:.3f})"
                )
                return datapoint_id

            if hit.score > self.config.similarity_threshold:
                logger.debug(
                    f"Vector similarity match: '{query}' -> {datapoint_id} (score={hit.score:.3f})"
                )
                return datapoint_id

        logger.debug(f"No suitable vector match for '{query}' among {len(hits)} hits")
        return None
