"""
Facade tying ingestion, resolution, context and retention together.

The host application feeds state changes into ingest(), keeps the allowed
datapoint sets current with update_allowed(), and asks resolve() /
build_context() / answer() on behalf of the chat model.
"""

import logging
from typing import Iterable, Optional, Union

from casual_llm import LLMProvider
from pydantic import ValidationError

from datapoint_memory.config import DatapointMemoryConfig, RetentionPolicy
from datapoint_memory.context.assembler import ContextAssembler
from datapoint_memory.context.rag import RAGContextService
from datapoint_memory.control.controller import DatapointController
from datapoint_memory.control.protocols import HostStateStore
from datapoint_memory.embeddings.protocol import TextEmbedding
from datapoint_memory.errors import ConfigInvalid, EmbeddingUnavailable, StoreUnavailable
from datapoint_memory.ingestion.dedup import DedupAndRateLimiter
from datapoint_memory.ingestion.pipeline import IngestionPipeline
from datapoint_memory.models import (
    AllowedDatapoints,
    CleanupResult,
    DatapointConfig,
    DatapointState,
    IngestResult,
    PruneResult,
)
from datapoint_memory.resolution.resolver import DatapointResolver
from datapoint_memory.retention.manager import RetentionManager
from datapoint_memory.retention.scheduler import RetentionScheduler
from datapoint_memory.storage.cache.memory import InMemoryTTLCache
from datapoint_memory.storage.protocols import TTLCache, VectorStoreGateway

logger = logging.getLogger(__name__)


class DatapointMemoryService:
    def __init__(
        self,
        store: VectorStoreGateway,
        embedding: TextEmbedding,
        config: Optional[DatapointMemoryConfig] = None,
        cache: Optional[TTLCache] = None,
        llm_provider: Optional[LLMProvider] = None,
        host: Optional[HostStateStore] = None,
    ):
        """
        Wire up the components.

        Args:
            store: Vector store gateway
            embedding: Embedding provider
            config: Aggregated configuration (defaults throughout if None)
            cache: TTL cache for dedup/rate limiting (default: in-memory)
            llm_provider: casual_llm provider for answer() (optional)
            host: Host state access; enables the datapoint controller
        """
        self.config = config or DatapointMemoryConfig()
        collection = self.config.vector_store.collection_name

        self.store = store
        self.embedding = embedding
        self.limiter = DedupAndRateLimiter.from_config(
            cache or InMemoryTTLCache(max_entries=self.config.dedup.max_entries),
            self.config.dedup,
        )
        self.pipeline = IngestionPipeline(embedding, store, self.limiter, collection)
        self.resolver = DatapointResolver(
            embedding, store, collection, config=self.config.resolver
        )
        self.retention = RetentionManager(store, collection)
        self.scheduler = RetentionScheduler(
            self.retention, lambda: self.resolver.allowed.readable, self.config.retention
        )
        self.context = RAGContextService(
            embedding,
            store,
            collection,
            assembler=ContextAssembler(self.config.context),
            llm_provider=llm_provider,
            config=self.config.context,
        )
        self.controller = DatapointController(host, self.resolver) if host else None

    @classmethod
    def from_config(
        cls,
        config: DatapointMemoryConfig,
        llm_provider: Optional[LLMProvider] = None,
        host: Optional[HostStateStore] = None,
        cache: Optional[TTLCache] = None,
    ) -> "DatapointMemoryService":
        """
        Build a service backed by Qdrant and an OpenAI-compatible embedding endpoint.

        Raises:
            ImportError: If qdrant-client or openai are not installed
        """
        from datapoint_memory.embeddings.openai_embedding import OpenAIEmbedding
        from datapoint_memory.storage.vector.qdrant import QdrantDatapointStore

        return cls(
            store=QdrantDatapointStore.from_config(config.vector_store),
            embedding=OpenAIEmbedding.from_config(config.embedding),
            config=config,
            cache=cache,
            llm_provider=llm_provider,
            host=host,
        )

    @property
    def allowed(self) -> AllowedDatapoints:
        return self.resolver.allowed

    def update_allowed(self, readable: Iterable[str], writable: Iterable[str] = ()) -> None:
        """Replace the readable/writable sets (writable is clipped to readable)."""
        self.resolver.set_allowed(AllowedDatapoints.of(readable, writable))

    async def ingest(
        self,
        datapoint_id: str,
        state: Union[DatapointState, dict],
        config: Union[DatapointConfig, dict, None],
    ) -> IngestResult:
        """
        Ingest a state change; failures are logged and reported, never raised.
        """
        try:
            return await self.pipeline.ingest(datapoint_id, state, config)
        except (ConfigInvalid, ValidationError) as e:
            logger.warning(f"Skipping {datapoint_id}: {e}")
            return IngestResult(stored=False, reason="invalid_config", error=str(e))
        except (EmbeddingUnavailable, StoreUnavailable) as e:
            logger.error(f"Ingestion of {datapoint_id} failed: {e}")
            return IngestResult(stored=False, reason="failed", error=str(e))

    async def resolve(self, query: str) -> Optional[str]:
        return await self.resolver.resolve(query)

    async def resolve_writable(self, query: str) -> Optional[str]:
        return await self.resolver.resolve_writable(query)

    async def build_context(self, query: str, max_results: Optional[int] = None) -> str:
        return await self.context.build_context(query, max_results)

    async def answer(self, query: str, max_results: Optional[int] = None) -> str:
        return await self.context.answer(query, max_results)

    async def prune_all(
        self,
        enabled_datapoints: Optional[Iterable[str]] = None,
        policy: Optional[RetentionPolicy] = None,
    ) -> PruneResult:
        """Apply retention (default: to all readable datapoints with the configured policy)."""
        if enabled_datapoints is None:
            enabled_datapoints = self.resolver.allowed.readable
        return await self.retention.prune_all(enabled_datapoints, policy or self.config.retention)

    async def prune_duplicates(self, datapoint_id: str) -> int:
        """Keep only the newest stored point of one datapoint."""
        return await self.retention.prune_duplicates(datapoint_id)

    async def prune_disabled(self, enabled_datapoints: Optional[Iterable[str]] = None) -> int:
        if enabled_datapoints is None:
            enabled_datapoints = self.resolver.allowed.readable
        return await self.retention.prune_disabled(enabled_datapoints)

    async def cleanup(
        self,
        enabled_datapoints: Optional[Iterable[str]] = None,
        policy: Optional[RetentionPolicy] = None,
    ) -> CleanupResult:
        if enabled_datapoints is None:
            enabled_datapoints = self.resolver.allowed.readable
        return await self.retention.cleanup(enabled_datapoints, policy or self.config.retention)

    async def start(self) -> None:
        """Check the vector store and start scheduled retention."""
        await self.store.check_availability()
        await self.scheduler.start()

    async def stop(self) -> None:
        await self.scheduler.stop()
