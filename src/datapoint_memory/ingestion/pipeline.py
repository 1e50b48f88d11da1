"""
Ingestion pipeline for datapoint state changes.

Turns a qualifying state change into exactly one new point in the vector
store: admission control, text formatting, embedding, point construction
and upsert. Points are never updated in place; a new ingestion time gives
a new point ID.
"""

import hashlib
import logging
import uuid
from typing import Optional, Union

from datapoint_memory.config import DEFAULT_COLLECTION
from datapoint_memory.embeddings.protocol import TextEmbedding
from datapoint_memory.errors import ConfigInvalid, EmbeddingUnavailable, StoreUnavailable
from datapoint_memory.ingestion.dedup import DedupAndRateLimiter
from datapoint_memory.ingestion.formatter import (
    derive_device_channel,
    derive_device_name,
    format_datapoint_text,
)
from datapoint_memory.models import DatapointConfig, DatapointState, IngestResult
from datapoint_memory.storage.protocols import VectorStoreGateway
from datapoint_memory.storage.vector.models import DatapointPayload, DatapointPoint
from datapoint_memory.utils.timestamps import Clock, to_iso, utc_now

logger = logging.getLogger(__name__)


def generate_point_id(datapoint_id: str, timestamp: str) -> str:
    """
    Deterministic point ID for a (datapoint, ingestion time) pair.

    MD5 of ``"<id>_<timestamp>"`` rendered as a UUID, which Qdrant accepts
    as a point ID. Re-ingesting with the same timestamp overwrites the same
    point.
    """
    digest = hashlib.md5(f"{datapoint_id}_{timestamp}".encode("utf-8")).hexdigest()
    return str(uuid.UUID(hex=digest))


def validate_config(datapoint_id: str, config: DatapointConfig) -> None:
    """
    Raise ConfigInvalid if the datapoint cannot be ingested meaningfully.

    Only the ID is required. Without a description the text is still
    searchable through the device name and full ID it always ends with.
    """
    if not datapoint_id or not datapoint_id.strip():
        raise ConfigInvalid(datapoint_id, "empty datapoint ID")


class IngestionPipeline:
    """
    Writes datapoint state changes into the vector store.

    The pipeline does not retry. Failures of the embedding provider or the
    vector store propagate as EmbeddingUnavailable / StoreUnavailable and
    nothing is stored; the next state change re-attempts naturally.
    """

    def __init__(
        self,
        embedding: TextEmbedding,
        store: VectorStoreGateway,
        limiter: DedupAndRateLimiter,
        collection_name: str = DEFAULT_COLLECTION,
        clock: Clock = utc_now,
    ):
        """
        Initialize the pipeline.

        Args:
            embedding: Embedding provider for formatted texts
            store: Vector store gateway
            limiter: Dedup and rate-limit admission control
            collection_name: Target collection (created on first use)
            clock: Source of ingestion timestamps (injectable for tests)
        """
        self.embedding = embedding
        self.store = store
        self.limiter = limiter
        self.collection_name = collection_name
        self._clock = clock

        logger.info(f"IngestionPipeline initialized (collection={collection_name})")

    def build_point(
        self,
        datapoint_id: str,
        state: DatapointState,
        config: DatapointConfig,
        vector: list[float],
        formatted_text: str,
        timestamp: str,
    ) -> DatapointPoint:
        payload = DatapointPayload(
            datapoint_id=datapoint_id,
            timestamp=timestamp,
            value=state.value,
            description=config.description,
            location=config.location,
            dataType=config.data_type,
            formatted_text=formatted_text,
            allowAutoChange=config.allow_auto_change,
            booleanTrueValue=config.boolean_true_value,
            booleanFalseValue=config.boolean_false_value,
            deviceName=derive_device_name(datapoint_id),
            deviceChannel=derive_device_channel(datapoint_id),
        )
        return DatapointPoint(
            id=generate_point_id(datapoint_id, timestamp), vector=vector, payload=payload
        )

    async def ingest(
        self,
        datapoint_id: str,
        state: Union[DatapointState, dict],
        config: Union[DatapointConfig, dict, None],
    ) -> IngestResult:
        """
        Ingest one state change.

        Args:
            datapoint_id: Full dot-delimited datapoint ID
            state: New state (DatapointState or host dict with val/ts)
            config: Datapoint configuration (DatapointConfig or host custom dict)

        Returns:
            IngestResult; ``stored`` is False for disabled, duplicate or
            rate-limited events

        Raises:
            ConfigInvalid: The datapoint ID is empty
            EmbeddingUnavailable: The embedding provider failed
            StoreUnavailable: The vector store failed
        """
        if not isinstance(state, DatapointState):
            state = DatapointState.model_validate(state)
        if not isinstance(config, DatapointConfig):
            config = DatapointConfig.from_custom(config)

        if not config.embedding_enabled:
            return IngestResult(stored=False, reason="disabled")

        validate_config(datapoint_id, config)

        reason = self.limiter.admit(datapoint_id, state.value)
        if reason is not None:
            return IngestResult(stored=False, reason=reason)

        formatted_text = format_datapoint_text(datapoint_id, state.value, config)

        try:
            vector = await self.embedding.embed_document(formatted_text)
            if not vector:
                raise EmbeddingUnavailable(f"Empty embedding returned for {datapoint_id}")

            await self.store.ensure_collection(self.collection_name, len(vector), "Cosine")

            timestamp = to_iso(self._clock())
            point = self.build_point(
                datapoint_id, state, config, vector, formatted_text, timestamp
            )
            await self.store.upsert(self.collection_name, point)
        except (EmbeddingUnavailable, StoreUnavailable) as e:
            self.limiter.release(datapoint_id, state.value)
            logger.error(f"Error processing datapoint {datapoint_id}: {e}")
            raise

        logger.debug(f"Stored {datapoint_id} as point {point.id}: '{formatted_text}'")
        return IngestResult(stored=True, reason="stored", point_id=point.id)

    async def ingest_object(
        self, datapoint_id: str, state: Union[DatapointState, dict], custom: Optional[dict]
    ) -> IngestResult:
        """Ingest using a host object's raw custom settings."""
        return await self.ingest(datapoint_id, state, DatapointConfig.from_custom(custom))
