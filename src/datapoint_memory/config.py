"""
Configuration models for datapoint-memory.

Loading these from files or environment variables is the host application's
job; the models only carry defaults and validate values.
"""

from typing import Optional

from pydantic import BaseModel, Field

DEFAULT_COLLECTION = "iobroker_datapoints"
NO_CONTEXT_PLACEHOLDER = "No relevant datapoint information found."


class VectorStoreConfig(BaseModel):
    """Connection settings for the Qdrant vector store."""

    host: str = Field("localhost", description="Qdrant host")
    port: int = Field(6333, ge=1, le=65535, description="Qdrant HTTP port")
    collection_name: str = Field(DEFAULT_COLLECTION, description="Collection for datapoint points")
    api_key: Optional[str] = Field(None, description="Qdrant API key (optional)")
    timeout: float = Field(10.0, gt=0, description="Per-call timeout in seconds")


class EmbeddingConfig(BaseModel):
    """Settings for the OpenAI-compatible embedding endpoint."""

    model: str = Field("nomic-embed-text", description="Embedding model name")
    base_url: Optional[str] = Field(
        None, description="OpenAI-compatible endpoint, e.g. http://ollama:11434/v1"
    )
    api_key: Optional[str] = Field(None, description="API key (None = OPENAI_API_KEY env var)")
    dimensions: Optional[int] = Field(None, gt=0, description="Output dimension if known")
    timeout: float = Field(120.0, gt=0, description="Request timeout in seconds")


class DedupConfig(BaseModel):
    """Windows for exact-value deduplication and per-datapoint rate limiting."""

    value_window_seconds: float = Field(300.0, ge=0, description="Identical (id, value) window")
    rate_limit_seconds: float = Field(30.0, ge=0, description="Minimum spacing per datapoint")
    max_entries: int = Field(1000, ge=1, description="Cache size cap")


class RetentionPolicy(BaseModel):
    """Retention limits and schedule for stored datapoint history."""

    enabled: bool = Field(True, description="Whether scheduled retention runs")
    max_age_days: float = Field(30, gt=0, description="Delete points older than this")
    max_entries: int = Field(100, ge=1, description="Keep at most this many points per datapoint")
    interval_hours: float = Field(24, gt=0, description="Hours between scheduled runs")
    initial_delay_seconds: float = Field(
        300, ge=0, description="Delay before the first scheduled run"
    )


class ResolverConfig(BaseModel):
    """Tunable thresholds for the vector stage of datapoint resolution."""

    vector_enabled: bool = Field(True, description="Use vector search as last resort")
    vector_top_k: int = Field(10, ge=1, description="Candidates fetched from the vector store")
    metadata_match_threshold: float = Field(
        0.6, ge=0.0, le=1.0, description="Min score for description/location matches"
    )
    similarity_threshold: float = Field(
        0.8, ge=0.0, le=1.0, description="Min score for similarity-only matches"
    )
    min_word_length: int = Field(3, ge=1, description="Shortest token used for word overlap")


class ContextConfig(BaseModel):
    """Settings for RAG context retrieval and rendering."""

    max_results: int = Field(5, ge=1, description="Search results fed into the context")
    score_threshold: float = Field(0.3, ge=0.0, le=1.0, description="Min similarity for context")
    empty_placeholder: str = Field(NO_CONTEXT_PLACEHOLDER)
    header: str = Field("Relevant smart home information:")
    timestamp_format: str = Field("%d.%m.%Y, %H:%M:%S", description="strftime format")


class DatapointMemoryConfig(BaseModel):
    """Aggregated configuration for DatapointMemoryService."""

    vector_store: VectorStoreConfig = Field(default_factory=VectorStoreConfig)
    embedding: EmbeddingConfig = Field(default_factory=EmbeddingConfig)
    dedup: DedupConfig = Field(default_factory=DedupConfig)
    retention: RetentionPolicy = Field(default_factory=RetentionPolicy)
    resolver: ResolverConfig = Field(default_factory=ResolverConfig)
    context: ContextConfig = Field(default_factory=ContextConfig)
