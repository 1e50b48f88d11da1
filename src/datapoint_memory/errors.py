"""
Error taxonomy for datapoint-memory.

Backend-specific exceptions (Qdrant, OpenAI, HTTP transport) are wrapped
into these types so callers can decide how to degrade without knowing
which backend is configured. "No match" is not an error: the resolver
returns ``None``.
"""


class DatapointMemoryError(Exception):
    """Base class for all datapoint-memory errors."""


class StoreUnavailable(DatapointMemoryError):
    """The vector store is unreachable, misconfigured or returned an invalid response."""


class EmbeddingUnavailable(DatapointMemoryError):
    """The embedding provider failed or returned no vector."""


class ConfigInvalid(DatapointMemoryError):
    """A datapoint cannot be ingested with the given ID or configuration."""

    def __init__(self, datapoint_id: str, reason: str):
        self.datapoint_id = datapoint_id
        self.reason = reason
        super().__init__(f"Invalid configuration for {datapoint_id}: {reason}")
