"""
Text embedding protocol for datapoint-memory.

Provides a unified interface for turning datapoint text and user queries
into dense vectors for semantic similarity search.
"""

from typing import List, Optional, Protocol

from typing_extensions import runtime_checkable


@runtime_checkable
class TextEmbedding(Protocol):
    """
    Protocol for text embedding providers.

    All implementations must:

    1. Return vectors of a fixed dimension for a given model
    2. Raise EmbeddingUnavailable on transport, auth or empty-response errors
       (never return a placeholder vector)
    3. Raise ValueError for empty input text
    4. Implement async methods; vectors are not cached

    Example:
        >>> embedder = OpenAIEmbedding(base_url="http://ollama:11434/v1")
        >>> vector = await embedder.embed_document("Temperatur: 21.5°C (Wohnzimmer)")
        >>> len(vector) == embedder.dimension
        True
    """

    @property
    def dimension(self) -> Optional[int]:
        """
        Vector dimension produced by this embedder.

        Used to create the vector collection on first use. May be None until
        the first vector has been produced when the model is not known upfront.
        """
        ...

    @property
    def model_name(self) -> str:
        """Identifier of the embedding model (e.g., "nomic-embed-text")."""
        ...

    async def embed_document(self, text: str) -> List[float]:
        """
        Generate embedding for a datapoint text to be stored.

        Args:
            text: Formatted datapoint text

        Returns:
            Embedding vector

        Raises:
            ValueError: If text is empty
            EmbeddingUnavailable: If the provider fails
        """
        ...

    async def embed_query(self, text: str) -> List[float]:
        """
        Generate embedding for a search query or free-text datapoint reference.

        Args:
            text: Query text

        Returns:
            Embedding vector

        Raises:
            ValueError: If text is empty
            EmbeddingUnavailable: If the provider fails
        """
        ...
