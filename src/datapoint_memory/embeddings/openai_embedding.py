"""OpenAI-compatible embedding adapter for datapoint-memory."""

import logging
import os
from typing import List, Optional

from datapoint_memory.config import EmbeddingConfig
from datapoint_memory.errors import EmbeddingUnavailable

logger = logging.getLogger(__name__)

KNOWN_DIMENSIONS = {
    "text-embedding-3-small": 1536,
    "text-embedding-3-large": 3072,
    "text-embedding-ada-002": 1536,
    "nomic-embed-text": 768,
    "mxbai-embed-large": 1024,
    "all-minilm": 384,
}


class OpenAIEmbedding:
    """
    Embedding adapter for any OpenAI-compatible embeddings API.

    Works with OpenAI itself and with local servers exposing the same API,
    such as Ollama (``http://host:11434/v1``) or OpenWebUI. Requests are
    async, so slow local hardware does not block ingestion of other
    datapoints.

    Example:
        >>> embedder = OpenAIEmbedding(
        ...     model="nomic-embed-text",
        ...     base_url="http://localhost:11434/v1",
        ... )
        >>> vector = await embedder.embed_document("Jemand ist anwesend (Zuhause)")
        >>> len(vector)
        768
    """

    def __init__(
        self,
        model: str = "nomic-embed-text",
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        dimensions: Optional[int] = None,
        timeout: float = 120.0,
        max_retries: int = 2,
    ):
        """
        Initialize the embedder.

        Args:
            model: Embedding model name (default: nomic-embed-text)
            api_key: API key (None = OPENAI_API_KEY env var; local servers accept any key)
            base_url: Custom endpoint (None = official OpenAI)
            dimensions: Requested output dimension (only for models that support it)
            timeout: Request timeout in seconds
            max_retries: Number of client-level retry attempts
        """
        try:
            from openai import AsyncOpenAI
        except ImportError as e:
            raise ImportError(
                "openai is required for OpenAIEmbedding. "
                "Install with: pip install datapoint-memory[embeddings-openai]"
            ) from e

        self._model = model
        self._dimensions = dimensions
        self._dimension = dimensions or KNOWN_DIMENSIONS.get(model)

        resolved_key = api_key or os.getenv("OPENAI_API_KEY")
        if resolved_key is None and base_url is not None:
            resolved_key = "not-needed"

        self._client = AsyncOpenAI(
            api_key=resolved_key,
            base_url=base_url,
            timeout=timeout,
            max_retries=max_retries,
        )

        logger.info(
            f"OpenAI-compatible embedder initialized: {model} "
            f"({self._dimension or 'unknown'} dimensions, base_url={base_url})"
        )

    @classmethod
    def from_config(cls, config: EmbeddingConfig) -> "OpenAIEmbedding":
        return cls(
            model=config.model,
            api_key=config.api_key,
            base_url=config.base_url,
            dimensions=config.dimensions,
            timeout=config.timeout,
        )

    @property
    def dimension(self) -> Optional[int]:
        """Vector dimension produced by this model (None until known)."""
        return self._dimension

    @property
    def model_name(self) -> str:
        return self._model

    async def _embed_single(self, text: str) -> List[float]:
        if not text or not text.strip():
            raise ValueError("Cannot embed empty text")

        kwargs = {"model": self._model, "input": text}
        if self._dimensions is not None:
            kwargs["dimensions"] = self._dimensions

        try:
            response = await self._client.embeddings.create(**kwargs)
        except Exception as e:
            logger.error(f"Error generating embedding with {self._model}: {e}")
            raise EmbeddingUnavailable(f"Embedding request failed: {e}") from e

        if not response.data or not response.data[0].embedding:
            raise EmbeddingUnavailable(f"No embeddings returned from {self._model}")

        vector = list(response.data[0].embedding)
        if self._dimension is None:
            self._dimension = len(vector)
            logger.info(f"Detected embedding dimension for {self._model}: {self._dimension}")

        return vector

    async def embed_document(self, text: str) -> List[float]:
        """
        Generate embedding for a datapoint text.

        OpenAI-style models don't distinguish documents from queries, so this
        is identical to embed_query().
        """
        return await self._embed_single(text)

    async def embed_query(self, text: str) -> List[float]:
        """Generate embedding for a search query."""
        return await self._embed_single(text)
