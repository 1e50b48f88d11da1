"""E5 embedding adapter for datapoint-memory."""

import asyncio
import logging
from typing import List, Optional

from datapoint_memory.errors import EmbeddingUnavailable

logger = logging.getLogger(__name__)


class E5Embedding:
    """
    E5 model family embedding adapter (local, via sentence-transformers).

    E5 models require specific prefixes:
    - "passage: " for datapoint texts to be stored
    - "query: " for search queries and free-text datapoint references

    The multilingual variants handle German device names well, which
    matters for smart-home installations.

    Supported E5 models:
    - intfloat/multilingual-e5-base (768 dims) - Default
    - intfloat/e5-base-v2 (768 dims)
    - intfloat/e5-small-v2 (384 dims) - Faster, smaller dimension
    """

    def __init__(
        self,
        model_name: str = "intfloat/multilingual-e5-base",
        device: Optional[str] = None,
        normalize_embeddings: bool = True,
        cache_folder: Optional[str] = None,
    ):
        """
        Initialize E5 embedder.

        Args:
            model_name: HuggingFace model identifier
            device: Device for computation ("cuda", "cpu", or None for auto)
            normalize_embeddings: L2 normalize vectors (required for cosine similarity)
            cache_folder: Directory for model cache (None = default ~/.cache)
        """
        try:
            from sentence_transformers import SentenceTransformer
        except ImportError as e:
            raise ImportError(
                "sentence-transformers is required for E5Embedding. "
                "Install with: pip install datapoint-memory[embeddings-transformers]"
            ) from e

        self._model_name = model_name
        self._normalize = normalize_embeddings

        logger.info(f"Loading E5 model: {model_name}")
        self._model = SentenceTransformer(model_name, device=device, cache_folder=cache_folder)
        self._dimension = self._model.get_sentence_embedding_dimension()
        logger.info(f"Model loaded: {model_name} ({self._dimension} dimensions)")

    @property
    def dimension(self) -> Optional[int]:
        return self._dimension

    @property
    def model_name(self) -> str:
        return self._model_name

    async def _encode(self, prefixed_text: str) -> List[float]:
        try:
            # encode() is CPU/GPU bound; keep the event loop free
            embedding = await asyncio.to_thread(
                self._model.encode,
                prefixed_text,
                normalize_embeddings=self._normalize,
                show_progress_bar=False,
            )
        except Exception as e:
            logger.error(f"E5 encoding failed: {e}")
            raise EmbeddingUnavailable(f"Local embedding failed: {e}") from e

        return embedding.tolist()

    async def embed_document(self, text: str) -> List[float]:
        """Embed a datapoint text with the "passage: " prefix."""
        if not text or not text.strip():
            raise ValueError("Cannot embed empty text")

        return await self._encode(f"passage: {text}")

    async def embed_query(self, text: str) -> List[float]:
        """Embed a query with the "query: " prefix."""
        if not text or not text.strip():
            raise ValueError("Cannot embed empty text")

        return await self._encode(f"query: {text}")
