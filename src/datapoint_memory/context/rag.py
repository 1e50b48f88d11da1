"""
Retrieval-augmented answers over stored datapoint history.

build_context() embeds the question, searches the collection and renders
the hits. answer() hands that context to a chat model; when the chat call
fails, the context itself is returned as the answer.
"""

import logging
from typing import Optional

from casual_llm import LLMProvider, SystemMessage, UserMessage

from datapoint_memory.config import DEFAULT_COLLECTION, ContextConfig
from datapoint_memory.context.assembler import ContextAssembler
from datapoint_memory.context.prompts import (
    ANSWER_SYSTEM_PROMPT,
    ANSWER_USER_PROMPT,
    FALLBACK_ANSWER,
    NOT_FOUND_ANSWER,
)
from datapoint_memory.embeddings.protocol import TextEmbedding
from datapoint_memory.errors import EmbeddingUnavailable, StoreUnavailable
from datapoint_memory.storage.protocols import VectorStoreGateway

logger = logging.getLogger(__name__)


class RAGContextService:
    """Builds chat context from the vector store and optionally answers with it."""

    def __init__(
        self,
        embedding: TextEmbedding,
        store: VectorStoreGateway,
        collection_name: str = DEFAULT_COLLECTION,
        assembler: Optional[ContextAssembler] = None,
        llm_provider: Optional[LLMProvider] = None,
        config: Optional[ContextConfig] = None,
        system_prompt: Optional[str] = None,
    ):
        """
        Initialize the context service.

        Args:
            embedding: Embedding provider for queries
            store: Vector store gateway
            collection_name: Collection holding datapoint points
            assembler: Context renderer (default: built from config)
            llm_provider: casual_llm provider used by answer() (optional)
            config: Retrieval settings
            system_prompt: Custom system prompt for answer()
        """
        self.embedding = embedding
        self.store = store
        self.collection_name = collection_name
        self.config = config or ContextConfig()
        self.assembler = assembler or ContextAssembler(self.config)
        self.llm_provider = llm_provider
        self.system_prompt = system_prompt or ANSWER_SYSTEM_PROMPT

    async def build_context(self, query: str, max_results: Optional[int] = None) -> str:
        """
        Render the stored points most similar to ``query``.

        Store or embedding failures yield the empty-context placeholder.
        """
        limit = self.config.max_results if max_results is None else max_results
        if limit <= 0:
            return self.config.empty_placeholder

        try:
            vector = await self.embedding.embed_query(query)
            hits = await self.store.search(
                self.collection_name,
                vector,
                limit=limit,
                score_threshold=self.config.score_threshold,
            )
        except (EmbeddingUnavailable, StoreUnavailable, ValueError) as e:
            logger.warning(f"Context retrieval failed for '{query}': {e}")
            return self.config.empty_placeholder

        logger.debug(f"Found {len(hits)} context results for '{query}'")
        return self.assembler.assemble(hits, shape="rag")

    async def answer(self, query: str, max_results: Optional[int] = None) -> str:
        """
        Answer a question from datapoint context using the chat model.

        Returns:
            The model's answer, or a context-based fallback if no provider is
            configured or the chat call fails
        """
        context = await self.build_context(query, max_results)

        if self.llm_provider is None:
            return self._fallback_answer(query, context)

        messages = [
            SystemMessage(content=self.system_prompt),
            UserMessage(content=ANSWER_USER_PROMPT.format(context=context, query=query)),
        ]
        try:
            response = await self.llm_provider.chat(
                messages, response_format="text", temperature=0.3, max_tokens=1024
            )
        except Exception as e:
            logger.error(f"Chat generation error: {e}")
            return self._fallback_answer(query, context)

        content = (response.content or "").strip()
        if not content:
            logger.warning("Empty response from chat model")
            return self._fallback_answer(query, context)
        return content

    def _fallback_answer(self, query: str, context: str) -> str:
        if context and context != self.config.empty_placeholder:
            return FALLBACK_ANSWER.format(context=context)
        return NOT_FOUND_ANSWER.format(query=query)
