"""
Text embedding abstractions for datapoint-memory.

Provides a protocol-based embedding interface with adapters:
- OpenAIEmbedding: OpenAI-compatible APIs (OpenAI, Ollama, OpenWebUI)
- E5Embedding: local E5 models with automatic prefix handling
"""

from datapoint_memory.embeddings.protocol import TextEmbedding

__all__ = [
    "TextEmbedding",
]

# Optional adapters (import only if dependencies available)
try:
    from datapoint_memory.embeddings.e5_embedding import E5Embedding  # noqa: F401

    __all__.append("E5Embedding")
except ImportError:
    pass

try:
    from datapoint_memory.embeddings.openai_embedding import OpenAIEmbedding  # noqa: F401

    __all__.append("OpenAIEmbedding")
except ImportError:
    pass
