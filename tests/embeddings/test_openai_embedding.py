"""Tests for the OpenAI-compatible embedding adapter."""

from types import SimpleNamespace
from unittest.mock import AsyncMock, Mock

import pytest

from datapoint_memory.config import EmbeddingConfig
from datapoint_memory.errors import EmbeddingUnavailable


@pytest.fixture
def mock_openai_env(monkeypatch):
    """Set mock OpenAI API key for testing."""
    monkeypatch.setenv("OPENAI_API_KEY", "sk-test-key-for-testing")


@pytest.fixture
def embedder(mock_openai_env):
    pytest.importorskip("openai")

    from datapoint_memory.embeddings import OpenAIEmbedding

    embedder = OpenAIEmbedding(model="nomic-embed-text", base_url="http://ollama:11434/v1")
    embedder._client = Mock()
    embedder._client.embeddings.create = AsyncMock(
        return_value=SimpleNamespace(data=[SimpleNamespace(embedding=[0.1, 0.2, 0.3])])
    )
    return embedder


def test_openai_default_dimensions(mock_openai_env):
    """Test default dimensions for known models."""
    pytest.importorskip("openai")

    from datapoint_memory.embeddings import OpenAIEmbedding

    assert OpenAIEmbedding(model="text-embedding-3-small").dimension == 1536
    assert OpenAIEmbedding(model="text-embedding-3-large").dimension == 3072
    assert OpenAIEmbedding(model="nomic-embed-text").dimension == 768


def test_openai_custom_dimensions(mock_openai_env):
    """Test custom dimension configuration."""
    pytest.importorskip("openai")

    from datapoint_memory.embeddings import OpenAIEmbedding

    for dim in [512, 768, 1024]:
        embedder = OpenAIEmbedding(model="text-embedding-3-small", dimensions=dim)
        assert embedder.dimension == dim


def test_local_server_without_api_key(monkeypatch):
    """Local OpenAI-compatible servers work without OPENAI_API_KEY."""
    pytest.importorskip("openai")
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)

    from datapoint_memory.embeddings import OpenAIEmbedding

    embedder = OpenAIEmbedding(model="mxbai-embed-large", base_url="http://ollama:11434/v1")
    assert embedder.model_name == "mxbai-embed-large"


def test_from_config(mock_openai_env):
    pytest.importorskip("openai")

    from datapoint_memory.embeddings import OpenAIEmbedding

    embedder = OpenAIEmbedding.from_config(
        EmbeddingConfig(model="custom-model", base_url="http://localhost:11434/v1")
    )

    assert embedder.model_name == "custom-model"
    assert embedder.dimension is None


@pytest.mark.asyncio
async def test_embed_document(embedder):
    vector = await embedder.embed_document("Jemand ist anwesend (Zuhause)")

    assert vector == [0.1, 0.2, 0.3]
    embedder._client.embeddings.create.assert_awaited_once_with(
        model="nomic-embed-text", input="Jemand ist anwesend (Zuhause)"
    )


@pytest.mark.asyncio
async def test_unknown_dimension_detected_on_first_call(mock_openai_env):
    pytest.importorskip("openai")

    from datapoint_memory.embeddings import OpenAIEmbedding

    embedder = OpenAIEmbedding(model="custom-model", base_url="http://localhost:11434/v1")
    embedder._client = Mock()
    embedder._client.embeddings.create = AsyncMock(
        return_value=SimpleNamespace(data=[SimpleNamespace(embedding=[0.5] * 5)])
    )

    assert embedder.dimension is None
    await embedder.embed_query("Wohnzimmer")
    assert embedder.dimension == 5


@pytest.mark.asyncio
async def test_requested_dimensions_passed(mock_openai_env):
    pytest.importorskip("openai")

    from datapoint_memory.embeddings import OpenAIEmbedding

    embedder = OpenAIEmbedding(model="text-embedding-3-small", dimensions=256)
    embedder._client = Mock()
    embedder._client.embeddings.create = AsyncMock(
        return_value=SimpleNamespace(data=[SimpleNamespace(embedding=[0.5] * 256)])
    )

    await embedder.embed_query("x")

    assert embedder._client.embeddings.create.call_args.kwargs["dimensions"] == 256


@pytest.mark.asyncio
async def test_empty_text_raises(embedder):
    with pytest.raises(ValueError, match="Cannot embed empty text"):
        await embedder.embed_document("   ")

    embedder._client.embeddings.create.assert_not_awaited()


@pytest.mark.asyncio
async def test_request_failure_is_embedding_unavailable(embedder):
    embedder._client.embeddings.create.side_effect = ConnectionError("refused")

    with pytest.raises(EmbeddingUnavailable):
        await embedder.embed_query("Wohnzimmer")


@pytest.mark.asyncio
async def test_empty_response_is_embedding_unavailable(embedder):
    embedder._client.embeddings.create.return_value = SimpleNamespace(data=[])

    with pytest.raises(EmbeddingUnavailable):
        await embedder.embed_document("Wohnzimmer")
