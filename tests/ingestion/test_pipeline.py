"""
Unit tests for the ingestion pipeline.

Uses the in-memory vector store and a mocked embedding provider with fake
clocks, so dedup and rate-limit windows can be stepped through precisely.
"""

from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock, Mock

import pytest

from datapoint_memory.errors import ConfigInvalid, EmbeddingUnavailable, StoreUnavailable
from datapoint_memory.ingestion.dedup import DedupAndRateLimiter
from datapoint_memory.ingestion.pipeline import IngestionPipeline, generate_point_id
from datapoint_memory.models import DatapointConfig, DatapointState
from datapoint_memory.storage.cache.memory import InMemoryTTLCache
from datapoint_memory.storage.vector.memory import InMemoryDatapointStore

COLLECTION = "test_datapoints"


class FakeTime:
    """Shared clock driving both the limiter (seconds) and ingestion timestamps."""

    def __init__(self):
        self.moment = datetime(2024, 5, 1, 12, 0, 0, tzinfo=timezone.utc)

    def seconds(self) -> float:
        return self.moment.timestamp()

    def now(self) -> datetime:
        return self.moment

    def advance(self, seconds: float):
        self.moment += timedelta(seconds=seconds)


@pytest.fixture
def fake_time():
    return FakeTime()


@pytest.fixture
def mock_embedding():
    embedding = Mock()
    embedding.embed_document = AsyncMock(return_value=[0.1, 0.2, 0.3])
    embedding.embed_query = AsyncMock(return_value=[0.1, 0.2, 0.3])
    return embedding


@pytest.fixture
def store():
    return InMemoryDatapointStore()


@pytest.fixture
def pipeline(mock_embedding, store, fake_time):
    limiter = DedupAndRateLimiter(
        InMemoryTTLCache(clock=fake_time.seconds), clock=fake_time.seconds
    )
    return IngestionPipeline(
        mock_embedding, store, limiter, collection_name=COLLECTION, clock=fake_time.now
    )


@pytest.fixture
def presence_config():
    return {
        "enabled": True,
        "description": "Jemand ist",
        "location": "Zuhause",
        "dataType": "boolean",
        "booleanTrueValue": "anwesend",
        "booleanFalseValue": "abwesend",
        "allowAutoChange": True,
    }


async def _points(store):
    return await store.scroll(COLLECTION)


def test_generate_point_id_is_deterministic_uuid():
    first = generate_point_id("hm.0.Licht", "2024-05-01T12:00:00.000Z")
    second = generate_point_id("hm.0.Licht", "2024-05-01T12:00:00.000Z")
    other = generate_point_id("hm.0.Licht", "2024-05-01T12:00:00.001Z")

    assert first == second
    assert first != other
    assert len(first) == 36
    assert first.count("-") == 4


@pytest.mark.asyncio
async def test_ingest_stores_point(pipeline, store, mock_embedding, presence_config):
    result = await pipeline.ingest(
        "0_userdata.0.Anwesenheit", {"val": True, "ts": 1714564800000}, presence_config
    )

    assert result.stored is True
    assert result.reason == "stored"

    points = await _points(store)
    assert len(points) == 1

    payload = points[0].payload
    assert points[0].id == result.point_id
    assert payload.datapoint_id == "0_userdata.0.Anwesenheit"
    assert payload.timestamp == "2024-05-01T12:00:00.000Z"
    assert payload.value is True
    assert payload.dataType == "boolean"
    assert payload.allowAutoChange is True
    assert payload.booleanTrueValue == "anwesend"
    assert payload.deviceName == "Anwesenheit"
    assert payload.deviceChannel == "0"
    assert payload.formatted_text == (
        "Jemand ist anwesend (Zuhause) Anwesenheit 0_userdata.0.Anwesenheit"
    )
    mock_embedding.embed_document.assert_awaited_once_with(payload.formatted_text)


@pytest.mark.asyncio
async def test_collection_created_with_embedding_dimension(pipeline, store, presence_config):
    await pipeline.ingest("hm.0.Anwesenheit", DatapointState(value=True), presence_config)

    assert store.collection_count() == 1
    assert store._dimensions[COLLECTION] == 3


@pytest.mark.asyncio
async def test_disabled_datapoint_not_ingested(pipeline, store, mock_embedding):
    result = await pipeline.ingest("hm.0.Licht", {"val": True}, {"description": "Licht"})

    assert result.stored is False
    assert result.reason == "disabled"
    mock_embedding.embed_document.assert_not_awaited()
    assert store.collection_count() == 0


@pytest.mark.asyncio
async def test_missing_config_treated_as_disabled(pipeline):
    result = await pipeline.ingest_object("hm.0.Licht", {"val": True}, None)

    assert result.reason == "disabled"


@pytest.mark.asyncio
async def test_datapoint_without_description_is_stored(pipeline, store):
    config = {"enabled": True, "location": "Wohnzimmer", "dataType": "number", "units": "°C"}

    result = await pipeline.ingest("hm-rpc.0.Wohnzimmer.Temperatur", {"val": 21.5}, config)

    assert result.stored is True
    points = await _points(store)
    assert points[0].payload.description == ""
    assert points[0].payload.formatted_text == (
        "21.5°C (Wohnzimmer) Temperatur hm-rpc.0.Wohnzimmer.Temperatur"
    )


@pytest.mark.asyncio
async def test_empty_datapoint_id_raises_config_invalid(pipeline, mock_embedding):
    with pytest.raises(ConfigInvalid):
        await pipeline.ingest("  ", {"val": True}, {"enabled": True})

    mock_embedding.embed_document.assert_not_awaited()


@pytest.mark.asyncio
async def test_identical_pair_within_five_minutes_is_noop(
    pipeline, store, fake_time, presence_config
):
    await pipeline.ingest("hm.0.Anwesenheit", {"val": True}, presence_config)

    fake_time.advance(120)
    result = await pipeline.ingest("hm.0.Anwesenheit", {"val": True}, presence_config)

    assert result.stored is False
    assert result.reason == "duplicate"
    assert len(await _points(store)) == 1


@pytest.mark.asyncio
async def test_two_ingestions_within_thirty_seconds_store_once(
    pipeline, store, fake_time, presence_config
):
    await pipeline.ingest("hm.0.Anwesenheit", {"val": True}, presence_config)

    fake_time.advance(10)
    result = await pipeline.ingest("hm.0.Anwesenheit", {"val": False}, presence_config)

    assert result.reason == "rate_limited"
    assert len(await _points(store)) == 1


@pytest.mark.asyncio
async def test_new_value_after_rate_window_creates_new_point(
    pipeline, store, fake_time, presence_config
):
    first = await pipeline.ingest("hm.0.Anwesenheit", {"val": True}, presence_config)

    fake_time.advance(31)
    second = await pipeline.ingest("hm.0.Anwesenheit", {"val": False}, presence_config)

    assert second.stored is True
    assert first.point_id != second.point_id
    assert len(await _points(store)) == 2


@pytest.mark.asyncio
async def test_embedding_failure_stores_nothing(
    pipeline, store, mock_embedding, fake_time, presence_config
):
    mock_embedding.embed_document.side_effect = EmbeddingUnavailable("ollama down")

    with pytest.raises(EmbeddingUnavailable):
        await pipeline.ingest("hm.0.Anwesenheit", {"val": True}, presence_config)

    assert store.collection_count() == 0

    # the failed value is not treated as a duplicate once the rate window passes
    mock_embedding.embed_document.side_effect = None
    fake_time.advance(30)
    result = await pipeline.ingest("hm.0.Anwesenheit", {"val": True}, presence_config)
    assert result.stored is True


@pytest.mark.asyncio
async def test_empty_embedding_is_unavailable(pipeline, store, mock_embedding, presence_config):
    mock_embedding.embed_document.return_value = []

    with pytest.raises(EmbeddingUnavailable):
        await pipeline.ingest("hm.0.Anwesenheit", {"val": True}, presence_config)

    assert store.collection_count() == 0


@pytest.mark.asyncio
async def test_store_failure_propagates(pipeline, store, presence_config):
    store.available = False

    with pytest.raises(StoreUnavailable):
        await pipeline.ingest("hm.0.Anwesenheit", {"val": True}, presence_config)


@pytest.mark.asyncio
async def test_accepts_model_inputs(pipeline, store):
    config = DatapointConfig(
        embedding_enabled=True, description="Temperatur", data_type="number", units="°C"
    )

    result = await pipeline.ingest("hm.0.Temp", DatapointState(value=21.5), config)

    assert result.stored is True
    points = await _points(store)
    assert points[0].payload.formatted_text.startswith("Temperatur: 21.5°C")
