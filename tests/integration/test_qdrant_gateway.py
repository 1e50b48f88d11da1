"""Integration tests for the Qdrant vector store gateway."""

from datetime import timedelta
from uuid import uuid4

import pytest

from datapoint_memory.ingestion.pipeline import generate_point_id
from datapoint_memory.retention.manager import RetentionManager
from datapoint_memory.storage.vector.models import DatapointPayload, DatapointPoint, PointFilter
from datapoint_memory.utils.timestamps import to_iso, utc_now


def make_point(datapoint_id, timestamp, vector):
    return DatapointPoint(
        id=generate_point_id(datapoint_id, timestamp),
        vector=vector,
        payload=DatapointPayload(
            datapoint_id=datapoint_id,
            timestamp=timestamp,
            value=True,
            formatted_text=f"{datapoint_id} true",
        ),
    )


@pytest.mark.integration
@pytest.mark.asyncio
async def test_qdrant_roundtrip(skip_if_no_qdrant):
    """Create, upsert, search, scroll and delete against a live Qdrant."""
    pytest.importorskip("qdrant_client")

    from datapoint_memory.storage.vector.qdrant import QdrantDatapointStore

    store = QdrantDatapointStore(host="localhost", port=6333)
    collection = f"test_datapoints_{uuid4().hex[:8]}"

    try:
        assert await store.check_availability() is True
        assert await store.ensure_collection(collection, 3) is True
        assert await store.ensure_collection(collection, 3) is False

        now = utc_now()
        await store.upsert(collection, make_point("hm.0.A", to_iso(now), [1.0, 0.0, 0.0]))
        await store.upsert(collection, make_point("hm.0.B", to_iso(now), [0.0, 1.0, 0.0]))

        hits = await store.search(collection, [1.0, 0.0, 0.0], limit=5)
        assert hits[0].payload.datapoint_id == "hm.0.A"
        assert hits[0].score >= hits[-1].score

        filtered = await store.search(
            collection, [1.0, 0.0, 0.0], filter=PointFilter(datapoint_ids=["hm.0.B"])
        )
        assert [hit.payload.datapoint_id for hit in filtered] == ["hm.0.B"]

        scrolled = await store.scroll(collection, filter=PointFilter(datapoint_id="hm.0.A"))
        assert len(scrolled) == 1

        await store.delete(collection, [scrolled[0].id])
        stats = await store.get_collection_stats(collection)
        assert stats.points_count == 1

    finally:
        await store.client.delete_collection(collection)
        await store.close()


@pytest.mark.integration
@pytest.mark.asyncio
async def test_qdrant_retention(skip_if_no_qdrant):
    """Retention keeps the newest entries in a live collection."""
    pytest.importorskip("qdrant_client")

    from datapoint_memory.storage.vector.qdrant import QdrantDatapointStore

    store = QdrantDatapointStore(host="localhost", port=6333)
    collection = f"test_retention_{uuid4().hex[:8]}"

    try:
        await store.ensure_collection(collection, 2)
        now = utc_now()
        for index in range(20):
            timestamp = to_iso(now - timedelta(hours=index))
            await store.upsert(collection, make_point("hm.0.A", timestamp, [1.0, 0.0]))

        manager = RetentionManager(store, collection)
        removed = await manager.prune_datapoint("hm.0.A", max_age_days=30, max_entries=5)

        assert removed == 15
        assert len(await store.scroll(collection)) == 5

    finally:
        await store.client.delete_collection(collection)
        await store.close()
