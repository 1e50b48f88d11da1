"""
Models for vector storage.

Defines the points written to the vector store (one per ingestion event),
search hits, filters and collection statistics. Payload field names match
the wire shape stored in the collection, so points written by other
clients of the same collection stay readable.
"""

from typing import List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from datapoint_memory.models import DatapointValue


class DatapointPayload(BaseModel):
    """
    Payload of a datapoint point in vector storage.

    Immutable once stored: a newer state produces a new point.
    """

    model_config = ConfigDict(extra="ignore")

    datapoint_id: str
    timestamp: str
    value: DatapointValue = None
    description: str = ""
    location: str = ""
    dataType: str = "text"
    formatted_text: str = ""
    allowAutoChange: bool = False
    booleanTrueValue: Optional[str] = None
    booleanFalseValue: Optional[str] = None
    deviceName: str = ""
    deviceChannel: str = ""


class DatapointPoint(BaseModel):
    """A point in vector storage: embedding plus payload."""

    id: str
    vector: List[float]
    payload: DatapointPayload


class ScoredDatapoint(BaseModel):
    """A similarity search hit (score is cosine similarity, higher is closer)."""

    id: str
    score: float
    payload: DatapointPayload


class PointFilter(BaseModel):
    """
    Metadata filter for search and scroll.

    ``datapoint_ids`` restricts to any of the given datapoints,
    ``datapoint_id`` to exactly one. Both may be combined.
    """

    datapoint_id: Optional[str] = None
    datapoint_ids: Optional[List[str]] = None

    def matches(self, payload: Union[DatapointPayload, dict]) -> bool:
        datapoint_id = (
            payload.get("datapoint_id") if isinstance(payload, dict) else payload.datapoint_id
        )
        if self.datapoint_id is not None and datapoint_id != self.datapoint_id:
            return False
        if self.datapoint_ids is not None and datapoint_id not in self.datapoint_ids:
            return False
        return True


class CollectionStats(BaseModel):
    name: str
    points_count: int = 0
    indexed_vectors_count: int = 0
    status: str = Field("unknown", description="Backend-reported collection status")
