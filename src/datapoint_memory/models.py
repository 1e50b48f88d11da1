from dataclasses import dataclass, field
from typing import Any, Iterable, Literal, Optional, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

DatapointValue = Union[bool, int, float, str, None]
DataType = Literal["boolean", "number", "text"]


class DatapointState(BaseModel):
    """Current state of a host datapoint as delivered by a state-change event."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    value: DatapointValue = Field(None, validation_alias=AliasChoices("value", "val"))
    timestamp: Optional[float] = Field(
        None,
        validation_alias=AliasChoices("timestamp", "ts"),
        description="Host timestamp in epoch milliseconds",
    )


class DatapointConfig(BaseModel):
    """
    Per-datapoint configuration maintained by the host platform.

    Embedding (readable for RAG) and auto-change (writable for control) are
    independent: a datapoint can be searchable without being controllable.
    Host objects use camelCase keys and the legacy ``enabled`` flag, both of
    which are accepted on input.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    embedding_enabled: bool = Field(
        False, validation_alias=AliasChoices("embedding_enabled", "embeddingEnabled", "enabled")
    )
    allow_auto_change: bool = Field(
        False, validation_alias=AliasChoices("allow_auto_change", "allowAutoChange")
    )
    description: str = ""
    location: str = ""
    data_type: DataType = Field("text", validation_alias=AliasChoices("data_type", "dataType"))
    boolean_true_value: Optional[str] = Field(
        None, validation_alias=AliasChoices("boolean_true_value", "booleanTrueValue")
    )
    boolean_false_value: Optional[str] = Field(
        None, validation_alias=AliasChoices("boolean_false_value", "booleanFalseValue")
    )
    additional_text: str = Field(
        "", validation_alias=AliasChoices("additional_text", "additionalText")
    )
    units: str = ""

    @field_validator("data_type", mode="before")
    @classmethod
    def _normalize_data_type(cls, value: Any) -> str:
        if value in ("boolean", "number"):
            return value
        return "text"

    @field_validator(
        "description", "location", "additional_text", "units", mode="before"
    )
    @classmethod
    def _none_as_empty(cls, value: Any) -> Any:
        return "" if value is None else value

    @field_validator("boolean_true_value", "boolean_false_value", mode="before")
    @classmethod
    def _blank_label_as_none(cls, value: Any) -> Any:
        if value is None or value == "":
            return None
        return str(value)

    @classmethod
    def from_custom(cls, custom: Optional[dict]) -> "DatapointConfig":
        """Build a config from a host object's custom settings (None = all disabled)."""
        return cls.model_validate(custom or {})


@dataclass(frozen=True)
class AllowedDatapoints:
    """
    Readable and writable datapoint sets consumed by resolution and control.

    ``writable`` is always a subset of ``readable``.
    """

    readable: frozenset = frozenset()
    writable: frozenset = frozenset()

    @classmethod
    def of(cls, readable: Iterable[str], writable: Iterable[str] = ()) -> "AllowedDatapoints":
        readable_set = frozenset(readable)
        return cls(readable=readable_set, writable=frozenset(writable) & readable_set)

    def can_read(self, datapoint_id: str) -> bool:
        return datapoint_id in self.readable

    def can_write(self, datapoint_id: str) -> bool:
        return datapoint_id in self.writable


IngestReason = Literal[
    "stored", "disabled", "duplicate", "rate_limited", "invalid_config", "failed"
]


@dataclass
class IngestResult:
    """
    Outcome of a single ingestion event.

    Attributes:
        stored: True when a point was upserted
        reason: Why the event was stored or dropped
        point_id: ID of the upserted point, None when dropped
        error: Error message when ingestion failed
    """

    stored: bool
    reason: IngestReason
    point_id: Optional[str] = None
    error: Optional[str] = None


@dataclass
class PruneResult:
    """Aggregated outcome of a retention run over many datapoints."""

    processed: int = 0
    removed: int = 0
    failed: list[str] = field(default_factory=list)


@dataclass
class CleanupResult:
    """Summary of a complete cleanup (disabled datapoints + retention)."""

    disabled_removed: int = 0
    processed: int = 0
    removed: int = 0
    total_points_remaining: int = 0
    errors: list[str] = field(default_factory=list)
