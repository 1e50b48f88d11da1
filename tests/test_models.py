"""Unit tests for datapoint models."""

from datapoint_memory.models import AllowedDatapoints, DatapointConfig, DatapointState


def test_config_from_host_custom_settings():
    config = DatapointConfig.from_custom(
        {
            "enabled": True,
            "allowAutoChange": True,
            "description": "Jemand ist",
            "location": "Zuhause",
            "dataType": "boolean",
            "booleanTrueValue": "anwesend",
            "booleanFalseValue": "",
            "additionalText": None,
            "someOtherKey": 1,
        }
    )

    assert config.embedding_enabled is True
    assert config.allow_auto_change is True
    assert config.data_type == "boolean"
    assert config.boolean_true_value == "anwesend"
    assert config.boolean_false_value is None
    assert config.additional_text == ""


def test_config_defaults_disabled():
    config = DatapointConfig.from_custom(None)

    assert config.embedding_enabled is False
    assert config.allow_auto_change is False
    assert config.data_type == "text"


def test_embedding_enabled_alias():
    assert DatapointConfig.from_custom({"embeddingEnabled": True}).embedding_enabled is True


def test_state_accepts_host_keys():
    state = DatapointState.model_validate({"val": 21.5, "ts": 1714564800000, "ack": True})

    assert state.value == 21.5
    assert state.timestamp == 1714564800000


def test_allowed_writable_is_subset_of_readable():
    allowed = AllowedDatapoints.of(["a", "b"], writable=["b", "c"])

    assert allowed.writable == frozenset({"b"})
    assert allowed.can_read("a")
    assert not allowed.can_write("a")
    assert allowed.can_write("b")
    assert not allowed.can_read("c")
