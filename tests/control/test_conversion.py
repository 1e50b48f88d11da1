"""Unit tests for value conversion to datapoint types."""

import pytest

from datapoint_memory.control.conversion import convert_value, parse_universal_boolean
from datapoint_memory.models import DatapointConfig


@pytest.fixture
def presence_config():
    return DatapointConfig(
        data_type="boolean", boolean_true_value="Anwesend", boolean_false_value="Abwesend"
    )


@pytest.mark.parametrize(
    "text,expected",
    [
        ("true", True),
        ("JA", True),
        ("yes", True),
        ("1", True),
        ("2.5", True),
        ("false", False),
        ("nein", False),
        ("0", False),
        ("vielleicht", None),
    ],
)
def test_parse_universal_boolean(text, expected):
    assert parse_universal_boolean(text) is expected


def test_boolean_without_labels():
    assert convert_value(True, "boolean") is True
    assert convert_value("ja", "boolean") is True
    assert convert_value(0, "boolean") is False
    assert convert_value("hmm", "boolean") is None


def test_boolean_labels_exact_and_case_insensitive(presence_config):
    assert convert_value("Anwesend", "boolean", presence_config) == "Anwesend"
    assert convert_value("abwesend", "boolean", presence_config) == "Abwesend"


def test_boolean_labels_from_bool_and_universal(presence_config):
    assert convert_value(True, "boolean", presence_config) == "Anwesend"
    assert convert_value(False, "boolean", presence_config) == "Abwesend"
    assert convert_value("ja", "boolean", presence_config) == "Anwesend"
    assert convert_value("0", "boolean", presence_config) == "Abwesend"


def test_boolean_labels_partial_match(presence_config):
    assert convert_value("ist anwesend", "boolean", presence_config) == "Anwesend"


def test_boolean_labels_unparseable(presence_config):
    assert convert_value("im Urlaub", "boolean", presence_config) is None


def test_boolean_only_true_label():
    config = DatapointConfig(data_type="boolean", boolean_true_value="offen")

    assert convert_value("nein", "boolean", config) is False
    assert convert_value("offen", "boolean", config) == "offen"


def test_number_conversion():
    assert convert_value(21.5, "number") == 21.5
    assert convert_value(3, "number") == 3
    assert convert_value("21,5 Grad", "number") == 21.5
    assert convert_value("-4", "number") == -4.0
    assert convert_value(True, "number") == 1
    assert convert_value("warm", "number") is None


def test_text_conversion():
    assert convert_value("Eco", "text") == "Eco"
    assert convert_value(True, "text") == "true"
    assert convert_value(21.0, "text") == "21"


def test_missing_value_defaults():
    assert convert_value(None, "boolean") is False
    assert convert_value(None, "number") == 0
    assert convert_value(None, "text") == ""
