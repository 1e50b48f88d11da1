"""Unit tests for datapoint text formatting."""

from datapoint_memory.ingestion.formatter import (
    derive_device_channel,
    derive_device_name,
    format_datapoint_text,
    is_truthy,
    render_value,
)
from datapoint_memory.models import DatapointConfig


def test_device_name_and_channel():
    assert derive_device_name("0_userdata.0.Zuhause.Anwesenheit") == "Anwesenheit"
    assert derive_device_channel("0_userdata.0.Zuhause.Anwesenheit") == "Zuhause"
    assert derive_device_name("Licht") == "Licht"
    assert derive_device_channel("Licht") == ""


def test_boolean_with_custom_true_label():
    config = DatapointConfig(
        description="Jemand ist",
        location="Zuhause",
        data_type="boolean",
        boolean_true_value="anwesend",
        boolean_false_value="abwesend",
    )

    text = format_datapoint_text("0_userdata.0.Anwesenheit", True, config)

    assert text == "Jemand ist anwesend (Zuhause) Anwesenheit 0_userdata.0.Anwesenheit"


def test_boolean_with_custom_false_label():
    config = DatapointConfig(
        description="Jemand ist",
        location="Zuhause",
        data_type="boolean",
        boolean_true_value="anwesend",
        boolean_false_value="abwesend",
    )

    text = format_datapoint_text("0_userdata.0.Anwesenheit", False, config)

    assert text.startswith("Jemand ist abwesend (Zuhause)")


def test_boolean_generic_labels():
    config = DatapointConfig(description="Fenster offen", data_type="boolean")

    assert format_datapoint_text("hm.0.Fenster", True, config) == (
        "Fenster offen true Fenster hm.0.Fenster"
    )
    assert format_datapoint_text("hm.0.Fenster", "0", config).startswith("Fenster offen false")


def test_number_with_units():
    config = DatapointConfig(
        description="Zählerstand", location="Zuhause", data_type="number", units="l"
    )

    text = format_datapoint_text("0_userdata.0.Wasser.Zaehler", 1250, config)

    assert text == "Zählerstand: 1250l (Zuhause) Zaehler 0_userdata.0.Wasser.Zaehler"


def test_number_whole_float_renders_without_decimal():
    config = DatapointConfig(description="Zählerstand", data_type="number", units="l")

    text = format_datapoint_text("hm.0.Zaehler", 1250.0, config)

    assert text.startswith("Zählerstand: 1250l ")


def test_text_with_additional_text():
    config = DatapointConfig(
        description="Status", location="Garage", additional_text="Tor zur Straße"
    )

    text = format_datapoint_text("hm.0.Garage.Status", "offen", config)

    assert text == "Status: offen (Garage) - Tor zur Straße Status hm.0.Garage.Status"


def test_unknown_data_type_formats_as_text():
    config = DatapointConfig.from_custom({"description": "Modus", "dataType": "mixed"})

    assert config.data_type == "text"
    assert format_datapoint_text("hm.0.Modus", "Eco", config).startswith("Modus: Eco ")


def test_missing_description_leaves_no_dangling_separator():
    number = DatapointConfig(data_type="number", units="l", location="Keller")
    boolean = DatapointConfig(data_type="boolean")

    assert format_datapoint_text("hm.0.Zaehler", 7, number) == "7l (Keller) Zaehler hm.0.Zaehler"
    assert format_datapoint_text("hm.0.Licht", False, boolean) == "false Licht hm.0.Licht"


def test_text_always_contains_device_name_and_id():
    for data_type, value in (("boolean", True), ("number", 3), ("text", "x")):
        config = DatapointConfig(description="D", data_type=data_type)
        text = format_datapoint_text("a.b.Device_Name", value, config)

        assert "Device_Name" in text
        assert "a.b.Device_Name" in text


def test_is_truthy_and_render_value():
    assert is_truthy(True)
    assert is_truthy("on")
    assert not is_truthy("aus")
    assert not is_truthy(0)
    assert render_value(None) == ""
    assert render_value(False) == "false"
    assert render_value(21.5) == "21.5"
