"""
Text formatting for datapoint embeddings.

The formatted text is what gets embedded and what the RAG context shows.
It always ends with the device name and the full datapoint ID so that
lexical lookups of either still land on the point.
"""

from datapoint_memory.models import DatapointConfig, DatapointValue

FALSY_STRINGS = {"", "false", "0", "off", "no", "nein", "aus"}


def derive_device_name(datapoint_id: str) -> str:
    """Last segment of the dot-delimited datapoint path."""
    return datapoint_id.split(".")[-1]


def derive_device_channel(datapoint_id: str) -> str:
    """Second to last path segment, or "" for single-segment IDs."""
    parts = datapoint_id.split(".")
    return parts[-2] if len(parts) > 1 else ""


def is_truthy(value: DatapointValue) -> bool:
    if isinstance(value, str):
        return value.strip().lower() not in FALSY_STRINGS
    return bool(value)


def render_value(value: DatapointValue) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def format_datapoint_text(
    datapoint_id: str, value: DatapointValue, config: DatapointConfig
) -> str:
    """
    Render a datapoint state as embedding text.

    - boolean: ``"<description> <label> (<location>)"``
    - number:  ``"<description>: <value><units> (<location>)"``
    - text:    ``"<description>: <value> (<location>) - <additional text>"``

    followed by ``" <deviceName> <datapointId>"``.

    Example:
        >>> config = DatapointConfig(description="Zählerstand", location="Zuhause",
        ...                          data_type="number", units="l")
        >>> format_datapoint_text("0_userdata.0.Wasser.Zaehler", 1250, config)
        'Zählerstand: 1250l (Zuhause) Zaehler 0_userdata.0.Wasser.Zaehler'
    """
    description = config.description
    lead = f"{description}: " if description else ""
    location = f" ({config.location})" if config.location else ""

    if config.data_type == "boolean":
        if is_truthy(value):
            label = config.boolean_true_value or "true"
        else:
            label = config.boolean_false_value or "false"
        text = f"{description} {label}{location}"
    elif config.data_type == "number":
        text = f"{lead}{render_value(value)}{config.units}{location}"
    else:
        text = f"{lead}{render_value(value)}{location}"
        if config.additional_text:
            text += f" - {config.additional_text}"

    return f"{text.strip()} {derive_device_name(datapoint_id)} {datapoint_id}"
