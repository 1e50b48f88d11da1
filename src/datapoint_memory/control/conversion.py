"""
Conversion of requested values to a datapoint's data type.

Chat models send values in many forms ("ja", "1", "Anwesend", "21,5 Grad").
convert_value() maps them onto what the datapoint expects. Boolean
datapoints with custom labels receive the label itself, not a bool.
"""

import logging
import re
from typing import Optional

from datapoint_memory.ingestion.formatter import render_value
from datapoint_memory.models import DatapointConfig, DatapointValue

logger = logging.getLogger(__name__)

UNIVERSAL_TRUE = {"true", "1", "yes", "ja"}
UNIVERSAL_FALSE = {"false", "0", "no", "nein"}
NUMBER_PATTERN = re.compile(r"(-?\d+(?:[.,]\d+)?)")


def parse_universal_boolean(text: str) -> Optional[bool]:
    """Parse true/false, 1/0, yes/no, ja/nein or any number (non-zero is True)."""
    text = text.strip().lower()
    if text in UNIVERSAL_TRUE:
        return True
    if text in UNIVERSAL_FALSE:
        return False
    try:
        return float(text) != 0
    except ValueError:
        return None


def _convert_with_labels(text: str, config: DatapointConfig) -> Optional[DatapointValue]:
    true_label = config.boolean_true_value
    false_label = config.boolean_false_value

    if text in ("true", "false"):
        flag = text == "true"
        return (true_label or True) if flag else (false_label or False)

    for label in (true_label, false_label):
        if label and text == label.strip().lower():
            return label

    if text:
        for label in (true_label, false_label):
            normalized = (label or "").strip().lower()
            if normalized and (normalized in text or text in normalized):
                return label

    flag = parse_universal_boolean(text)
    if flag is not None:
        return (true_label or True) if flag else (false_label or False)

    logger.warning(
        f"Cannot parse '{text}' as boolean. Expected true='{true_label}', "
        f"false='{false_label}' or universal values (true/false, 1/0)"
    )
    return None


def to_boolean(value: DatapointValue, config: DatapointConfig) -> Optional[DatapointValue]:
    has_labels = bool(config.boolean_true_value or config.boolean_false_value)
    if isinstance(value, bool) and not has_labels:
        return value

    text = render_value(value).strip().lower()
    if has_labels:
        return _convert_with_labels(text, config)
    return parse_universal_boolean(text)


def to_number(value: DatapointValue) -> Optional[float]:
    if isinstance(value, bool):
        return 1 if value else 0
    if isinstance(value, (int, float)):
        return value

    match = NUMBER_PATTERN.search(str(value))
    if match is None:
        logger.warning(f"No number found in '{value}'")
        return None
    return float(match.group(1).replace(",", "."))


def convert_value(
    value: DatapointValue, data_type: str, config: Optional[DatapointConfig] = None
) -> Optional[DatapointValue]:
    """
    Convert a requested value for a datapoint of ``data_type``.

    Args:
        value: Value as requested (e.g. by a function call)
        data_type: "boolean", "number" or "text"
        config: Datapoint configuration carrying custom boolean labels

    Returns:
        The converted value, or None if it cannot be converted. A missing
        value converts to the type's empty default (False, 0, "").

    Example:
        >>> config = DatapointConfig(boolean_true_value="Anwesend", boolean_false_value="Abwesend")
        >>> convert_value("ja", "boolean", config)
        'Anwesend'
        >>> convert_value("21,5 Grad", "number")
        21.5
    """
    config = config or DatapointConfig()

    if value is None:
        return {"boolean": False, "number": 0}.get(data_type, "")

    if data_type == "boolean":
        return to_boolean(value, config)
    if data_type == "number":
        return to_number(value)
    return value if isinstance(value, str) else render_value(value)
