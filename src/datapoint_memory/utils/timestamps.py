"""
Timestamp utilities for stored datapoint points.

Points carry their ingestion time as an ISO-8601 UTC string with
millisecond precision and a trailing "Z", the same shape JavaScript's
``toISOString()`` produces, so points written by other clients of the
collection sort and parse the same way.
"""

import logging
from datetime import datetime, timezone
from typing import Callable, Optional, Union

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def to_iso(moment: datetime) -> str:
    """Format an aware or naive (assumed UTC) datetime as ``YYYY-MM-DDTHH:MM:SS.mmmZ``."""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    moment = moment.astimezone(timezone.utc)
    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def parse_timestamp(value: Union[str, int, float, datetime, None]) -> Optional[datetime]:
    """
    Parse a stored timestamp into an aware UTC datetime.

    Accepts ISO-8601 strings (with "Z" or an offset), epoch milliseconds and
    datetimes. Returns None for missing or unparseable values.
    """
    if value is None or value == "":
        return None

    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, (int, float)) and not isinstance(value, bool):
        parsed = datetime.fromtimestamp(value / 1000, tz=timezone.utc)
    else:
        text = str(value).strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            logger.warning(f"Invalid timestamp format: {value}")
            return None

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def epoch_seconds(value: Union[str, int, float, datetime, None]) -> float:
    """Sort key for timestamps; unparseable values sort as the oldest."""
    parsed = parse_timestamp(value)
    return parsed.timestamp() if parsed is not None else 0.0


def format_local(value: Union[str, int, float, datetime, None], fmt: str) -> str:
    """Render a timestamp in the host's local timezone, or "" if unparseable."""
    parsed = parse_timestamp(value)
    if parsed is None:
        return ""
    return parsed.astimezone().strftime(fmt)
