"""Short-name aliases for readable datapoint IDs."""

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, Iterator, Optional, Tuple

logger = logging.getLogger(__name__)


def alias_keys(datapoint_id: str) -> list[str]:
    """
    Alias keys for a datapoint ID.

    ``0_userdata.0.Wohnzimmer_Licht`` yields ``Wohnzimmer_Licht``,
    ``wohnzimmer_licht``, ``Wohnzimmer Licht`` and ``wohnzimmer licht``.
    """
    short_name = datapoint_id.split(".")[-1]
    spaced = short_name.replace("_", " ")

    keys = []
    for key in (short_name, short_name.lower(), spaced, spaced.lower()):
        if key and key not in keys:
            keys.append(key)
    return keys


@dataclass
class AliasTable:
    """
    Maps alias keys to full datapoint IDs.

    Built from the readable set in sorted order; when two datapoints share a
    short name, the first ID in sort order keeps the alias.
    """

    entries: Dict[str, str] = field(default_factory=dict)

    @classmethod
    def build(cls, readable: Iterable[str]) -> "AliasTable":
        entries: Dict[str, str] = {}
        for datapoint_id in sorted(readable):
            for key in alias_keys(datapoint_id):
                if key in entries and entries[key] != datapoint_id:
                    logger.debug(
                        f"Alias '{key}' already maps to {entries[key]}, ignoring {datapoint_id}"
                    )
                    continue
                entries[key] = datapoint_id

        logger.debug(f"Built alias table with {len(entries)} keys")
        return cls(entries=entries)

    def lookup(self, key: str) -> Optional[str]:
        return self.entries.get(key)

    def items(self) -> Iterator[Tuple[str, str]]:
        return iter(self.entries.items())

    def __len__(self) -> int:
        return len(self.entries)

    def __contains__(self, key: object) -> bool:
        return key in self.entries
