"""Free-text to datapoint ID resolution."""

from datapoint_memory.resolution.aliases import AliasTable, alias_keys
from datapoint_memory.resolution.resolver import DatapointResolver

__all__ = [
    "AliasTable",
    "DatapointResolver",
    "alias_keys",
]
