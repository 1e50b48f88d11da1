"""Reading and writing datapoints through chat-model function calls."""

from datapoint_memory.control.controller import ControlResult, DatapointController
from datapoint_memory.control.conversion import convert_value
from datapoint_memory.control.memory import InMemoryHostStateStore
from datapoint_memory.control.protocols import HostStateStore

__all__ = [
    "ControlResult",
    "DatapointController",
    "HostStateStore",
    "InMemoryHostStateStore",
    "convert_value",
]
