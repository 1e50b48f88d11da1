"""
Host platform access used by the control layer.

The host (e.g. an ioBroker adapter) owns the datapoint objects and their
states; this package only reads and writes them through this protocol.
"""

from typing import Optional, Protocol, Union

from datapoint_memory.models import DatapointState, DatapointValue


class HostStateStore(Protocol):
    """Protocol for reading datapoint objects and reading/writing their states."""

    async def get_object(self, datapoint_id: str) -> Optional[dict]:
        """
        Get the custom settings of a datapoint object.

        Returns:
            The object's custom settings dict, or None if the object is unknown
        """
        ...

    async def get_state(self, datapoint_id: str) -> Optional[Union[DatapointState, dict]]:
        """
        Get the current state of a datapoint.

        Returns:
            DatapointState (or host dict with val/ts), None if no state exists
        """
        ...

    async def set_state(self, datapoint_id: str, value: DatapointValue) -> None:
        """
        Write a new (unacknowledged) value to a datapoint.

        Raises:
            Exception: Host-specific errors are propagated to the caller
        """
        ...
