import logging
import time
from typing import Dict, Optional

from datapoint_memory.models import DatapointState, DatapointValue

logger = logging.getLogger(__name__)


class InMemoryHostStateStore:
    """
    In-memory implementation of the HostStateStore protocol.

    Useful for tests and local experiments without a host platform.
    """

    def __init__(
        self,
        objects: Optional[Dict[str, dict]] = None,
        states: Optional[Dict[str, DatapointValue]] = None,
    ):
        self.objects: Dict[str, dict] = dict(objects or {})
        self.states: Dict[str, DatapointState] = {
            datapoint_id: DatapointState(value=value, timestamp=time.time() * 1000)
            for datapoint_id, value in (states or {}).items()
        }

    async def get_object(self, datapoint_id: str) -> Optional[dict]:
        return self.objects.get(datapoint_id)

    async def get_state(self, datapoint_id: str) -> Optional[DatapointState]:
        return self.states.get(datapoint_id)

    async def set_state(self, datapoint_id: str, value: DatapointValue) -> None:
        self.states[datapoint_id] = DatapointState(value=value, timestamp=time.time() * 1000)
        logger.debug(f"State of {datapoint_id} set to {value!r}")
