"""
Function-calling layer for reading and writing datapoints.

A chat model refers to devices by whatever name it has seen ("Wohnzimmer
Licht", "Anwesenheit_Martin"). The controller resolves that name to a
readable datapoint, enforces the write permission and talks to the host.
"""

import logging
from typing import Any, Dict, List, Optional

from pydantic import BaseModel

from datapoint_memory.control.conversion import convert_value
from datapoint_memory.control.protocols import HostStateStore
from datapoint_memory.models import DatapointConfig, DatapointState, DatapointValue
from datapoint_memory.resolution.aliases import alias_keys
from datapoint_memory.resolution.resolver import DatapointResolver

logger = logging.getLogger(__name__)


class ControlResult(BaseModel):
    """Result of a getState/setState call, serialized back to the chat model."""

    success: bool
    datapoint: Optional[str] = None
    original_input: Optional[str] = None
    value: Any = None
    timestamp: Optional[float] = None
    message: Optional[str] = None
    error: Optional[str] = None

    def to_dict(self) -> dict:
        return self.model_dump(exclude_none=True)


class DatapointController:
    """
    Executes getState/setState function calls against the host.

    Reading requires the datapoint to be readable; writing additionally
    requires it to be writable (auto-change enabled). Values are written
    as given unless ``convert_values`` is set, in which case they are
    converted to the datapoint's data type first.
    """

    convert_value = staticmethod(convert_value)

    def __init__(
        self,
        host: HostStateStore,
        resolver: DatapointResolver,
        convert_values: bool = False,
    ):
        """
        Initialize the controller.

        Args:
            host: Host platform state access
            resolver: Resolver holding the readable/writable sets
            convert_values: Convert values to the datapoint's data type before writing
        """
        self.host = host
        self.resolver = resolver
        self.convert_values = convert_values

    async def get_state(self, datapoint: str) -> ControlResult:
        if not datapoint:
            return ControlResult(success=False, error="Missing required parameter: datapoint")

        resolved = await self.resolver.resolve(datapoint)
        if resolved is None:
            logger.warning(f"Could not resolve datapoint '{datapoint}'")
            return ControlResult(
                success=False, original_input=datapoint, error=f"Datapoint not found: {datapoint}"
            )

        logger.debug(f"Resolved '{datapoint}' -> {resolved}")

        try:
            state = await self.host.get_state(resolved)
        except Exception as e:
            logger.error(f"Error reading {resolved}: {e}")
            return ControlResult(
                success=False, datapoint=resolved, error=f"Failed to read {resolved}: {e}"
            )

        if state is None:
            return ControlResult(
                success=False, datapoint=resolved, error="Datapoint not found or no value"
            )
        if not isinstance(state, DatapointState):
            state = DatapointState.model_validate(state)

        return ControlResult(
            success=True,
            datapoint=resolved,
            original_input=datapoint,
            value=state.value,
            timestamp=state.timestamp,
            message=f"Current value of {resolved} is {state.value}",
        )

    async def set_state(self, datapoint: str, value: DatapointValue) -> ControlResult:
        if not datapoint:
            return ControlResult(success=False, error="Missing required parameter: datapoint")
        if value is None:
            return ControlResult(success=False, error="Missing required parameter: value")

        resolved = await self.resolver.resolve(datapoint)
        if resolved is None:
            return ControlResult(
                success=False,
                original_input=datapoint,
                error=f"Datapoint not found or not allowed: {datapoint}",
            )

        if not self.resolver.allowed.can_write(resolved):
            return ControlResult(
                success=False,
                datapoint=resolved,
                error=(
                    f"Datapoint not allowed for writing "
                    f"(allowAutoChange must be enabled): {resolved}"
                ),
            )

        try:
            if self.convert_values:
                custom = await self.host.get_object(resolved)
                config = DatapointConfig.from_custom(custom)
                converted = convert_value(value, config.data_type, config)
                if converted is None:
                    return ControlResult(
                        success=False,
                        datapoint=resolved,
                        error=f"Cannot convert {value!r} to {config.data_type} for {resolved}",
                    )
                value = converted

            logger.info(f"Setting {resolved} to {value!r}")
            await self.host.set_state(resolved, value)
        except Exception as e:
            logger.error(f"Error setting datapoint {resolved}: {e}")
            return ControlResult(
                success=False, datapoint=resolved, error=f"Failed to set datapoint: {e}"
            )

        return ControlResult(
            success=True,
            datapoint=resolved,
            original_input=datapoint,
            value=value,
            message=f"Successfully set {resolved} to {value}",
        )

    async def execute_function_call(self, name: str, parameters: Dict[str, Any]) -> ControlResult:
        """
        Dispatch a function call from the chat model.

        Supports ``getState``, ``setState`` and the legacy ``set_datapoint``.

        Raises:
            ValueError: If the function name is unknown
        """
        logger.info(f"Executing function call: {name} with parameters {parameters}")

        if name in ("setState", "set_datapoint"):
            return await self.set_state(parameters.get("datapoint"), parameters.get("value"))
        if name == "getState":
            return await self.get_state(parameters.get("datapoint"))

        raise ValueError(f"Unknown function: {name}")

    def function_definitions(self) -> List[dict]:
        """
        OpenAI-compatible tool schemas for getState and setState.

        Empty when no datapoint is readable. setState is only offered when
        at least one datapoint is writable.
        """
        allowed = self.resolver.allowed
        if not allowed.readable:
            return []

        readable_list = ", ".join(
            f"{alias_keys(datapoint_id)[0]} ({datapoint_id})"
            for datapoint_id in sorted(allowed.readable)
        )

        definitions = [
            {
                "type": "function",
                "function": {
                    "name": "getState",
                    "description": (
                        "Get the current state of a smart home datapoint. For calculations "
                        "like averages, call this function multiple times or use the context "
                        f"data for historical values. Available datapoints: {readable_list}"
                    ),
                    "parameters": {
                        "type": "object",
                        "properties": {
                            "datapoint": {
                                "type": "string",
                                "description": (
                                    "The name or ID of the datapoint to read. Short names like "
                                    "'Anwesenheit_Martin' or 'Temperatur_Wohnzimmer' work."
                                ),
                            }
                        },
                        "required": ["datapoint"],
                    },
                },
            }
        ]

        if allowed.writable:
            writable_list = ", ".join(
                f"{alias_keys(datapoint_id)[0]} ({datapoint_id})"
                for datapoint_id in sorted(allowed.writable)
            )
            definitions.insert(
                0,
                {
                    "type": "function",
                    "function": {
                        "name": "setState",
                        "description": (
                            "Set the state of a smart home datapoint to control a device. "
                            "For boolean datapoints with custom values, either standard "
                            "boolean values (true/false, 1/0, yes/no, ja/nein) or the custom "
                            "words can be used. Short names or full IDs are accepted. "
                            f"Available datapoints: {writable_list}"
                        ),
                        "parameters": {
                            "type": "object",
                            "properties": {
                                "datapoint": {
                                    "type": "string",
                                    "description": "The name or ID of the datapoint to control",
                                },
                                "value": {
                                    "type": ["boolean", "number", "string"],
                                    "description": "The new value to set",
                                },
                            },
                            "required": ["datapoint", "value"],
                        },
                    },
                },
            )

        return definitions
