"""
Rendering of search results into a context block for the chat model.
"""

import logging
from typing import Any, Iterable, List, Literal, Optional

from pydantic import ValidationError

from datapoint_memory.config import ContextConfig
from datapoint_memory.ingestion.formatter import render_value
from datapoint_memory.storage.vector.models import DatapointPayload
from datapoint_memory.utils.timestamps import epoch_seconds, format_local

logger = logging.getLogger(__name__)

ResultShape = Literal["rag", "search"]

MOST_RECENT_TAG = "[MOST RECENT]"
UNKNOWN_LOCATION = "Unknown location"


class ContextAssembler:
    """
    Turns search results into a recency-ordered text block.

    Two result shapes are accepted:

    - ``"rag"``: scored hits (ScoredDatapoint or anything with a ``payload``)
    - ``"search"``: plain payload dicts as returned by the search API, where
      the payload fields sit at the top level (a nested ``"payload"`` key is
      also understood)

    Results are sorted newest first regardless of similarity order and the
    first line is tagged as the most recent. Unusable results are skipped;
    assembling never raises.
    """

    def __init__(self, config: Optional[ContextConfig] = None):
        self.config = config or ContextConfig()

    def assemble(self, results: Iterable[Any], shape: ResultShape = "rag") -> str:
        payloads = self._normalize(results, shape)
        if not payloads:
            return self.config.empty_placeholder

        payloads.sort(key=lambda payload: epoch_seconds(payload.timestamp), reverse=True)

        lines = [self.render_line(payload) for payload in payloads]
        lines[0] = f"{lines[0]} {MOST_RECENT_TAG}"

        return self.config.header + "\n" + "\n".join(lines)

    def render_line(self, payload: DatapointPayload) -> str:
        if payload.formatted_text:
            body = payload.formatted_text
        else:
            name = payload.description or payload.datapoint_id
            location = payload.location or UNKNOWN_LOCATION
            body = f"{name}: {render_value(payload.value)} ({location})"

        timestamp = format_local(payload.timestamp, self.config.timestamp_format)
        return f"{body} - {timestamp}" if timestamp else body

    def _normalize(self, results: Iterable[Any], shape: ResultShape) -> List[DatapointPayload]:
        payloads = []
        for result in results or []:
            raw = self._extract_payload(result, shape)
            if raw is None:
                continue
            if isinstance(raw, DatapointPayload):
                payloads.append(raw)
                continue
            try:
                payloads.append(DatapointPayload.model_validate(raw))
            except ValidationError as e:
                logger.warning(f"Skipping unusable {shape} result: {e}")
        return payloads

    @staticmethod
    def _extract_payload(result: Any, shape: ResultShape) -> Any:
        if shape == "search" and isinstance(result, dict):
            return result.get("payload", result)
        if isinstance(result, dict):
            return result.get("payload")
        return getattr(result, "payload", None)
