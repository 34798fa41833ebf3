"""
History loader: Hydrates a conversation from the history service.
"""

import logging
from typing import Any, Optional

from pydantic import BaseModel, TypeAdapter, ValidationError

from usbmkt_agent.errors import AgentSessionError, HistoryError
from usbmkt_agent.models.message import HistoryRecord, Message
from usbmkt_agent.transport.http import HttpClient

logger = logging.getLogger(__name__)

DEFAULT_HISTORY_PATH = "/api/mcp-history"
HISTORY_ERROR_TEXT = "Error loading conversation history."

_records_adapter = TypeAdapter(list[HistoryRecord])


class HistoryResult(BaseModel):
    messages: list[Message]
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def order_records(records: list[HistoryRecord]) -> list[HistoryRecord]:
    """Ascending persisted order. Left as served when any record lacks one."""
    if all(r.order is not None for r in records):
        return sorted(records, key=lambda r: r.order)  # type: ignore[arg-type,return-value]
    return list(records)


class HistoryLoader:
    def __init__(self, http: HttpClient, path: str = DEFAULT_HISTORY_PATH):
        self._http = http
        self._path = path

    async def fetch(self, session_id: str) -> list[HistoryRecord]:
        """Raw, ordered records for a session. Raises on any failure."""
        if not session_id:
            raise HistoryError("session_id is required", code="invalid_session_id")
        data: Any = await self._http.get(
            self._path, params={"sessionId": session_id}, session_id=session_id,
        )
        try:
            records = _records_adapter.validate_python(data)
        except ValidationError as e:
            raise HistoryError(f"Malformed history for session {session_id}: {e}", code="history_shape_error")
        return order_records(records)

    async def load(self, session_id: str) -> HistoryResult:
        """Messages for ``session_id`` with fresh local ids. Never raises."""
        try:
            records = await self.fetch(session_id)
        except AgentSessionError as e:
            logger.error("Failed to load history for session %s: %s", session_id, e)
            return HistoryResult(messages=[Message.assistant(HISTORY_ERROR_TEXT)], error=str(e))
        except Exception as e:
            logger.exception("Unexpected error loading history for session %s", session_id)
            return HistoryResult(messages=[Message.assistant(HISTORY_ERROR_TEXT)], error=str(e))
        logger.debug("Loaded %d history records for session %s", len(records), session_id)
        return HistoryResult(messages=[r.to_message() for r in records])
