"""
The one active conversation of a client: identifier, turns, loading state.
"""

from enum import Enum
from typing import Optional

from usbmkt_agent.messages import MessageLog


class SessionState(str, Enum):
    IDLE = "idle"
    AWAITING_HISTORY = "awaiting_history"
    SENDING = "sending"


class Session:
    """Owned and mutated only by ``SessionController``.

    ``generation`` increases on every (re)establishment; work started under an
    older generation must not touch the log when it completes.
    """

    def __init__(self) -> None:
        self.session_id: Optional[str] = None
        self.log = MessageLog()
        self.state = SessionState.IDLE
        self.generation = 0

    @property
    def is_loading(self) -> bool:
        return self.state is not SessionState.IDLE

    def begin(self, session_id: str) -> int:
        self.generation += 1
        self.session_id = session_id
        self.state = SessionState.AWAITING_HISTORY
        return self.generation

    def is_current(self, generation: int) -> bool:
        return generation == self.generation

    def __repr__(self) -> str:
        return f"Session(session_id={self.session_id!r}, state={self.state.value}, messages={len(self.log)})"
