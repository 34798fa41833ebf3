"""
Session controller: Owns the session and sequences history loads and sends.

State machine::

    Idle -> AwaitingHistory -> Idle     (open / new conversation / switch)
    Idle -> Sending -> Idle             (send_message)

Loads and sends share one loading flag, so at most one of them is in flight.
A send attempted while loading is a silent no-op.
"""

import logging
from typing import Any, Optional, Union

from usbmkt_agent.actions import ActionDispatcher
from usbmkt_agent.gateway import AgentGateway
from usbmkt_agent.history import HistoryLoader
from usbmkt_agent.identity import SessionIdentity
from usbmkt_agent.models.agent import Action, AgentContext, AgentResult
from usbmkt_agent.models.message import Message
from usbmkt_agent.session import Session, SessionState

logger = logging.getLogger(__name__)

ContextLike = Union[AgentContext, dict[str, Any]]


class SessionController:
    def __init__(
        self,
        identity: SessionIdentity,
        history: HistoryLoader,
        gateway: AgentGateway,
        dispatcher: ActionDispatcher,
        session: Optional[Session] = None,
    ):
        self._identity = identity
        self._history = history
        self._gateway = gateway
        self._dispatcher = dispatcher
        self._session = session or Session()
        self._panel_open = False
        self._last_action: Optional[Action] = None

    @property
    def session(self) -> Session:
        return self._session

    @property
    def session_id(self) -> Optional[str]:
        return self._session.session_id

    @property
    def messages(self) -> tuple[Message, ...]:
        return self._session.log.snapshot()

    @property
    def is_loading(self) -> bool:
        return self._session.is_loading

    @property
    def state(self) -> SessionState:
        return self._session.state

    @property
    def is_panel_open(self) -> bool:
        return self._panel_open

    @property
    def last_action(self) -> Optional[Action]:
        return self._last_action

    def toggle_panel(self) -> bool:
        self._panel_open = not self._panel_open
        return self._panel_open

    async def open(self) -> str:
        """Acquire the durable session id and load its history once."""
        session_id = self._identity.acquire()
        if session_id != self._session.session_id:
            await self._establish(session_id)
        return session_id

    async def start_new_conversation(self) -> str:
        session_id = self._identity.rotate()
        self._last_action = None
        self._session.log.replace_all([])
        await self._establish(session_id)
        return session_id

    async def switch_session(self, session_id: str) -> Optional[str]:
        """Resume a known conversation by identifier."""
        if not isinstance(session_id, str) or not session_id.strip():
            logger.warning("Ignoring switch to empty session id")
            return self._session.session_id
        session_id = self._identity.adopt(session_id)
        if session_id != self._session.session_id:
            self._last_action = None
            await self._establish(session_id)
        return session_id

    async def send_message(self, text: str, context: Optional[ContextLike] = None) -> Optional[AgentResult]:
        """Send one user turn. Returns None when the send was not accepted."""
        if not isinstance(text, str) or not text.strip():
            logger.debug("Ignoring empty message")
            return None
        if self._session.is_loading:
            logger.debug("Ignoring message while %s", self._session.state.value)
            return None
        if self._session.session_id is None:
            await self.open()
            if self._session.is_loading:
                return None

        session = self._session
        session.log.append(Message.user(text))
        generation = session.generation
        session.state = SessionState.SENDING

        request: dict[str, Any] = {"prompt": text}
        if context is not None:
            request["context"] = context.model_dump() if isinstance(context, AgentContext) else context
        if self._last_action is not None:
            request["lastActionContext"] = self._last_action.model_dump()

        try:
            result = await self._gateway.invoke(request, session_id=session.session_id)
            if session.is_current(generation):
                session.log.append(Message.assistant(result.text_response))
                if result.action is not None:
                    self._last_action = result.action
                    self._dispatcher.dispatch(result.action)
            else:
                logger.info("Discarding agent reply for superseded session")
        finally:
            if session.is_current(generation):
                session.state = SessionState.IDLE
        return result

    def save_conversation(self, name: str) -> None:
        logger.warning("Saving conversations is not implemented (name=%r)", name)

    def load_conversation(self, session_id: str) -> None:
        logger.warning("Loading saved conversations is not implemented (session_id=%r)", session_id)

    def delete_conversation(self, session_id: str) -> None:
        logger.warning("Deleting conversations is not implemented (session_id=%r)", session_id)

    async def _establish(self, session_id: str) -> None:
        generation = self._session.begin(session_id)
        logger.info("Loading history for session %s", session_id)
        try:
            result = await self._history.load(session_id)
            if self._session.is_current(generation):
                self._session.log.replace_all(result.messages)
            else:
                logger.debug("Discarding stale history for session %s", session_id)
        finally:
            if self._session.is_current(generation):
                self._session.state = SessionState.IDLE
