"""
AsyncAgentClient / AgentClient: Main entry points.
"""

import asyncio
from typing import Any, Optional

import httpx

from usbmkt_agent.actions import ActionDispatcher, Navigator
from usbmkt_agent.config import ClientConfig
from usbmkt_agent.controller import ContextLike, SessionController
from usbmkt_agent.gateway import AgentGateway
from usbmkt_agent.history import HistoryLoader, HistoryResult
from usbmkt_agent.identity import FileSessionStore, SessionIdentity, SessionStore
from usbmkt_agent.models.agent import AgentResult
from usbmkt_agent.models.message import Message
from usbmkt_agent.session import SessionState
from usbmkt_agent.transport.http import HttpClient


class AsyncAgentClient:
    """Async agent session client (primary).

    ``navigator`` receives the target path of every ``navigate`` action.
    ``store`` overrides the session file from the config; ``transport`` is
    handed to httpx and is mostly useful for tests.
    """

    def __init__(
        self,
        config: Optional[ClientConfig] = None,
        navigator: Optional[Navigator] = None,
        store: Optional[SessionStore] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.config = config or ClientConfig()
        if store is None and self.config.session_file is not None:
            store = FileSessionStore(self.config.session_file)

        self.http = HttpClient(
            base_url=self.config.base_url,
            timeout=self.config.timeout,
            user_agent=self.config.user_agent,
            transport=transport,
        )
        self.identity = SessionIdentity(store)
        self.history = HistoryLoader(self.http, self.config.history_path)
        self.gateway = AgentGateway(self.http, self.config.agent_path)
        self.dispatcher = ActionDispatcher(navigator)
        self.controller = SessionController(self.identity, self.history, self.gateway, self.dispatcher)

    @property
    def session_id(self) -> Optional[str]:
        return self.controller.session_id

    @property
    def messages(self) -> tuple[Message, ...]:
        return self.controller.messages

    @property
    def is_loading(self) -> bool:
        return self.controller.is_loading

    @property
    def state(self) -> SessionState:
        return self.controller.state

    async def open(self) -> str:
        """Establish the current session and load its history."""
        return await self.controller.open()

    async def send_message(self, text: str, context: Optional[ContextLike] = None) -> Optional[AgentResult]:
        return await self.controller.send_message(text, context)

    async def start_new_conversation(self) -> str:
        return await self.controller.start_new_conversation()

    async def switch_session(self, session_id: str) -> Optional[str]:
        return await self.controller.switch_session(session_id)

    async def get_history(self, session_id: Optional[str] = None) -> HistoryResult:
        """Fetch persisted turns without touching the active conversation."""
        sid = session_id or self.controller.session_id or self.identity.acquire()
        return await self.history.load(sid)

    async def invoke_llm(
        self,
        prompt: str,
        *,
        response_json_schema: Optional[Any] = None,
        temperature: float = 0.7,
        max_tokens: Optional[int] = None,
        context: Optional[ContextLike] = None,
        last_action_context: Optional[Any] = None,
    ) -> AgentResult:
        """One-off agent call outside the conversation, e.g. for JSON insights."""
        request: dict[str, Any] = {
            "prompt": prompt,
            "temperature": temperature,
            "maxTokens": max_tokens,
            "response_json_schema": response_json_schema,
            "lastActionContext": last_action_context,
        }
        if context is not None:
            request["context"] = context
        return await self.gateway.invoke(request)

    def toggle_panel(self) -> bool:
        return self.controller.toggle_panel()

    def save_conversation(self, name: str) -> None:
        self.controller.save_conversation(name)

    def load_conversation(self, session_id: str) -> None:
        self.controller.load_conversation(session_id)

    def delete_conversation(self, session_id: str) -> None:
        self.controller.delete_conversation(session_id)

    async def close(self) -> None:
        await self.http.close()


class AgentClient:
    """Sync wrapper around AsyncAgentClient. Runs the event loop internally."""

    def __init__(self, **kwargs: Any):
        self._async = AsyncAgentClient(**kwargs)
        self._loop = asyncio.new_event_loop()

    def _run(self, coro: Any) -> Any:
        return self._loop.run_until_complete(coro)

    @property
    def session_id(self) -> Optional[str]:
        return self._async.session_id

    @property
    def messages(self) -> tuple[Message, ...]:
        return self._async.messages

    @property
    def is_loading(self) -> bool:
        return self._async.is_loading

    def open(self) -> str:
        return self._run(self._async.open())

    def send_message(self, text: str, context: Optional[ContextLike] = None) -> Optional[AgentResult]:
        return self._run(self._async.send_message(text, context))

    def start_new_conversation(self) -> str:
        return self._run(self._async.start_new_conversation())

    def switch_session(self, session_id: str) -> Optional[str]:
        return self._run(self._async.switch_session(session_id))

    def get_history(self, session_id: Optional[str] = None) -> HistoryResult:
        return self._run(self._async.get_history(session_id))

    def invoke_llm(self, prompt: str, **kwargs: Any) -> AgentResult:
        return self._run(self._async.invoke_llm(prompt, **kwargs))

    def toggle_panel(self) -> bool:
        return self._async.toggle_panel()

    def close(self) -> None:
        try:
            self._run(self._async.close())
        finally:
            self._loop.close()
