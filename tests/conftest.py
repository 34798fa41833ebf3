"""Shared fixtures: an in-process fake of the dashboard backend."""

import asyncio
import json
from typing import Any, Callable, Optional, Union

import httpx
import pytest

from usbmkt_agent.client import AsyncAgentClient
from usbmkt_agent.config import ClientConfig
from usbmkt_agent.identity import MemorySessionStore

BASE_URL = "http://dashboard.test"

Reply = Union[dict[str, Any], Callable[[dict[str, Any]], Any]]


class FakeBackend:
    """Serves /api/mcp-history and /api/mcp-agent from memory.

    ``gates`` holds asyncio events keyed by session id (history) or by
    ``"agent"``; a request waits on its gate before being answered.
    """

    def __init__(self) -> None:
        self.history: dict[str, list[dict[str, Any]]] = {}
        self.reply: Reply = {"response": "ok", "action": None}
        self.history_status = 200
        self.agent_status = 200
        self.agent_down = False
        self.gates: dict[str, asyncio.Event] = {}
        self.requests: list[httpx.Request] = []
        self.pending = 0

    @property
    def agent_requests(self) -> list[httpx.Request]:
        return [r for r in self.requests if r.url.path == "/api/mcp-agent"]

    @property
    def history_requests(self) -> list[httpx.Request]:
        return [r for r in self.requests if r.url.path == "/api/mcp-history"]

    async def _wait(self, key: str) -> None:
        gate = self.gates.get(key)
        if gate is not None:
            self.pending += 1
            try:
                await gate.wait()
            finally:
                self.pending -= 1

    async def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if request.url.path == "/api/mcp-history":
            sid = request.headers.get("X-Session-ID") or request.url.params.get("sessionId")
            await self._wait(sid)
            if self.history_status != 200:
                return httpx.Response(self.history_status, json={"error": "boom"})
            return httpx.Response(200, json=self.history.get(sid, []))
        if request.url.path == "/api/mcp-agent":
            await self._wait("agent")
            if self.agent_down:
                raise httpx.ConnectError("Connection refused", request=request)
            if self.agent_status != 200:
                return httpx.Response(self.agent_status, json={"error": "Method Not Allowed"})
            body = json.loads(request.content)
            reply = self.reply(body) if callable(self.reply) else self.reply
            return httpx.Response(200, json=reply)
        return httpx.Response(404, json={"error": "not found"})


async def settle(predicate: Callable[[], bool], rounds: int = 100) -> None:
    """Yield to the loop until ``predicate`` holds."""
    for _ in range(rounds):
        if predicate():
            return
        await asyncio.sleep(0)
    raise AssertionError("condition never became true")


@pytest.fixture
def backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture
def store() -> MemorySessionStore:
    return MemorySessionStore()


@pytest.fixture
def navigations() -> list[str]:
    return []


@pytest.fixture
def make_client(backend: FakeBackend, store: MemorySessionStore, navigations: list[str]):
    def _make(navigator: Optional[Callable[[str], Any]] = None, **overrides: Any) -> AsyncAgentClient:
        config = ClientConfig(base_url=BASE_URL, session_file=None, **overrides)
        return AsyncAgentClient(
            config=config,
            navigator=navigator or navigations.append,
            store=store,
            transport=httpx.MockTransport(backend.handle),
        )
    return _make
