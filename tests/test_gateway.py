import json

import httpx
import pytest

from usbmkt_agent.gateway import FAILURE_PHRASE, AgentGateway, build_body, build_prompt
from usbmkt_agent.models.agent import AgentRequest, ErrorKind, NavigateAction, UnknownAction
from usbmkt_agent.transport.http import HttpClient

from conftest import BASE_URL

SCHEMA = {"type": "object", "properties": {"x": {"type": "number"}}}


@pytest.fixture
def gateway(backend):
    http = HttpClient(base_url=BASE_URL, transport=httpx.MockTransport(backend.handle))
    return AgentGateway(http)


class TestPrompt:
    def test_plain_prompt_is_sent_verbatim(self):
        assert build_prompt(AgentRequest(prompt="hello")) == "hello"

    def test_schema_is_embedded_before_prompt(self):
        text = build_prompt(AgentRequest(prompt="summarise", response_json_schema=SCHEMA))
        assert json.dumps(SCHEMA) in text
        assert "strict JSON" in text
        assert text.endswith("based on: summarise")

    def test_request_defaults(self):
        req = AgentRequest(prompt="x")
        assert req.temperature == 0.7
        assert req.context.path == "/"
        assert req.max_tokens is None

    def test_body_shape(self):
        body = build_body(AgentRequest(prompt="x", context={"path": "/Metrics"}, lastActionContext={"type": "navigate"}))
        assert body == {
            "message": "x",
            "context": {"path": "/Metrics"},
            "lastActionContext": {"type": "navigate"},
            "response_json_schema": None,
        }


class TestRequestValidation:
    @pytest.mark.asyncio
    async def test_missing_prompt_never_hits_network(self, gateway, backend):
        result = await gateway.invoke({"context": {"path": "/"}})
        assert result.error is ErrorKind.REQUEST_VALIDATION
        assert FAILURE_PHRASE in result.text_response
        assert result.json_response is None
        assert result.action is None
        assert backend.requests == []

    @pytest.mark.asyncio
    async def test_non_string_prompt_rejected(self, gateway, backend):
        result = await gateway.invoke({"prompt": 42})
        assert result.error is ErrorKind.REQUEST_VALIDATION
        assert backend.requests == []

    @pytest.mark.asyncio
    async def test_bad_context_rejected(self, gateway, backend):
        result = await gateway.invoke({"prompt": "x", "context": {"path": 3}})
        assert result.error is ErrorKind.REQUEST_VALIDATION
        assert backend.requests == []

    @pytest.mark.asyncio
    @pytest.mark.parametrize("field", ["response_json_schema", "lastActionContext"])
    async def test_unserialisable_request_never_hits_network(self, gateway, backend, field):
        result = await gateway.invoke({"prompt": "x", field: {"bad": {1, 2}}})
        assert result.error is ErrorKind.REQUEST_VALIDATION
        assert FAILURE_PHRASE in result.text_response
        assert backend.requests == []


class TestTransport:
    @pytest.mark.asyncio
    async def test_session_id_travels_as_header(self, gateway, backend):
        await gateway.invoke({"prompt": "hi"}, session_id="sess-9")
        request = backend.agent_requests[0]
        assert request.method == "POST"
        assert request.headers["X-Session-ID"] == "sess-9"
        body = json.loads(request.content)
        assert "sessionId" not in body
        assert body["message"] == "hi"
        assert body["context"] == {"path": "/"}

    @pytest.mark.asyncio
    async def test_no_header_without_session(self, gateway, backend):
        await gateway.invoke({"prompt": "hi"})
        assert "X-Session-ID" not in backend.agent_requests[0].headers

    @pytest.mark.asyncio
    async def test_unreachable_backend(self, gateway, backend):
        backend.agent_down = True
        result = await gateway.invoke({"prompt": "hi"})
        assert result.error is ErrorKind.TRANSPORT
        assert FAILURE_PHRASE in result.text_response
        assert result.json_response is None
        assert result.action is None

    @pytest.mark.asyncio
    async def test_non_2xx(self, gateway, backend):
        backend.agent_status = 405
        result = await gateway.invoke({"prompt": "hi"})
        assert result.error is ErrorKind.TRANSPORT
        assert "405" in result.text_response

    @pytest.mark.asyncio
    async def test_non_json_success_body(self):
        transport = httpx.MockTransport(lambda request: httpx.Response(200, content=b"<html>"))
        gateway = AgentGateway(HttpClient(base_url=BASE_URL, transport=transport))
        result = await gateway.invoke({"prompt": "x"})
        assert result.error is ErrorKind.RESPONSE_SHAPE
        assert FAILURE_PHRASE in result.text_response
        assert result.action is None


class TestResponse:
    @pytest.mark.asyncio
    async def test_plain_reply(self, gateway, backend):
        backend.reply = {"response": "Olá!", "action": None}
        result = await gateway.invoke({"prompt": "hi"})
        assert result.ok
        assert result.text_response == "Olá!"
        assert result.json_response is None
        assert result.action is None

    @pytest.mark.asyncio
    async def test_missing_response_field(self, gateway, backend):
        backend.reply = {"answer": "nope"}
        result = await gateway.invoke({"prompt": "hi"})
        assert result.error is ErrorKind.RESPONSE_SHAPE
        assert result.action is None

    @pytest.mark.asyncio
    async def test_json_reply_parsed_when_schema_requested(self, gateway, backend):
        backend.reply = {"response": "{\"x\":1}", "action": None}
        result = await gateway.invoke({"prompt": "numbers", "response_json_schema": SCHEMA})
        assert result.ok
        assert result.json_response == {"x": 1}
        assert result.text_response == "{\"x\":1}"

    @pytest.mark.asyncio
    async def test_json_not_parsed_without_schema(self, gateway, backend):
        backend.reply = {"response": "{\"x\":1}"}
        result = await gateway.invoke({"prompt": "numbers"})
        assert result.json_response is None

    @pytest.mark.asyncio
    async def test_unparseable_json_is_not_fatal(self, gateway, backend):
        backend.reply = {"response": "not json at all"}
        result = await gateway.invoke({"prompt": "numbers", "response_json_schema": SCHEMA})
        assert result.ok
        assert result.json_response is None
        assert result.text_response == "not json at all"

    @pytest.mark.asyncio
    async def test_navigate_action(self, gateway, backend):
        backend.reply = {"response": "ok", "action": {"type": "navigate", "payload": {"path": "/campaigns"}}}
        result = await gateway.invoke({"prompt": "go"})
        assert isinstance(result.action, NavigateAction)
        assert result.action.path == "/campaigns"

    @pytest.mark.asyncio
    async def test_unknown_action_is_kept(self, gateway, backend):
        backend.reply = {"response": "ok", "action": {"type": "open_modal", "payload": 7}}
        result = await gateway.invoke({"prompt": "go"})
        assert isinstance(result.action, UnknownAction)
        assert result.action.type == "open_modal"
        assert result.action.payload == 7

    @pytest.mark.asyncio
    @pytest.mark.parametrize("action", [
        {"payload": {"path": "/x"}},
        {"type": 5},
        {"type": None, "payload": {}},
        "navigate",
    ])
    async def test_malformed_action_becomes_none(self, gateway, backend, action):
        backend.reply = {"response": "still here", "action": action}
        result = await gateway.invoke({"prompt": "go"})
        assert result.ok
        assert result.action is None
        assert result.text_response == "still here"

    @pytest.mark.asyncio
    async def test_enveloped_reply(self, gateway, backend):
        backend.reply = {"status": "success", "data": {"response": "wrapped"}}
        result = await gateway.invoke({"prompt": "hi"})
        assert result.text_response == "wrapped"
