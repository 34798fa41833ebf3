"""
Agent gateway: The schema-checked boundary to the agent backend.

Request and reply are validated with pydantic. Every failure (bad request,
network, non-2xx, bad reply shape) is turned into an ``AgentResult`` carrying
an error text, so callers never see an exception from here.
"""

import json
import logging
from typing import Any, Optional, Union

from pydantic import ValidationError

from usbmkt_agent.errors import AgentSessionError, RequestValidationError, ResponseShapeError
from usbmkt_agent.models.agent import (
    Action,
    AgentRequest,
    AgentResponse,
    AgentResult,
    ErrorKind,
    make_action,
)
from usbmkt_agent.transport.http import HttpClient

logger = logging.getLogger(__name__)

DEFAULT_AGENT_PATH = "/api/mcp-agent"
FAILURE_PHRASE = "Error communicating with the AI assistant"
SCHEMA_INSTRUCTION = (
    "Generate insights in strict JSON format that validates against the following schema: "
    "{schema} based on: {prompt}"
)


def failure_text(detail: str) -> str:
    return f"{FAILURE_PHRASE}: {detail or 'unknown error'}. Check the backend logs."


def build_prompt(request: AgentRequest) -> str:
    """The text sent as ``message``; embeds the JSON schema when one was asked for."""
    if request.response_json_schema is None:
        return request.prompt
    return SCHEMA_INSTRUCTION.format(
        schema=json.dumps(request.response_json_schema),
        prompt=request.prompt,
    )


def build_body(request: AgentRequest) -> dict[str, Any]:
    return {
        "message": build_prompt(request),
        "context": request.context.model_dump(),
        "lastActionContext": request.last_action_context,
        "response_json_schema": request.response_json_schema,
    }


def extract_action(response: AgentResponse) -> Optional[Action]:
    raw = response.action
    if raw is None or not isinstance(raw.type, str):
        return None
    return make_action(raw.type, raw.payload)


def parse_json_reply(text: str) -> Optional[Any]:
    try:
        return json.loads(text)
    except ValueError as e:
        logger.warning("Agent reply could not be parsed as JSON (%s): %r", e, text[:200])
        return None


class AgentGateway:
    def __init__(self, http: HttpClient, path: str = DEFAULT_AGENT_PATH):
        self._http = http
        self._path = path

    async def invoke(
        self,
        request: Union[AgentRequest, dict[str, Any]],
        session_id: Optional[str] = None,
    ) -> AgentResult:
        """Validate, send, validate the reply. Never raises.

        ``session_id`` travels as the ``X-Session-ID`` header, not in the body.
        """
        try:
            validated = self._validate_request(request)
            body = self._prepare_body(validated)
        except RequestValidationError as e:
            logger.error("Agent request rejected before sending: %s", e)
            return self._failure(ErrorKind.REQUEST_VALIDATION, str(e))

        try:
            raw = await self._http.post(self._path, body, session_id=session_id)
            reply = self._validate_response(raw)
        except ResponseShapeError as e:
            logger.error("Agent reply has an unexpected shape: %s", e)
            return self._failure(ErrorKind.RESPONSE_SHAPE, str(e))
        except AgentSessionError as e:
            logger.error("Agent call failed: %s", e)
            return self._failure(ErrorKind.TRANSPORT, str(e))
        except Exception as e:
            logger.exception("Unexpected error calling the agent backend")
            return self._failure(ErrorKind.TRANSPORT, str(e))

        json_response = None
        if validated.response_json_schema is not None:
            json_response = parse_json_reply(reply.response)

        return AgentResult(
            text_response=reply.response,
            json_response=json_response,
            action=extract_action(reply),
        )

    @staticmethod
    def _validate_request(request: Union[AgentRequest, dict[str, Any]]) -> AgentRequest:
        if isinstance(request, AgentRequest):
            return request
        try:
            return AgentRequest.model_validate(request)
        except ValidationError as e:
            raise RequestValidationError(f"Invalid agent request: {e.error_count()} validation error(s)",
                                         details={"errors": e.errors(include_url=False)})

    @staticmethod
    def _prepare_body(request: AgentRequest) -> dict[str, Any]:
        try:
            body = build_body(request)
            json.dumps(body)
        except (TypeError, ValueError) as e:
            raise RequestValidationError(f"Agent request is not JSON serialisable: {e}")
        return body

    @staticmethod
    def _validate_response(raw: Any) -> AgentResponse:
        try:
            return AgentResponse.model_validate(raw)
        except ValidationError as e:
            raise ResponseShapeError(f"Invalid agent reply: {e.error_count()} validation error(s)",
                                     details={"errors": e.errors(include_url=False)})

    @staticmethod
    def _failure(kind: ErrorKind, detail: str) -> AgentResult:
        return AgentResult(text_response=failure_text(detail), json_response=None, action=None, error=kind)
