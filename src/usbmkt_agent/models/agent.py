"""
Agent backend wire contract and the typed results handed to callers.
"""

import logging
from enum import Enum
from typing import Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, StrictFloat, StrictInt, StrictStr, field_validator

logger = logging.getLogger(__name__)

NAVIGATE = "navigate"


class AgentContext(BaseModel):
    path: StrictStr = "/"


class AgentRequest(BaseModel):
    """Outbound request, validated before anything touches the network."""

    model_config = ConfigDict(populate_by_name=True)

    prompt: StrictStr
    temperature: Union[StrictFloat, StrictInt] = 0.7
    max_tokens: Optional[StrictInt] = Field(default=None, alias="maxTokens")
    response_json_schema: Optional[Any] = None
    context: AgentContext = Field(default_factory=AgentContext)
    last_action_context: Optional[Any] = Field(default=None, alias="lastActionContext")


class RawAction(BaseModel):
    type: StrictStr
    payload: Optional[Any] = None


class AgentResponse(BaseModel):
    """Reply body: ``{response, action?}``."""

    response: StrictStr
    action: Optional[RawAction] = None

    @field_validator("action", mode="before")
    @classmethod
    def _drop_malformed_action(cls, value: Any) -> Any:
        if value is None or isinstance(value, RawAction):
            return value
        if isinstance(value, dict) and isinstance(value.get("type"), str):
            return value
        logger.warning("Dropping malformed action from agent reply: %r", value)
        return None


class NavigateAction(BaseModel):
    type: Literal["navigate"] = NAVIGATE
    payload: Optional[Any] = None

    @property
    def path(self) -> Optional[str]:
        """Target path, or None when the payload does not name one."""
        if isinstance(self.payload, dict):
            path = self.payload.get("path")
            if isinstance(path, str) and path:
                return path
        return None


class UnknownAction(BaseModel):
    """Any action type this client does not interpret yet."""

    type: str
    payload: Optional[Any] = None


Action = Union[NavigateAction, UnknownAction]


def make_action(action_type: str, payload: Any = None) -> Action:
    if action_type == NAVIGATE:
        return NavigateAction(payload=payload)
    return UnknownAction(type=action_type, payload=payload)


class ErrorKind(str, Enum):
    REQUEST_VALIDATION = "request_validation"
    TRANSPORT = "transport"
    RESPONSE_SHAPE = "response_shape"


class AgentResult(BaseModel):
    """What the gateway hands back. Always well formed, even on failure."""

    text_response: str
    json_response: Optional[Any] = None
    action: Optional[Action] = None
    error: Optional[ErrorKind] = None

    @property
    def ok(self) -> bool:
        return self.error is None
