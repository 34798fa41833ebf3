"""
Chat turn models.
"""

import uuid
from enum import Enum
from typing import Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, model_validator


class Role(str, Enum):
    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"
    TOOL = "tool"
    FUNCTION = "function"


# Roles whose turns always carry text.
CONVERSATIONAL_ROLES = {Role.USER, Role.ASSISTANT}


def new_message_id() -> str:
    return str(uuid.uuid4())


class Message(BaseModel):
    """One turn of the conversation. Immutable once built.

    ``id`` is local to this process and regenerated on every history load.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str = Field(default_factory=new_message_id)
    role: Role
    content: Optional[str] = None
    tool_call_id: Optional[str] = Field(default=None, alias="toolCallId")
    name: Optional[str] = None

    @model_validator(mode="after")
    def _content_required_for_conversation(self) -> "Message":
        if self.content is None and self.role in CONVERSATIONAL_ROLES:
            raise ValueError(f"{self.role.value} turns must carry content")
        return self

    @classmethod
    def user(cls, content: str) -> "Message":
        return cls(role=Role.USER, content=content)

    @classmethod
    def assistant(cls, content: str) -> "Message":
        return cls(role=Role.ASSISTANT, content=content)


class HistoryRecord(BaseModel):
    """A persisted turn as returned by the history service.

    The service has emitted both ``tool_call_id``/``message_order`` and
    ``toolCallId``/``order`` spellings; either is accepted.
    """

    role: Role
    content: Optional[str] = None
    tool_call_id: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("tool_call_id", "toolCallId"),
    )
    name: Optional[str] = None
    order: Optional[int] = Field(
        default=None, validation_alias=AliasChoices("order", "message_order"),
    )

    def to_message(self) -> Message:
        content = self.content
        if content is None and self.role in CONVERSATIONAL_ROLES:
            content = ""
        return Message(
            role=self.role,
            content=content,
            tool_call_id=self.tool_call_id,
            name=self.name,
        )
