"""
usbmkt-agent: Conversational agent session client for the USBMKT dashboard.

Keeps one durable chat session, talks to the agent backend over HTTP and
runs the navigation actions the agent asks for.
"""

from usbmkt_agent.client import AgentClient, AsyncAgentClient
from usbmkt_agent.config import ClientConfig, load_config
from usbmkt_agent.controller import SessionController
from usbmkt_agent.errors import (
    AgentSessionError,
    HistoryError,
    RequestValidationError,
    ResponseShapeError,
    StorageError,
    TransportError,
)
from usbmkt_agent.models.agent import AgentResult, ErrorKind, NavigateAction, UnknownAction
from usbmkt_agent.models.message import Message, Role
from usbmkt_agent.session import SessionState

__version__ = "0.1.0"
__all__ = [
    "AgentClient",
    "AsyncAgentClient",
    "ClientConfig",
    "load_config",
    "SessionController",
    "SessionState",
    "AgentSessionError",
    "HistoryError",
    "RequestValidationError",
    "ResponseShapeError",
    "StorageError",
    "TransportError",
    "AgentResult",
    "ErrorKind",
    "NavigateAction",
    "UnknownAction",
    "Message",
    "Role",
]
