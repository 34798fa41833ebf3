"""Basic unit tests for usbmkt-agent package."""

from usbmkt_agent import (
    AgentClient,
    AgentSessionError,
    AsyncAgentClient,
    HistoryError,
    RequestValidationError,
    ResponseShapeError,
    Role,
    StorageError,
    TransportError,
    __version__,
)
from usbmkt_agent.gateway import DEFAULT_AGENT_PATH
from usbmkt_agent.history import DEFAULT_HISTORY_PATH
from usbmkt_agent.transport.http import SESSION_HEADER


def test_version():
    assert __version__ == "0.1.0"


def test_public_exports():
    assert AgentClient is not None
    assert AsyncAgentClient is not None


def test_error_hierarchy():
    for cls in (RequestValidationError, TransportError, ResponseShapeError, HistoryError, StorageError):
        assert issubclass(cls, AgentSessionError)


def test_error_attributes():
    err = AgentSessionError(code="test_code", message="something broke")
    assert err.code == "test_code"
    assert str(err) == "something broke"
    assert err.details is None

    http_err = TransportError("HTTP 502: bad gateway", code="http_error", status_code=502)
    assert http_err.code == "http_error"
    assert http_err.status_code == 502
    assert http_err.details == {"status_code": 502}


def test_wire_constants():
    assert SESSION_HEADER == "X-Session-ID"
    assert DEFAULT_AGENT_PATH == "/api/mcp-agent"
    assert DEFAULT_HISTORY_PATH == "/api/mcp-history"
    assert {r.value for r in Role} == {"system", "user", "assistant", "tool", "function"}
