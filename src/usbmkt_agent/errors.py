"""
Agent session error types.

Raised by the transport and schema layers; the gateway and history loader
catch them at their boundary and turn them into result values.
"""

from typing import Any, Optional


class AgentSessionError(Exception):
    def __init__(self, code: str, message: str, details: Optional[dict[str, Any]] = None):
        super().__init__(message)
        self.code = code
        self.details = details


class RequestValidationError(AgentSessionError):
    def __init__(self, message: str, details: Optional[dict[str, Any]] = None):
        super().__init__("request_validation_error", message, details)


class TransportError(AgentSessionError):
    def __init__(self, message: str, code: str = "transport_error", status_code: Optional[int] = None):
        super().__init__(code, message, {"status_code": status_code} if status_code is not None else None)
        self.status_code = status_code


class ResponseShapeError(AgentSessionError):
    def __init__(self, message: str, details: Optional[dict[str, Any]] = None):
        super().__init__("response_shape_error", message, details)


class HistoryError(AgentSessionError):
    def __init__(self, message: str, code: str = "history_error"):
        super().__init__(code, message)


class StorageError(AgentSessionError):
    def __init__(self, message: str):
        super().__init__("storage_error", message)
