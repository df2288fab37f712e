"""
Error types shared by the gateway, analytics and tool layers.

Every failure in this package is an ``AgentError`` carrying one of a closed set
of ``ErrorKind`` values plus structured context. Errors are only turned into
display strings at the outermost boundary (MCP tool/resource handlers and the
settings HTTP API).
"""

from enum import Enum
from typing import Any, Dict, Optional


class ErrorKind(str, Enum):
    NETWORK = "network"
    UPSTREAM_API = "upstream_api"
    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    PERSISTENCE = "persistence"


class AgentError(Exception):
    """Base error with a kind and structured context."""

    kind: ErrorKind = ErrorKind.UPSTREAM_API

    def __init__(self, message: str, **context: Any):
        super().__init__(message)
        self.message = message
        self.context: Dict[str, Any] = context

    def __str__(self) -> str:
        return self.message

    def to_dict(self) -> Dict[str, Any]:
        return {"kind": self.kind.value, "message": self.message, "context": self.context}


class NetworkError(AgentError):
    """The remote service could not be reached."""

    kind = ErrorKind.NETWORK


class UpstreamApiError(AgentError):
    """The remote service answered with a non-2xx status or an explicit failure body."""

    kind = ErrorKind.UPSTREAM_API

    def __init__(self, message: str, status_code: Optional[int] = None, **context: Any):
        super().__init__(message, status_code=status_code, **context)
        self.status_code = status_code


class MalformedResponseError(UpstreamApiError):
    """The remote service answered, but not with the shape we expect."""


class ValidationError(AgentError):
    kind = ErrorKind.VALIDATION


class ConfigError(ValidationError):
    """Required configuration is missing or unusable."""


class NotFoundError(AgentError):
    kind = ErrorKind.NOT_FOUND


class PersistenceError(AgentError):
    kind = ErrorKind.PERSISTENCE
