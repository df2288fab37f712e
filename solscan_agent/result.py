from dataclasses import dataclass
from typing import Generic, Optional, TypeVar

from .errors import AgentError

T = TypeVar("T")


@dataclass
class ApiResult(Generic[T]):
    """Success/error result returned by every gateway and analytics call.

    ``data`` is set when ``success`` is True, ``error`` (the display message) and
    ``exception`` (the typed error) otherwise.
    """

    success: bool
    data: Optional[T] = None
    error: Optional[str] = None
    exception: Optional[AgentError] = None

    @classmethod
    def ok(cls, data: T) -> "ApiResult[T]":
        return cls(success=True, data=data)

    @classmethod
    def fail(cls, exc: AgentError) -> "ApiResult[T]":
        return cls(success=False, error=str(exc), exception=exc)

    def unwrap(self) -> T:
        """Returns the data or raises the error this result carries."""
        if self.success:
            return self.data  # type: ignore[return-value]
        if self.exception is not None:
            raise self.exception
        raise AgentError(self.error or "Unknown error")
