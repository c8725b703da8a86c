"""Error taxonomy for Graph API failures surfaced to MCP tools."""

from __future__ import annotations

from enum import Enum
from typing import Any, Mapping

from pydantic import BaseModel, Field


class ErrorKind(str, Enum):
    AUTH_EXPIRED = "AUTH_EXPIRED"
    AUTH_REQUIRED = "AUTH_REQUIRED"
    PERMISSION_DENIED = "PERMISSION_DENIED"
    RATE_LIMITED = "RATE_LIMITED"
    TRANSIENT_SERVER_ERROR = "TRANSIENT_SERVER_ERROR"
    INVALID_PARAMETER = "INVALID_PARAMETER"
    NOT_FOUND = "NOT_FOUND"
    DUPLICATE = "DUPLICATE"
    HTTP_ERROR = "HTTP_ERROR"
    TIMEOUT = "TIMEOUT"
    NO_CREDENTIAL = "NO_CREDENTIAL"
    RETRIES_EXHAUSTED = "RETRIES_EXHAUSTED"
    UNKNOWN = "UNKNOWN"


RETRYABLE_KINDS = frozenset(
    {
        ErrorKind.RATE_LIMITED,
        ErrorKind.TRANSIENT_SERVER_ERROR,
        ErrorKind.TIMEOUT,
    }
)


class ClassifiedError(BaseModel):
    """Graph API failure translated into the error taxonomy."""

    kind: ErrorKind
    message: str
    code: int | None = Field(default=None, description="Vendor error code")
    subcode: int | None = Field(default=None, description="Vendor error subcode")
    status: int | None = Field(default=None, description="HTTP status of the failing response")
    fbtrace_id: str | None = None
    details: Mapping[str, Any] | None = None
    retry_after: float | None = Field(default=None, description="Retry hint in seconds")

    @property
    def retryable(self) -> bool:
        return self.kind in RETRYABLE_KINDS

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "kind": self.kind.value,
            "message": self.message,
        }
        if self.code is not None:
            payload["code"] = self.code
        if self.subcode is not None:
            payload["subcode"] = self.subcode
        if self.status is not None:
            payload["status"] = self.status
        if self.fbtrace_id:
            payload["fbtrace_id"] = self.fbtrace_id
        if self.details:
            payload["details"] = dict(self.details)
        if self.retry_after is not None:
            payload["retry_after"] = self.retry_after
        return payload


class MetaApiException(RuntimeError):
    """Exception carrying a classified Graph API error."""

    def __init__(self, error: ClassifiedError):
        super().__init__(error.message)
        self.error = error

    @property
    def kind(self) -> ErrorKind:
        return self.error.kind


class NoCredentialError(MetaApiException):
    """Raised when no access token can be resolved for the current call."""

    def __init__(self, message: str | None = None):
        super().__init__(
            ClassifiedError(
                kind=ErrorKind.NO_CREDENTIAL,
                message=message
                or (
                    "No Meta access token available. Provide one via the X-Meta-Token header, "
                    "META_TOKENS or META_ACCESS_TOKEN."
                ),
            )
        )


def error_response(error: ClassifiedError, *, meta: Mapping[str, Any] | None = None) -> Mapping[str, Any]:
    """Build a JSON error response."""

    return {
        "ok": False,
        "error": error.to_dict(),
        "meta": dict(meta or {}),
    }


__all__ = [
    "ClassifiedError",
    "ErrorKind",
    "MetaApiException",
    "NoCredentialError",
    "RETRYABLE_KINDS",
    "error_response",
]
