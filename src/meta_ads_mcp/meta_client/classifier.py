"""Translate Graph API error payloads into the error taxonomy.

Meta error reference: https://developers.facebook.com/docs/graph-api/guides/error-handling/
"""

from __future__ import annotations

import json
from typing import Any, Mapping

from ..errors import RETRYABLE_KINDS, ClassifiedError, ErrorKind
from ..logging import get_logger

logger = get_logger(__name__)

RATE_LIMIT_CODES = frozenset({4, 17, 32, 613})
TRANSIENT_CODES = frozenset({1, 2})
NOT_FOUND_SUBCODE = 33


def is_vendor_error(body: Any) -> bool:
    """Whether a decoded response body has the ``{"error": {...}}`` shape."""

    return isinstance(body, Mapping) and isinstance(body.get("error"), Mapping)


def _as_int(value: Any) -> int | None:
    if isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _kind_for(code: int | None, subcode: int | None) -> ErrorKind:
    if code == 190:
        return ErrorKind.AUTH_EXPIRED
    if code == 102:
        return ErrorKind.AUTH_REQUIRED
    if code == 10:
        return ErrorKind.PERMISSION_DENIED
    if code in RATE_LIMIT_CODES:
        return ErrorKind.RATE_LIMITED
    if code in TRANSIENT_CODES:
        return ErrorKind.TRANSIENT_SERVER_ERROR
    if code == 803 or (code == 100 and subcode == NOT_FOUND_SUBCODE):
        return ErrorKind.NOT_FOUND
    if code == 100:
        return ErrorKind.INVALID_PARAMETER
    if code == 2650:
        return ErrorKind.DUPLICATE
    return ErrorKind.UNKNOWN


def _message_for(kind: ErrorKind, vendor_message: str, code: int | None, subcode: int | None) -> str:
    if kind is ErrorKind.AUTH_EXPIRED:
        return f"Invalid or expired access token. Please provide a valid token. (Meta: {vendor_message})"
    if kind is ErrorKind.AUTH_REQUIRED:
        return f"Authentication required. (Meta: {vendor_message})"
    if kind is ErrorKind.PERMISSION_DENIED:
        return f"Insufficient permissions for this operation. (Meta: {vendor_message})"
    if kind is ErrorKind.RATE_LIMITED:
        return f"Rate limit exceeded. Please wait and try again. (Meta: {vendor_message})"
    if kind is ErrorKind.TRANSIENT_SERVER_ERROR:
        return f"Meta API error: {vendor_message}. Please retry."
    if kind is ErrorKind.NOT_FOUND:
        return f"Object not found: {vendor_message}"
    if kind is ErrorKind.INVALID_PARAMETER:
        suffix = f" (subcode: {subcode})" if subcode is not None else ""
        return f"Invalid parameter: {vendor_message}{suffix}"
    if kind is ErrorKind.DUPLICATE:
        return f"Duplicate: {vendor_message}"
    return f"Meta API error (code {code}): {vendor_message}"


def classify(payload: Mapping[str, Any], *, status: int | None = None) -> ClassifiedError:
    """Classify the inner ``error`` object of a Graph API error body.

    Accepts either the inner object or the full ``{"error": {...}}`` body.
    """

    if is_vendor_error(payload):
        payload = payload["error"]

    code = _as_int(payload.get("code"))
    subcode = _as_int(payload.get("error_subcode"))
    vendor_message = str(payload.get("message") or "Unknown error")
    kind = _kind_for(code, subcode)

    details: dict[str, Any] = {}
    if payload.get("type"):
        details["type"] = payload["type"]
    if payload.get("error_user_title"):
        details["user_title"] = payload["error_user_title"]
    if payload.get("error_user_msg"):
        details["user_message"] = payload["error_user_msg"]

    logger.debug("meta_error_classified", kind=kind.value, code=code, subcode=subcode)
    return ClassifiedError(
        kind=kind,
        message=_message_for(kind, vendor_message, code, subcode),
        code=code,
        subcode=subcode,
        status=status,
        fbtrace_id=payload.get("fbtrace_id"),
        details=details or None,
    )


def classify_http(status: int, body: Any = None) -> ClassifiedError:
    """Classify a non-2xx response that is not a structured Graph error."""

    if isinstance(body, (bytes, str)):
        snippet = body.decode(errors="ignore") if isinstance(body, bytes) else body
    else:
        snippet = json.dumps(body) if body is not None else ""
    snippet = snippet[:500]
    kind = ErrorKind.TRANSIENT_SERVER_ERROR if status >= 500 else ErrorKind.HTTP_ERROR
    return ClassifiedError(
        kind=kind,
        message=f"HTTP {status}: {snippet}" if snippet else f"HTTP {status}",
        status=status,
    )


def is_retryable(error: ClassifiedError) -> bool:
    return error.kind in RETRYABLE_KINDS


__all__ = ["classify", "classify_http", "is_retryable", "is_vendor_error"]
