"""ASGI middleware binding per-request Meta credentials for the HTTP transport."""

from __future__ import annotations

import hmac

from starlette.datastructures import Headers
from starlette.responses import JSONResponse
from starlette.types import ASGIApp, Receive, Scope, Send

from .config import MetaAdsSettings
from .logging import get_logger
from .meta_client import credential_override

logger = get_logger(__name__)

EXEMPT_PATHS = frozenset({"/health"})
UNAUTHORIZED_CODE = -32001


def _bearer(headers: Headers) -> str | None:
    value = headers.get("authorization", "")
    if value[:7].lower() == "bearer ":
        return value[7:].strip() or None
    return None


class CredentialMiddleware:
    """Enforce the optional API key and scope the caller's Meta token to the request.

    The token found in the configured header (``X-Meta-Token`` by default) is bound
    through :func:`credential_override` while the wrapped app handles the request.
    ``Authorization: Bearer`` doubles as the Meta token only when no API key is
    configured, since it otherwise carries the API key.
    """

    def __init__(self, app: ASGIApp, settings: MetaAdsSettings) -> None:
        self.app = app
        self.token_header = settings.token_header.lower()
        self.api_key = settings.mcp_api_key.get_secret_value() if settings.mcp_api_key else None

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http" or scope.get("path") in EXEMPT_PATHS:
            await self.app(scope, receive, send)
            return

        headers = Headers(scope=scope)
        if self.api_key is not None and not self._authorized(headers):
            logger.warning("request_unauthorized", path=scope.get("path"))
            response = JSONResponse(
                {
                    "jsonrpc": "2.0",
                    "id": None,
                    "error": {"code": UNAUTHORIZED_CODE, "message": "Unauthorized: invalid or missing API key."},
                },
                status_code=401,
            )
            await response(scope, receive, send)
            return

        token = headers.get(self.token_header) or None
        if token is None and self.api_key is None:
            token = _bearer(headers)

        with credential_override(token):
            await self.app(scope, receive, send)

    def _authorized(self, headers: Headers) -> bool:
        presented = headers.get("x-api-key") or _bearer(headers)
        if not presented:
            return False
        return hmac.compare_digest(presented.encode(), self.api_key.encode())


__all__ = ["CredentialMiddleware"]
