"""Access token resolution: per-call override, named registry, configured fallback."""

from __future__ import annotations

import json
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass, field

from ..config import MetaAdsSettings
from ..errors import NoCredentialError
from ..logging import get_logger

logger = get_logger(__name__)

DEFAULT_TOKEN_NAME = "default"

# Set by the transport layer for the duration of one inbound call.
_request_token: ContextVar[str | None] = ContextVar("meta_request_token", default=None)


def mask_token(token: str) -> str:
    """Render a token for logs and tool output without exposing it."""

    if len(token) <= 10:
        return f"{token[:3]}***"
    return f"{token[:10]}..."


def current_override() -> str | None:
    return _request_token.get()


@contextmanager
def credential_override(token: str | None) -> Iterator[None]:
    """Use ``token`` for every Graph call made inside this block.

    The value is stored in a context variable, so it follows the current task
    and any task spawned from it, and is invisible to concurrent calls.
    """

    reset = _request_token.set(token or None)
    try:
        yield
    finally:
        _request_token.reset(reset)


@dataclass(slots=True, frozen=True)
class TokenListing:
    active: str | None
    available: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, object]:
        return {"active": self.active, "available": list(self.available)}


class CredentialRegistry:
    """In-memory map of friendly names to access tokens with one active entry."""

    def __init__(self) -> None:
        self._tokens: dict[str, str] = {}
        self._active: str | None = None

    @classmethod
    def from_settings(cls, settings: MetaAdsSettings) -> "CredentialRegistry":
        registry = cls()
        if settings.tokens is not None:
            registry.load_json(settings.tokens.get_secret_value())
        if settings.access_token is not None:
            token = settings.access_token.get_secret_value()
            if token and DEFAULT_TOKEN_NAME not in registry._tokens:
                registry._tokens[DEFAULT_TOKEN_NAME] = token
                if registry._active is None:
                    registry._active = DEFAULT_TOKEN_NAME
        return registry

    def load_json(self, raw: str) -> int:
        """Load a ``{"name": "token"}`` JSON object; returns the number of tokens added.

        The first name in the document becomes active when it holds a usable token.
        """

        try:
            parsed = json.loads(raw)
        except json.JSONDecodeError as exc:
            logger.error("tokens_parse_failed", error=str(exc))
            return 0
        if not isinstance(parsed, dict):
            logger.error("tokens_parse_failed", error="expected a JSON object")
            return 0

        added = 0
        for name, token in parsed.items():
            if isinstance(token, str) and token:
                self._tokens[name] = token
                added += 1
        first = next(iter(parsed), None)
        if first is not None and first in self._tokens:
            self._active = first
        logger.info("tokens_loaded", count=added)
        return added

    @property
    def active_name(self) -> str | None:
        return self._active

    @property
    def active_token(self) -> str | None:
        if self._active is None:
            return None
        return self._tokens.get(self._active)

    def register(self, name: str, token: str) -> None:
        self._tokens[name] = token
        if self._active is None:
            self._active = name
        logger.info("token_registered", token_name=name, masked_token=mask_token(token))

    def set_active(self, name: str) -> bool:
        if name not in self._tokens:
            return False
        self._active = name
        logger.info("active_token_changed", token_name=name)
        return True

    def list_tokens(self) -> TokenListing:
        return TokenListing(active=self._active, available=list(self._tokens))

    def has_tokens(self) -> bool:
        return bool(self._tokens)

    def __contains__(self, name: object) -> bool:
        return name in self._tokens

    def __len__(self) -> int:
        return len(self._tokens)


class CredentialResolver:
    """Pick the access token for the current logical request."""

    def __init__(self, registry: CredentialRegistry, fallback_token: str | None = None) -> None:
        self.registry = registry
        self._fallback = fallback_token or None

    @classmethod
    def from_settings(
        cls,
        settings: MetaAdsSettings,
        registry: CredentialRegistry | None = None,
    ) -> "CredentialResolver":
        fallback = settings.access_token.get_secret_value() if settings.access_token else None
        return cls(registry or CredentialRegistry.from_settings(settings), fallback_token=fallback)

    def resolve(self) -> str:
        override = _request_token.get()
        if override:
            return override

        token = self.registry.active_token
        if token:
            return token

        if self._fallback:
            return self._fallback

        raise NoCredentialError()


__all__ = [
    "CredentialRegistry",
    "CredentialResolver",
    "DEFAULT_TOKEN_NAME",
    "TokenListing",
    "credential_override",
    "current_override",
    "mask_token",
]
