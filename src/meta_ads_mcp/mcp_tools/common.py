"""Shared helpers for MCP tools."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Sequence

from ..config import MetaAdsSettings
from ..errors import ClassifiedError, error_response
from ..meta_client import CredentialRegistry, MetaAdsApiClient

MAX_TEXT_LENGTH = 50_000


@dataclass(slots=True)
class ToolEnvironment:
    settings: MetaAdsSettings
    client: MetaAdsApiClient
    registry: CredentialRegistry


def usage_meta(env: ToolEnvironment) -> dict[str, Any]:
    return {"usage_percent": env.client.usage.current_usage}


def success(
    data: Any,
    *,
    summary: str | None = None,
    meta: Mapping[str, Any] | None = None,
) -> Mapping[str, Any]:
    payload: dict[str, Any] = {
        "ok": True,
        "data": data,
        "meta": dict(meta or {}),
    }
    if summary is not None:
        payload["summary"] = truncate_text(summary)
    return payload


def failure(error: ClassifiedError, *, meta: Mapping[str, Any] | None = None) -> Mapping[str, Any]:
    return error_response(error, meta=meta)


def as_mapping(result: Any) -> Mapping[str, Any]:
    """Return a JSON object result, or an empty mapping for raw text bodies."""

    return result if isinstance(result, Mapping) else {}


def data_rows(response: Any) -> list[Any]:
    """Return the ``data`` array of a list response."""

    return list(as_mapping(response).get("data") or [])


def normalize_account_id(account_id: str) -> str:
    """Ensure an ad account ID carries the ``act_`` prefix."""

    return account_id if account_id.startswith("act_") else f"act_{account_id}"


def build_fields_param(fields: Sequence[str] | None, defaults: Sequence[str]) -> str:
    return ",".join(fields if fields else defaults)


def format_budget(cents: int | str, currency: str = "USD") -> str:
    amount = int(cents) if isinstance(cents, str) else cents
    return f"{amount / 100:.2f} {currency}"


def truncate_text(text: str, max_length: int = MAX_TEXT_LENGTH) -> str:
    if len(text) <= max_length:
        return text
    return (
        text[:max_length]
        + "\n\n... [Response truncated. Use more specific filters or narrower date ranges to reduce data.]"
    )


def bullet_list(lines: Sequence[str], *, empty: str) -> str:
    if not lines:
        return empty
    return "\n".join(f"• {line}" for line in lines)


__all__ = [
    "ToolEnvironment",
    "as_mapping",
    "build_fields_param",
    "bullet_list",
    "data_rows",
    "failure",
    "format_budget",
    "normalize_account_id",
    "success",
    "truncate_text",
    "usage_meta",
]
