"""Async client for the Meta Marketing API with throttling, retry, and pagination."""

from __future__ import annotations

import asyncio
import json
import random
from dataclasses import dataclass
from typing import Any, Mapping

import httpx

from ..config import MetaAdsSettings, get_settings
from ..errors import ClassifiedError, ErrorKind, MetaApiException
from ..logging import get_logger
from .classifier import classify, classify_http, is_retryable, is_vendor_error
from .credentials import CredentialResolver
from .paginator import collect_pages
from .throttle import UsageTracker

logger = get_logger(__name__)


class BackoffStrategy:
    """Exponential backoff with up to 10% additive jitter."""

    def __init__(self, base: float, maximum: float) -> None:
        self.base = base
        self.maximum = maximum

    def delay_for(self, attempt: int) -> float:
        delay = min(self.maximum, (2**attempt) * self.base)
        jitter = random.random() * 0.1 * delay
        return delay + jitter

    async def sleep(self, attempt: int) -> float:
        delay = self.delay_for(attempt)
        await asyncio.sleep(delay)
        return delay


def encode_params(params: Mapping[str, Any] | None) -> dict[str, str] | None:
    """Flatten values for query strings and form bodies.

    ``None`` entries are dropped, booleans become ``true``/``false`` and
    containers are JSON encoded the way the Graph API expects.
    """

    if params is None:
        return None
    encoded: dict[str, str] = {}
    for key, value in params.items():
        if value is None:
            continue
        if isinstance(value, bool):
            encoded[key] = "true" if value else "false"
        elif isinstance(value, (dict, list, tuple)):
            encoded[key] = json.dumps(value)
        else:
            encoded[key] = str(value)
    return encoded


def is_absolute_url(path: str) -> bool:
    """Return True when ``path`` carries its own scheme or host."""

    try:
        url = httpx.URL(path)
    except httpx.InvalidURL:
        return True
    return bool(url.scheme or url.host)


@dataclass(slots=True)
class PendingRequest:
    """One logical outbound call plus its retry bookkeeping."""

    method: str
    url: str
    params: dict[str, str] | None = None
    json_body: Mapping[str, Any] | None = None
    form_body: dict[str, str] | None = None
    files: Mapping[str, Any] | None = None
    multipart: bool = False
    attempt: int = 0
    last_error: ClassifiedError | None = None

    def build(self, access_token: str) -> dict[str, Any]:
        params = dict(self.params or {})
        data = dict(self.form_body) if self.form_body is not None else None
        if self.multipart:
            data = dict(data or {})
            data["access_token"] = access_token
        else:
            params["access_token"] = access_token

        kwargs: dict[str, Any] = {"method": self.method, "url": self.url, "params": params or None}
        if self.json_body is not None:
            kwargs["json"] = self.json_body
        if data is not None:
            kwargs["data"] = data
        if self.files is not None:
            kwargs["files"] = self.files
        return kwargs


class MetaAdsApiClient:
    """HTTP client with resiliency decorators for the Meta Graph API.

    The credential resolver and usage tracker are shared, process-wide
    collaborators; pass them in to share them between clients.
    """

    def __init__(
        self,
        settings: MetaAdsSettings | None = None,
        *,
        resolver: CredentialResolver | None = None,
        usage: UsageTracker | None = None,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self.settings = settings or get_settings()
        self.resolver = resolver or CredentialResolver.from_settings(self.settings)
        self.usage = usage or UsageTracker()
        self._client = http_client or httpx.AsyncClient(
            base_url=self.settings.graph_api_base_url,
            timeout=httpx.Timeout(self.settings.request_timeout_seconds),
            headers={"Accept": "application/json"},
        )
        self._backoff = BackoffStrategy(
            base=self.settings.retry_base_delay_seconds,
            maximum=self.settings.retry_backoff_max,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "MetaAdsApiClient":
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.aclose()

    # Facade

    async def get(self, path: str, params: Mapping[str, Any] | None = None) -> Any:
        return await self.execute("GET", path, params=params)

    async def post(self, path: str, json_body: Mapping[str, Any] | None = None) -> Any:
        return await self.execute("POST", path, json_body=json_body if json_body is not None else {})

    async def post_form(self, path: str, form: Mapping[str, Any]) -> Any:
        return await self.execute("POST", path, form_body=form)

    async def post_multipart(
        self,
        path: str,
        fields: Mapping[str, Any] | None = None,
        files: Mapping[str, Any] | None = None,
    ) -> Any:
        return await self.execute("POST", path, form_body=fields or {}, files=files, multipart=True)

    async def delete(self, path: str, params: Mapping[str, Any] | None = None) -> Any:
        return await self.execute("DELETE", path, params=params)

    async def get_paginated(
        self,
        path: str,
        params: Mapping[str, Any] | None = None,
        max_items: int | None = None,
    ) -> list[Any]:
        limit = max_items if max_items is not None else self.settings.default_max_items
        first_page = await self.get(path, params)
        if not isinstance(first_page, Mapping) or not first_page.get("data"):
            return []

        async def fetch_next(after: str) -> Mapping[str, Any]:
            return await self.get(path, {**(params or {}), "after": after})

        return await collect_pages(first_page, fetch_next, limit)

    # Executor

    async def execute(
        self,
        method: str,
        path: str,
        *,
        params: Mapping[str, Any] | None = None,
        json_body: Mapping[str, Any] | None = None,
        form_body: Mapping[str, Any] | None = None,
        files: Mapping[str, Any] | None = None,
        multipart: bool = False,
    ) -> Any:
        if json_body is not None and form_body is not None:
            raise ValueError("Cannot send both JSON and form data in the same request")

        pending = PendingRequest(
            method=method.upper(),
            url=self.build_url(path),
            params=encode_params(params),
            json_body=json_body,
            form_body=encode_params(form_body),
            files=files,
            multipart=multipart,
        )
        max_retries = self.settings.max_retries

        for attempt in range(max_retries + 1):
            pending.attempt = attempt
            access_token = self.resolver.resolve()
            await self.usage.wait_if_needed()

            try:
                response = await self._client.request(**pending.build(access_token))
            except httpx.TimeoutException as exc:
                pending.last_error = ClassifiedError(
                    kind=ErrorKind.TIMEOUT,
                    message=f"Request timeout after {self.settings.request_timeout_seconds}s",
                    details={"path": path, "error": str(exc)},
                )
            except httpx.TransportError as exc:
                pending.last_error = ClassifiedError(
                    kind=ErrorKind.TRANSIENT_SERVER_ERROR,
                    message="HTTP request failed",
                    details={"path": path, "error": str(exc)},
                )
            else:
                self.usage.update(response.headers)
                body = self._decode(response)

                if is_vendor_error(body):
                    error = classify(body, status=response.status_code)
                elif not response.is_success:
                    error = classify_http(response.status_code, body if body is not None else response.text)
                else:
                    return body if body is not None else response.text

                retry_after = self._retry_after(response)
                if retry_after is not None:
                    error = error.model_copy(update={"retry_after": retry_after})
                if not is_retryable(error):
                    logger.info(
                        "meta_request_failed",
                        method=pending.method,
                        path=path,
                        kind=error.kind.value,
                        code=error.code,
                    )
                    raise MetaApiException(error)
                pending.last_error = error

            if attempt < max_retries:
                logger.info(
                    "request_retry",
                    method=pending.method,
                    path=path,
                    attempt=attempt + 1,
                    kind=pending.last_error.kind.value,
                )
                await self._backoff.sleep(attempt)

        logger.error(
            "retries_exhausted",
            method=pending.method,
            path=path,
            attempts=max_retries + 1,
            kind=pending.last_error.kind.value if pending.last_error else None,
        )
        if pending.last_error is not None:
            raise MetaApiException(pending.last_error)
        raise MetaApiException(
            ClassifiedError(
                kind=ErrorKind.RETRIES_EXHAUSTED,
                message="Request failed after retries",
                details={"path": path},
            )
        )

    def build_url(self, path: str) -> str:
        if is_absolute_url(path):
            raise MetaApiException(
                ClassifiedError(
                    kind=ErrorKind.INVALID_PARAMETER,
                    message="Absolute URLs are not allowed; pass a path relative to the API root",
                    details={"path": path},
                )
            )
        if not path.startswith("/"):
            path = f"/{path}"
        return f"/{self.settings.api_version}{path}"

    def _decode(self, response: httpx.Response) -> Any:
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError:
            return None

    def _retry_after(self, response: httpx.Response) -> float | None:
        value = response.headers.get("Retry-After")
        if value is None:
            return None
        try:
            return float(value)
        except ValueError:
            return None


__all__ = ["BackoffStrategy", "MetaAdsApiClient", "PendingRequest", "encode_params", "is_absolute_url"]
