from __future__ import annotations

import os
from collections.abc import Iterator
from typing import Any, Callable
from unittest.mock import MagicMock

import pytest

from meta_ads_mcp.config import MetaAdsSettings, get_settings
from meta_ads_mcp.mcp_tools.common import ToolEnvironment
from meta_ads_mcp.meta_client import CredentialRegistry, CredentialResolver, MetaAdsApiClient, UsageTracker

GRAPH_BASE_URL = "https://graph.example.com"
API_VERSION = "v22.0"
API_ROOT = f"{GRAPH_BASE_URL}/{API_VERSION}"


@pytest.fixture(autouse=True)
def configure_settings(monkeypatch) -> Iterator[None]:
    """Isolate tests from the host environment and reset cached settings."""

    for name in list(os.environ):
        if name.startswith("META_") or name == "MCP_API_KEY":
            monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("META_GRAPH_API_BASE_URL", GRAPH_BASE_URL)
    monkeypatch.setenv("META_API_VERSION", API_VERSION)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def settings() -> MetaAdsSettings:
    return MetaAdsSettings(max_retries=2, retry_base_delay_seconds=0)


@pytest.fixture
def registry() -> CredentialRegistry:
    registry = CredentialRegistry()
    registry.register("primary", "primary-token-value")
    return registry


@pytest.fixture
async def client(settings: MetaAdsSettings, registry: CredentialRegistry):
    api = MetaAdsApiClient(settings, resolver=CredentialResolver(registry), usage=UsageTracker())
    yield api
    await api.aclose()


@pytest.fixture
def env(settings: MetaAdsSettings, client: MetaAdsApiClient, registry: CredentialRegistry) -> ToolEnvironment:
    return ToolEnvironment(settings=settings, client=client, registry=registry)


@pytest.fixture
def register_tools(env: ToolEnvironment) -> Callable[[Any], dict[str, Any]]:
    """Register a tool module on a fake server and return its handlers by name."""

    def _register(module: Any) -> dict[str, Any]:
        server = MagicMock()
        registered: dict[str, Any] = {}

        def tool_decorator(*args: Any, **kwargs: Any):
            def wrapper(fn):
                registered[kwargs["name"]] = fn
                return fn

            return wrapper

        server.tool.side_effect = tool_decorator
        module.register(server, env)
        return registered

    return _register
