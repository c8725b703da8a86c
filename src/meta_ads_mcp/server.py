"""MCP server bootstrap for the Meta Marketing API."""

from __future__ import annotations

import argparse

from mcp.server.fastmcp import FastMCP
from starlette.requests import Request
from starlette.responses import JSONResponse

from . import __version__
from .config import MetaAdsSettings, get_settings
from .logging import configure_logging, get_logger
from .mcp_tools import accounts, ads, adsets, audiences, billing, campaigns, core, creatives, insights, tokens
from .mcp_tools.common import ToolEnvironment
from .meta_client import CredentialRegistry, CredentialResolver, MetaAdsApiClient, UsageTracker
from .transport import CredentialMiddleware

DEFAULT_TRANSPORT = "stdio"

TOOL_MODULES = (core, tokens, accounts, campaigns, adsets, ads, audiences, insights, billing, creatives)

logger = get_logger(__name__)


def create_environment(settings: MetaAdsSettings) -> ToolEnvironment:
    registry = CredentialRegistry.from_settings(settings)
    resolver = CredentialResolver.from_settings(settings, registry=registry)
    client = MetaAdsApiClient(settings, resolver=resolver, usage=UsageTracker())
    return ToolEnvironment(settings=settings, client=client, registry=registry)


def create_server(settings: MetaAdsSettings | None = None) -> FastMCP:
    settings = settings or get_settings()
    configure_logging(settings.log_level)

    environment = create_environment(settings)
    # Stateless mode runs each HTTP request in a task spawned from the request,
    # so credential overrides bound by the middleware reach the tool handlers.
    server = FastMCP(name=settings.server_name, stateless_http=True)

    for module in TOOL_MODULES:
        module.register(server, environment)

    @server.custom_route("/health", methods=["GET"], name="health")
    async def health(request: Request) -> JSONResponse:
        del request
        return JSONResponse({"status": "ok", "server": settings.server_name, "version": __version__})

    logger.info(
        "server_created",
        server=settings.server_name,
        api_version=settings.api_version,
        tokens=environment.registry.list_tokens().available,
    )
    return server


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Run the Meta Ads MCP server")
    parser.add_argument(
        "--transport",
        choices=["stdio", "streamable-http"],
        default=DEFAULT_TRANSPORT,
        help="Transport protocol to use",
    )
    parser.add_argument("--host", default="0.0.0.0", help="Host to bind to")
    parser.add_argument("--port", type=int, default=8000, help="Port to bind to")
    args = parser.parse_args(argv)

    settings = get_settings()
    server = create_server(settings)

    if args.transport == "streamable-http":
        import uvicorn

        app = CredentialMiddleware(server.streamable_http_app(), settings)
        uvicorn.run(app, host=args.host, port=args.port)
    else:
        server.run(transport="stdio")


if __name__ == "__main__":
    main()


__all__ = ["create_environment", "create_server", "main"]
