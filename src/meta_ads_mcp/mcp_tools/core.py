"""Raw Graph API request tool."""

from __future__ import annotations

from typing import Mapping

from mcp.server.fastmcp import Context, FastMCP

from ..errors import MetaApiException
from ..logging import get_logger
from ..meta_client.models import GraphRequestInput
from .common import ToolEnvironment, failure, success, usage_meta

logger = get_logger(__name__)


def register(server: FastMCP, env: ToolEnvironment) -> None:
    """Register core tool handlers."""

    @server.tool(
        name="graph.request",
        structured_output=True,
        description="Call an arbitrary Graph API path with the active credential.",
    )
    async def graph_request(args: GraphRequestInput, ctx: Context) -> Mapping[str, object]:
        del ctx
        try:
            if args.method == "GET":
                data = await env.client.get(args.path, args.query)
            elif args.method == "DELETE":
                data = await env.client.delete(args.path, args.query)
            else:
                data = await env.client.post(args.path, args.body)
            return success(data, meta=usage_meta(env))
        except MetaApiException as exc:
            logger.info("graph_request_failed", path=args.path, kind=exc.kind.value)
            return failure(exc.error)


__all__ = ["register"]
