"""Multi-token registry tools: list, switch, and register Business Manager tokens."""

from __future__ import annotations

from typing import Mapping

from mcp.server.fastmcp import Context, FastMCP

from ..errors import ClassifiedError, ErrorKind, MetaApiException
from ..logging import get_logger
from ..meta_client import credential_override, mask_token
from ..meta_client.models import TokenRegisterRequest, TokenSetActiveRequest, TokensListRequest
from .common import ToolEnvironment, bullet_list, failure, success

logger = get_logger(__name__)


def register(server: FastMCP, env: ToolEnvironment) -> None:
    registry = env.registry

    @server.tool(
        name="tokens.list",
        structured_output=True,
        description="List registered token names and which one is active. Never exposes token values.",
    )
    async def tokens_list(args: TokensListRequest, ctx: Context) -> Mapping[str, object]:
        del args, ctx
        listing = registry.list_tokens()
        if not listing.available:
            summary = (
                "No tokens registered. Set META_TOKENS or META_ACCESS_TOKEN, "
                "or use tokens.register to add one."
            )
        else:
            lines = [f"{name}{' [ACTIVE]' if name == listing.active else ''}" for name in listing.available]
            summary = f"Registered tokens ({len(listing.available)}):\n\n{bullet_list(lines, empty='')}"
        return success(listing.to_dict(), summary=summary)

    @server.tool(
        name="tokens.set_active",
        structured_output=True,
        description="Switch the active token by name. Later calls without a per-request token use it.",
    )
    async def tokens_set_active(args: TokenSetActiveRequest, ctx: Context) -> Mapping[str, object]:
        del ctx
        if not registry.set_active(args.bm_name):
            available = registry.list_tokens().available
            return failure(
                ClassifiedError(
                    kind=ErrorKind.INVALID_PARAMETER,
                    message=f'Token "{args.bm_name}" not found. Available tokens: {", ".join(available) or "none"}',
                    details={"available": available},
                )
            )
        return success(
            registry.list_tokens().to_dict(),
            summary=f'Active token switched to "{args.bm_name}". All subsequent API calls will use this token.',
        )

    @server.tool(
        name="tokens.register",
        structured_output=True,
        description=(
            "Register an access token under a friendly name after validating it with GET /me. "
            "Tokens are kept in memory only."
        ),
    )
    async def tokens_register(args: TokenRegisterRequest, ctx: Context) -> Mapping[str, object]:
        del ctx
        masked = mask_token(args.access_token)
        logger.info("token_validation_started", token_name=args.bm_name, masked_token=masked)
        try:
            with credential_override(args.access_token):
                identity = await env.client.get("/me", {"fields": "id,name"})
        except MetaApiException as exc:
            logger.warning("token_validation_failed", token_name=args.bm_name, kind=exc.kind.value)
            return failure(
                ClassifiedError(
                    kind=exc.error.kind,
                    message=(
                        f"Token validation failed: {exc.error.message}. "
                        "The token was NOT registered."
                    ),
                    code=exc.error.code,
                    subcode=exc.error.subcode,
                )
            )

        registry.register(args.bm_name, args.access_token)
        listing = registry.list_tokens()
        identity_name = identity.get("name", "") if isinstance(identity, Mapping) else ""
        return success(
            {
                "name": args.bm_name,
                "masked_token": masked,
                "meta_user": identity_name,
                "active": listing.active,
                "available": listing.available,
            },
            summary=(
                f'Token "{args.bm_name}" registered ({masked}) for Meta user "{identity_name}". '
                f"Active token: {listing.active}."
            ),
        )


__all__ = ["register"]
