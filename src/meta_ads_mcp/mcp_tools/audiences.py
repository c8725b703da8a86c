"""Custom audience tools."""

from __future__ import annotations

from typing import Mapping

from mcp.server.fastmcp import Context, FastMCP

from ..errors import MetaApiException
from ..meta_client.models import AudienceDeleteRequest, AudiencesListRequest
from .common import (
    ToolEnvironment,
    build_fields_param,
    bullet_list,
    data_rows,
    failure,
    normalize_account_id,
    success,
    usage_meta,
)

AUDIENCE_DEFAULT_FIELDS = (
    "id",
    "name",
    "description",
    "subtype",
    "approximate_count_lower_bound",
    "approximate_count_upper_bound",
    "time_created",
    "time_updated",
    "delivery_status",
    "operation_status",
    "retention_days",
)


def register(server: FastMCP, env: ToolEnvironment) -> None:
    client = env.client

    @server.tool(
        name="audiences.list",
        structured_output=True,
        description="List custom and lookalike audiences for an ad account.",
    )
    async def audiences_list(args: AudiencesListRequest, ctx: Context) -> Mapping[str, object]:
        del ctx
        account_id = normalize_account_id(args.account_id)
        try:
            response = await client.get(
                f"/{account_id}/customaudiences",
                {"fields": build_fields_param(args.fields, AUDIENCE_DEFAULT_FIELDS), "limit": args.limit},
            )
        except MetaApiException as exc:
            return failure(exc.error)

        audiences = data_rows(response)
        lines = []
        for audience in audiences:
            size = "N/A"
            if audience.get("approximate_count_lower_bound") is not None:
                size = (
                    f"{audience['approximate_count_lower_bound']}-"
                    f"{audience.get('approximate_count_upper_bound', '?')}"
                )
            lines.append(
                f"{audience.get('name')} ({audience.get('id')}) | Type: {audience.get('subtype', 'N/A')} | Size: {size}"
            )
        summary = f"Found {len(audiences)} audience(s):\n\n{bullet_list(lines, empty='No custom audiences found.')}"
        return success(audiences, summary=summary, meta=usage_meta(env))

    @server.tool(name="audiences.delete", structured_output=True, description="Delete a custom audience.")
    async def audiences_delete(args: AudienceDeleteRequest, ctx: Context) -> Mapping[str, object]:
        del ctx
        try:
            result = await client.delete(f"/{args.audience_id}")
        except MetaApiException as exc:
            return failure(exc.error)
        return success(result, summary=f"Audience {args.audience_id} deleted successfully.", meta=usage_meta(env))


__all__ = ["register"]
