"""Campaign management tools."""

from __future__ import annotations

import json
from typing import Any, Mapping

from mcp.server.fastmcp import Context, FastMCP

from ..errors import MetaApiException
from ..meta_client.models import (
    CampaignCreateRequest,
    CampaignDeleteRequest,
    CampaignGetRequest,
    CampaignsListRequest,
    CampaignUpdateRequest,
)
from .common import (
    ToolEnvironment,
    as_mapping,
    build_fields_param,
    bullet_list,
    data_rows,
    failure,
    normalize_account_id,
    success,
    usage_meta,
)

CAMPAIGN_DEFAULT_FIELDS = (
    "id",
    "name",
    "objective",
    "status",
    "effective_status",
    "buying_type",
    "daily_budget",
    "lifetime_budget",
    "budget_remaining",
    "bid_strategy",
    "special_ad_categories",
    "created_time",
    "updated_time",
    "start_time",
    "stop_time",
)


def _budget_label(campaign: Mapping[str, Any]) -> str:
    if campaign.get("daily_budget"):
        return f"{campaign['daily_budget']}/day"
    if campaign.get("lifetime_budget"):
        return f"{campaign['lifetime_budget']} lifetime"
    return "N/A"


def register(server: FastMCP, env: ToolEnvironment) -> None:
    client = env.client

    @server.tool(
        name="campaigns.list",
        structured_output=True,
        description="List campaigns for an ad account, optionally filtered by effective status.",
    )
    async def campaigns_list(args: CampaignsListRequest, ctx: Context) -> Mapping[str, object]:
        del ctx
        account_id = normalize_account_id(args.account_id)
        params: dict[str, Any] = {
            "fields": build_fields_param(args.fields, CAMPAIGN_DEFAULT_FIELDS),
            "limit": args.limit,
        }
        if args.status_filter:
            params["filtering"] = [
                {"field": "effective_status", "operator": "IN", "value": list(args.status_filter)}
            ]
        try:
            if args.max_items:
                campaigns = await client.get_paginated(f"/{account_id}/campaigns", params, max_items=args.max_items)
            else:
                campaigns = data_rows(await client.get(f"/{account_id}/campaigns", params))
        except MetaApiException as exc:
            return failure(exc.error)

        lines = [
            f"{c.get('name')} ({c.get('id')}) | {c.get('status')} | "
            f"Objective: {c.get('objective')} | Budget: {_budget_label(c)}"
            for c in campaigns
        ]
        summary = f"Found {len(campaigns)} campaign(s):\n\n{bullet_list(lines, empty='No campaigns found.')}"
        return success(campaigns, summary=summary, meta=usage_meta(env))

    @server.tool(name="campaigns.get", structured_output=True, description="Get details for one campaign.")
    async def campaigns_get(args: CampaignGetRequest, ctx: Context) -> Mapping[str, object]:
        del ctx
        try:
            result = await client.get(
                f"/{args.campaign_id}",
                {"fields": build_fields_param(args.fields, CAMPAIGN_DEFAULT_FIELDS)},
            )
        except MetaApiException as exc:
            return failure(exc.error)

        campaign = as_mapping(result)
        summary = "\n".join(
            [
                f"Campaign: {campaign.get('name')}",
                f"ID: {campaign.get('id')}",
                f"Status: {campaign.get('status')} (effective: {campaign.get('effective_status')})",
                f"Objective: {campaign.get('objective')}",
                f"Bid Strategy: {campaign.get('bid_strategy', 'N/A')}",
                f"Daily Budget: {campaign.get('daily_budget', 'N/A')}",
                f"Lifetime Budget: {campaign.get('lifetime_budget', 'N/A')}",
            ]
        )
        return success(result, summary=summary, meta=usage_meta(env))

    @server.tool(
        name="campaigns.create",
        structured_output=True,
        description="Create a campaign with an outcome-based objective. Created PAUSED unless stated otherwise.",
    )
    async def campaigns_create(args: CampaignCreateRequest, ctx: Context) -> Mapping[str, object]:
        del ctx
        account_id = normalize_account_id(args.account_id)
        form = {
            "name": args.name,
            "objective": args.objective,
            "status": args.status,
            "special_ad_categories": json.dumps(args.special_ad_categories),
            "buying_type": args.buying_type,
            "daily_budget": args.daily_budget,
            "lifetime_budget": args.lifetime_budget,
            "bid_strategy": args.bid_strategy,
        }
        try:
            result = await client.post_form(f"/{account_id}/campaigns", form)
        except MetaApiException as exc:
            return failure(exc.error)

        summary = (
            f"Campaign created successfully!\nID: {as_mapping(result).get('id')}\nName: {args.name}\n"
            f"Objective: {args.objective}\nStatus: {args.status}"
        )
        return success(result, summary=summary, meta=usage_meta(env))

    @server.tool(
        name="campaigns.update",
        structured_output=True,
        description="Update a campaign's name, status, budget, or bid strategy.",
    )
    async def campaigns_update(args: CampaignUpdateRequest, ctx: Context) -> Mapping[str, object]:
        del ctx
        changes = args.model_dump(exclude={"campaign_id"}, exclude_none=True)
        if not changes:
            return success({"success": True, "changes": {}}, summary="Nothing to update.")
        try:
            result = await client.post_form(f"/{args.campaign_id}", changes)
        except MetaApiException as exc:
            return failure(exc.error)
        return success(
            {**as_mapping(result), "changes": changes},
            summary=f"Campaign {args.campaign_id} updated successfully.\nChanges: {json.dumps(changes)}",
            meta=usage_meta(env),
        )

    @server.tool(
        name="campaigns.delete",
        structured_output=True,
        description="Soft-delete a campaign by setting its status to DELETED.",
    )
    async def campaigns_delete(args: CampaignDeleteRequest, ctx: Context) -> Mapping[str, object]:
        del ctx
        try:
            result = await client.post_form(f"/{args.campaign_id}", {"status": "DELETED"})
        except MetaApiException as exc:
            return failure(exc.error)
        return success(
            result,
            summary=f"Campaign {args.campaign_id} has been deleted (status set to DELETED).",
            meta=usage_meta(env),
        )


__all__ = ["register"]
