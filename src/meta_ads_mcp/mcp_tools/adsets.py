"""Ad set management tools."""

from __future__ import annotations

import json
from typing import Any, Mapping

from mcp.server.fastmcp import Context, FastMCP

from ..errors import MetaApiException
from ..meta_client.models import AdSetCreateRequest, AdSetGetRequest, AdSetsListRequest, AdSetUpdateRequest
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

ADSET_DEFAULT_FIELDS = (
    "id",
    "name",
    "campaign_id",
    "status",
    "effective_status",
    "daily_budget",
    "lifetime_budget",
    "budget_remaining",
    "optimization_goal",
    "billing_event",
    "bid_amount",
    "bid_strategy",
    "targeting",
    "start_time",
    "end_time",
    "created_time",
    "updated_time",
)

ADSET_DETAIL_FIELDS = ADSET_DEFAULT_FIELDS + ("frequency_control_specs", "promoted_object", "destination_type")


def _budget_label(adset: Mapping[str, Any]) -> str:
    if adset.get("daily_budget"):
        return f"{adset['daily_budget']}/day"
    if adset.get("lifetime_budget"):
        return f"{adset['lifetime_budget']} lifetime"
    return "N/A"


def register(server: FastMCP, env: ToolEnvironment) -> None:
    client = env.client

    @server.tool(
        name="adsets.list",
        structured_output=True,
        description="List ad sets for an ad account or one campaign, optionally filtered by effective status.",
    )
    async def adsets_list(args: AdSetsListRequest, ctx: Context) -> Mapping[str, object]:
        del ctx
        parent = args.campaign_id or normalize_account_id(args.account_id)
        params: dict[str, Any] = {
            "fields": build_fields_param(args.fields, ADSET_DEFAULT_FIELDS),
            "limit": args.limit,
        }
        if args.status_filter:
            params["filtering"] = [
                {"field": "effective_status", "operator": "IN", "value": list(args.status_filter)}
            ]
        try:
            adsets = data_rows(await client.get(f"/{parent}/adsets", params))
        except MetaApiException as exc:
            return failure(exc.error)

        lines = [
            f"{a.get('name')} ({a.get('id')}) | {a.get('status')} | "
            f"Goal: {a.get('optimization_goal')} | Budget: {_budget_label(a)}"
            for a in adsets
        ]
        summary = f"Found {len(adsets)} ad set(s):\n\n{bullet_list(lines, empty='No ad sets found.')}"
        return success(adsets, summary=summary, meta=usage_meta(env))

    @server.tool(
        name="adsets.get",
        structured_output=True,
        description="Get one ad set including targeting, budget and optimization settings.",
    )
    async def adsets_get(args: AdSetGetRequest, ctx: Context) -> Mapping[str, object]:
        del ctx
        try:
            result = await client.get(
                f"/{args.adset_id}",
                {"fields": build_fields_param(args.fields, ADSET_DETAIL_FIELDS)},
            )
        except MetaApiException as exc:
            return failure(exc.error)

        adset = as_mapping(result)
        summary = "\n".join(
            [
                f"Ad Set: {adset.get('name')}",
                f"ID: {adset.get('id')}",
                f"Campaign: {adset.get('campaign_id')}",
                f"Status: {adset.get('status')} (effective: {adset.get('effective_status')})",
                f"Optimization: {adset.get('optimization_goal')}",
                f"Billing: {adset.get('billing_event')}",
                f"Bid: {adset.get('bid_amount') or 'Auto'}",
                f"Budget: {_budget_label(adset)}",
                f"Targeting: {json.dumps(adset.get('targeting'), indent=2)}",
            ]
        )
        return success(result, summary=summary, meta=usage_meta(env))

    @server.tool(
        name="adsets.create",
        structured_output=True,
        description=(
            "Create an ad set inside a campaign with targeting, optimization goal and budget. "
            "Created PAUSED unless stated otherwise."
        ),
    )
    async def adsets_create(args: AdSetCreateRequest, ctx: Context) -> Mapping[str, object]:
        del ctx
        account_id = normalize_account_id(args.account_id)
        form = args.model_dump(exclude={"account_id"}, exclude_none=True)
        try:
            result = await client.post_form(f"/{account_id}/adsets", form)
        except MetaApiException as exc:
            return failure(exc.error)

        summary = (
            f"Ad set created successfully!\nID: {as_mapping(result).get('id')}\nName: {args.name}\n"
            f"Campaign: {args.campaign_id}\nStatus: {args.status}\nOptimization: {args.optimization_goal}"
        )
        return success(result, summary=summary, meta=usage_meta(env))

    @server.tool(
        name="adsets.update",
        structured_output=True,
        description="Update an ad set's name, status, budget, targeting, bid or end time.",
    )
    async def adsets_update(args: AdSetUpdateRequest, ctx: Context) -> Mapping[str, object]:
        del ctx
        changes = args.model_dump(exclude={"adset_id"}, exclude_none=True)
        if not changes:
            return success({"success": True, "changes": {}}, summary="Nothing to update.")
        try:
            result = await client.post_form(f"/{args.adset_id}", changes)
        except MetaApiException as exc:
            return failure(exc.error)
        return success(
            {**as_mapping(result), "changes": changes},
            summary=f"Ad set {args.adset_id} updated successfully.\nChanges: {json.dumps(changes)}",
            meta=usage_meta(env),
        )


__all__ = ["ADSET_DEFAULT_FIELDS", "register"]
