"""Ad management tools."""

from __future__ import annotations

import json
from typing import Any, Mapping

from mcp.server.fastmcp import Context, FastMCP

from ..errors import MetaApiException
from ..meta_client.models import AdCreateRequest, AdGetRequest, AdsListRequest, AdUpdateRequest
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

AD_DEFAULT_FIELDS = (
    "id",
    "name",
    "adset_id",
    "campaign_id",
    "status",
    "effective_status",
    "creative{id}",
    "created_time",
    "updated_time",
)


def _creative_id(ad: Mapping[str, Any]) -> str:
    creative = ad.get("creative")
    if isinstance(creative, Mapping) and creative.get("id"):
        return str(creative["id"])
    return "N/A"


def register(server: FastMCP, env: ToolEnvironment) -> None:
    client = env.client

    @server.tool(
        name="ads.list",
        structured_output=True,
        description="List ads for an ad account, campaign or ad set, optionally filtered by effective status.",
    )
    async def ads_list(args: AdsListRequest, ctx: Context) -> Mapping[str, object]:
        del ctx
        parent = args.adset_id or args.campaign_id or normalize_account_id(args.account_id)
        params: dict[str, Any] = {
            "fields": build_fields_param(args.fields, AD_DEFAULT_FIELDS),
            "limit": args.limit,
        }
        if args.status_filter:
            params["filtering"] = [
                {"field": "effective_status", "operator": "IN", "value": list(args.status_filter)}
            ]
        try:
            ads = data_rows(await client.get(f"/{parent}/ads", params))
        except MetaApiException as exc:
            return failure(exc.error)

        lines = [f"{a.get('name')} ({a.get('id')}) | {a.get('status')} | Creative: {_creative_id(a)}" for a in ads]
        summary = f"Found {len(ads)} ad(s):\n\n{bullet_list(lines, empty='No ads found.')}"
        return success(ads, summary=summary, meta=usage_meta(env))

    @server.tool(name="ads.get", structured_output=True, description="Get details for one ad.")
    async def ads_get(args: AdGetRequest, ctx: Context) -> Mapping[str, object]:
        del ctx
        try:
            result = await client.get(
                f"/{args.ad_id}",
                {"fields": build_fields_param(args.fields, AD_DEFAULT_FIELDS + ("bid_amount", "tracking_specs"))},
            )
        except MetaApiException as exc:
            return failure(exc.error)

        ad = as_mapping(result)
        summary = "\n".join(
            [
                f"Ad: {ad.get('name')}",
                f"ID: {ad.get('id')}",
                f"Ad Set: {ad.get('adset_id')}",
                f"Campaign: {ad.get('campaign_id')}",
                f"Status: {ad.get('status')} (effective: {ad.get('effective_status')})",
                f"Creative ID: {_creative_id(ad)}",
                f"Created: {ad.get('created_time')}",
            ]
        )
        return success(result, summary=summary, meta=usage_meta(env))

    @server.tool(
        name="ads.create",
        structured_output=True,
        description="Create an ad in an ad set from an existing creative. Created PAUSED unless stated otherwise.",
    )
    async def ads_create(args: AdCreateRequest, ctx: Context) -> Mapping[str, object]:
        del ctx
        account_id = normalize_account_id(args.account_id)
        form = {
            "name": args.name,
            "adset_id": args.adset_id,
            "creative": {"creative_id": args.creative_id},
            "status": args.status,
            "tracking_specs": args.tracking_specs,
        }
        try:
            result = await client.post_form(f"/{account_id}/ads", form)
        except MetaApiException as exc:
            return failure(exc.error)

        summary = (
            f"Ad created successfully!\nID: {as_mapping(result).get('id')}\nName: {args.name}\n"
            f"Ad Set: {args.adset_id}\nCreative: {args.creative_id}\nStatus: {args.status}"
        )
        return success(result, summary=summary, meta=usage_meta(env))

    @server.tool(
        name="ads.update",
        structured_output=True,
        description="Update an ad's name, status or creative.",
    )
    async def ads_update(args: AdUpdateRequest, ctx: Context) -> Mapping[str, object]:
        del ctx
        changes: dict[str, Any] = args.model_dump(exclude={"ad_id", "creative_id"}, exclude_none=True)
        if args.creative_id is not None:
            changes["creative"] = {"creative_id": args.creative_id}
        if not changes:
            return success({"success": True, "changes": {}}, summary="Nothing to update.")
        try:
            result = await client.post_form(f"/{args.ad_id}", changes)
        except MetaApiException as exc:
            return failure(exc.error)
        return success(
            {**as_mapping(result), "changes": changes},
            summary=f"Ad {args.ad_id} updated successfully.\nChanges: {json.dumps(changes)}",
            meta=usage_meta(env),
        )


__all__ = ["AD_DEFAULT_FIELDS", "register"]
