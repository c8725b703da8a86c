"""Ad account and Page lookup tools."""

from __future__ import annotations

from typing import Any, Mapping

from mcp.server.fastmcp import Context, FastMCP

from ..errors import MetaApiException
from ..logging import get_logger
from ..meta_client.models import AccountGetRequest, AccountsListRequest, PagesListRequest
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

logger = get_logger(__name__)

AD_ACCOUNT_DEFAULT_FIELDS = (
    "id",
    "account_id",
    "name",
    "account_status",
    "currency",
    "timezone_name",
    "business_name",
    "amount_spent",
    "balance",
    "spend_cap",
    "age",
    "created_time",
    "disable_reason",
)

AD_ACCOUNT_DETAIL_FIELDS = AD_ACCOUNT_DEFAULT_FIELDS + (
    "owner",
    "business",
    "funding_source_details",
    "capabilities",
    "timezone_offset_hours_utc",
)

PAGE_DEFAULT_FIELDS = ("id", "name", "category", "category_list")


def _status_label(account: Mapping[str, Any]) -> str:
    return "ACTIVE" if account.get("account_status") == 1 else "DISABLED"


def register(server: FastMCP, env: ToolEnvironment) -> None:
    client = env.client

    @server.tool(
        name="accounts.list",
        structured_output=True,
        description="List ad accounts accessible by the authenticated user.",
    )
    async def accounts_list(args: AccountsListRequest, ctx: Context) -> Mapping[str, object]:
        del ctx
        try:
            accounts = await client.get_paginated(
                f"/{args.user_id}/adaccounts",
                {"fields": build_fields_param(args.fields, AD_ACCOUNT_DEFAULT_FIELDS), "limit": min(args.limit, 100)},
                max_items=args.limit,
            )
        except MetaApiException as exc:
            return failure(exc.error)

        lines = [
            f"{a.get('name')} ({a.get('account_id')}) | Status: {_status_label(a)} | "
            f"Currency: {a.get('currency')} | Spent: {a.get('amount_spent', 'N/A')}"
            for a in accounts
        ]
        summary = (
            f"Found {len(accounts)} ad account(s):\n\n"
            f"{bullet_list(lines, empty='No ad accounts found for this user.')}"
        )
        return success(accounts, summary=summary, meta=usage_meta(env))

    @server.tool(
        name="accounts.get",
        structured_output=True,
        description="Get details for one ad account: spend, balance, capabilities and business.",
    )
    async def accounts_get(args: AccountGetRequest, ctx: Context) -> Mapping[str, object]:
        del ctx
        account_id = normalize_account_id(args.account_id)
        try:
            result = await client.get(f"/{account_id}", {"fields": ",".join(AD_ACCOUNT_DETAIL_FIELDS)})
        except MetaApiException as exc:
            return failure(exc.error)

        account = as_mapping(result)
        summary = "\n".join(
            [
                f"Account: {account.get('name')} ({account.get('account_id')})",
                f"Status: {_status_label(account)}",
                f"Currency: {account.get('currency')}",
                f"Timezone: {account.get('timezone_name')}",
                f"Spent: {account.get('amount_spent', 'N/A')}",
                f"Balance: {account.get('balance', 'N/A')}",
                f"Spend Cap: {account.get('spend_cap') or 'None'}",
            ]
        )
        return success(result, summary=summary, meta=usage_meta(env))

    @server.tool(
        name="accounts.pages",
        structured_output=True,
        description="List Facebook Pages for an ad account, or the user's own Pages when no account is given.",
    )
    async def accounts_pages(args: PagesListRequest, ctx: Context) -> Mapping[str, object]:
        del ctx
        params = {"fields": ",".join(PAGE_DEFAULT_FIELDS)}
        try:
            if args.account_id:
                account_id = normalize_account_id(args.account_id)
                try:
                    response = await client.get(f"/{account_id}/promote_pages", params)
                except MetaApiException as exc:
                    logger.info("promote_pages_unavailable", account_id=account_id, kind=exc.kind.value)
                    response = await client.get(f"/{account_id}/owned_pages", params)
            else:
                response = await client.get("/me/accounts", params)
        except MetaApiException as exc:
            return failure(exc.error)

        pages = data_rows(response)
        lines = [f"{p.get('name')} (ID: {p.get('id')}) | Category: {p.get('category', 'N/A')}" for p in pages]
        summary = f"Found {len(pages)} page(s):\n\n{bullet_list(lines, empty='No pages found.')}"
        return success(pages, summary=summary, meta=usage_meta(env))


__all__ = ["register"]
