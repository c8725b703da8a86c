"""Billing and spend limit tools."""

from __future__ import annotations

from typing import Any, Mapping

from mcp.server.fastmcp import Context, FastMCP

from ..errors import MetaApiException
from ..meta_client.models import BillingAccountRequest, SpendCapUpdateRequest
from .common import (
    ToolEnvironment,
    as_mapping,
    failure,
    format_budget,
    normalize_account_id,
    success,
    usage_meta,
)

BILLING_FIELDS = (
    "id",
    "name",
    "currency",
    "timezone_name",
    "spend_cap",
    "amount_spent",
    "balance",
    "funding_source_details",
    "owner",
    "business_name",
    "account_status",
    "disable_reason",
)

SPEND_FIELDS = (
    "id",
    "name",
    "currency",
    "spend_cap",
    "amount_spent",
    "balance",
    "daily_spend_limit",
    "min_daily_budget",
)

ACCOUNT_STATUS_MAP = {
    1: "ACTIVE",
    2: "DISABLED",
    3: "UNSETTLED",
    7: "PENDING_RISK_REVIEW",
    8: "PENDING_SETTLEMENT",
    9: "IN_GRACE_PERIOD",
    100: "PENDING_CLOSURE",
    101: "CLOSED",
    201: "ANY_ACTIVE",
    202: "ANY_CLOSED",
}


def account_status_label(status: int | None) -> str:
    if status is None:
        return "N/A"
    return ACCOUNT_STATUS_MAP.get(status, f"UNKNOWN ({status})")


def _money(info: Mapping[str, Any], key: str, currency: str, missing: str) -> str:
    value = info.get(key)
    return format_budget(value, currency) if value else missing


def register(server: FastMCP, env: ToolEnvironment) -> None:
    client = env.client

    @server.tool(
        name="billing.info",
        structured_output=True,
        description="Get billing and payment information for an ad account.",
    )
    async def billing_info(args: BillingAccountRequest, ctx: Context) -> Mapping[str, object]:
        del ctx
        account_id = normalize_account_id(args.account_id)
        try:
            result = await client.get(f"/{account_id}", {"fields": ",".join(BILLING_FIELDS)})
        except MetaApiException as exc:
            return failure(exc.error)

        info = as_mapping(result)
        currency = info.get("currency") or "USD"
        lines = [
            f"Account: {info.get('name') or info.get('id')}",
            f"Business: {info.get('business_name', 'N/A')}",
            f"Status: {account_status_label(info.get('account_status'))}",
            f"Currency: {currency}",
            f"Timezone: {info.get('timezone_name', 'N/A')}",
            "",
            "Spending:",
            f"  Amount Spent: {_money(info, 'amount_spent', currency, 'N/A')}",
            f"  Spend Cap: {_money(info, 'spend_cap', currency, 'No limit')}",
            f"  Balance: {_money(info, 'balance', currency, 'N/A')}",
        ]
        funding = info.get("funding_source_details")
        if funding:
            lines += ["", "Payment Method:", f"  {funding.get('display_string', 'N/A')} (ID: {funding.get('id')})"]
        return success(result, summary="\n".join(lines), meta=usage_meta(env))

    @server.tool(
        name="billing.spend_limit",
        structured_output=True,
        description="Get the spend cap, amount spent, and remaining budget for an ad account.",
    )
    async def billing_spend_limit(args: BillingAccountRequest, ctx: Context) -> Mapping[str, object]:
        del ctx
        account_id = normalize_account_id(args.account_id)
        try:
            result = await client.get(f"/{account_id}", {"fields": ",".join(SPEND_FIELDS)})
        except MetaApiException as exc:
            return failure(exc.error)

        info = as_mapping(result)
        currency = info.get("currency") or "USD"
        spend_cap = int(info["spend_cap"]) if info.get("spend_cap") else None
        amount_spent = int(info["amount_spent"]) if info.get("amount_spent") else None
        lines = [
            f"Account: {info.get('name') or info.get('id')}",
            "",
            f"Spend Cap: {format_budget(spend_cap, currency) if spend_cap is not None else 'No limit set'}",
            f"Amount Spent: {format_budget(amount_spent, currency) if amount_spent is not None else 'N/A'}",
        ]
        remaining = None
        if spend_cap is not None and amount_spent is not None:
            remaining = spend_cap - amount_spent
            lines.append(f"Remaining: {format_budget(remaining, currency)}")
            if spend_cap > 0:
                lines.append(f"Usage: {amount_spent / spend_cap * 100:.1f}% of spend cap used")
        if info.get("balance"):
            lines.append(f"Balance: {format_budget(info['balance'], currency)}")
        if info.get("daily_spend_limit"):
            lines.append(f"Daily Spend Limit: {format_budget(info['daily_spend_limit'], currency)}")
        if info.get("min_daily_budget") is not None:
            lines.append(f"Min Daily Budget: {format_budget(info['min_daily_budget'], currency)}")
        return success(
            {**info, "remaining": remaining},
            summary="\n".join(lines),
            meta=usage_meta(env),
        )

    @server.tool(
        name="billing.update_spend_cap",
        structured_output=True,
        description="Update the spend cap for an ad account, in cents. Use 0 to remove the cap.",
    )
    async def billing_update_spend_cap(args: SpendCapUpdateRequest, ctx: Context) -> Mapping[str, object]:
        del ctx
        account_id = normalize_account_id(args.account_id)
        try:
            result = await client.post_form(f"/{account_id}", {"spend_cap": args.spend_cap})
        except MetaApiException as exc:
            return failure(exc.error)
        display = format_budget(args.spend_cap) if args.spend_cap > 0 else "No limit (removed)"
        return success(
            result,
            summary=f"Spend cap updated for account {args.account_id}.\nNew spend cap: {display}",
            meta=usage_meta(env),
        )


__all__ = ["ACCOUNT_STATUS_MAP", "account_status_label", "register"]
