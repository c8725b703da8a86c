"""Insights and analytics tools."""

from __future__ import annotations

from typing import Any, Mapping

from mcp.server.fastmcp import Context, FastMCP

from ..errors import MetaApiException
from ..meta_client.models import InsightsRequest
from .common import ToolEnvironment, build_fields_param, data_rows, failure, success, usage_meta

INSIGHTS_DEFAULT_FIELDS = (
    "impressions",
    "clicks",
    "spend",
    "reach",
    "frequency",
    "ctr",
    "cpc",
    "cpm",
    "actions",
    "cost_per_action_type",
)

MAX_ACTION_LINES = 10


def _number(value: Any) -> float | None:
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def summarize_row(row: Mapping[str, Any]) -> str:
    """Render one insights row as a short human-readable report."""

    lines = [f"Period: {row.get('date_start', '?')} → {row.get('date_stop', '?')}"]
    for key, label in (("impressions", "Impressions"), ("reach", "Reach"), ("clicks", "Clicks")):
        value = _number(row.get(key))
        if value:
            lines.append(f"{label}: {int(value):,}")
    for key, label, prefix, suffix in (
        ("spend", "Spend", "$", ""),
        ("ctr", "CTR", "", "%"),
        ("cpc", "CPC", "$", ""),
        ("cpm", "CPM", "$", ""),
        ("frequency", "Frequency", "", ""),
    ):
        value = _number(row.get(key))
        if value:
            lines.append(f"{label}: {prefix}{value:.2f}{suffix}")

    actions = row.get("actions") or []
    if actions:
        lines.append("\nActions:")
        for action in actions[:MAX_ACTION_LINES]:
            lines.append(f"  • {action.get('action_type')}: {action.get('value')}")
    return "\n".join(lines)


def build_insights_params(args: InsightsRequest) -> dict[str, Any]:
    params: dict[str, Any] = {
        "fields": build_fields_param(args.fields, INSIGHTS_DEFAULT_FIELDS),
        "limit": args.limit,
        "level": args.level,
        "date_preset": args.date_preset,
    }
    if args.time_range:
        params["time_range"] = args.time_range.model_dump()
    if args.breakdowns:
        params["breakdowns"] = ",".join(args.breakdowns)
    if args.action_attribution_windows:
        params["action_attribution_windows"] = list(args.action_attribution_windows)
    if args.time_increment is not None:
        params["time_increment"] = str(args.time_increment)
    return params


def register(server: FastMCP, env: ToolEnvironment) -> None:
    @server.tool(
        name="insights.get",
        structured_output=True,
        description=(
            "Get performance insights for a campaign, ad set, ad, or account. "
            "Supports breakdowns, date ranges, attribution windows, and time series."
        ),
    )
    async def insights_get(args: InsightsRequest, ctx: Context) -> Mapping[str, object]:
        del ctx
        try:
            response = await env.client.get(f"/{args.object_id}/insights", build_insights_params(args))
        except MetaApiException as exc:
            return failure(exc.error)

        rows = data_rows(response)
        if not rows:
            summary = "No insights data available for the specified parameters."
        elif len(rows) == 1 and not args.breakdowns:
            summary = summarize_row(rows[0])
        else:
            summary = f"{len(rows)} row(s) of insights data returned."
        return success(rows, summary=summary, meta=usage_meta(env))


__all__ = ["INSIGHTS_DEFAULT_FIELDS", "build_insights_params", "register", "summarize_row"]
