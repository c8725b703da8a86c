from __future__ import annotations

import json
from unittest.mock import MagicMock

import httpx
import pytest

respx = pytest.importorskip("respx")

from meta_ads_mcp.mcp_tools import accounts, audiences, billing, campaigns, creatives, insights
from meta_ads_mcp.mcp_tools.common import build_fields_param, format_budget, normalize_account_id, truncate_text
from meta_ads_mcp.meta_client.models import (
    AccountGetRequest,
    AccountsListRequest,
    AudienceDeleteRequest,
    AudiencesListRequest,
    BillingAccountRequest,
    CampaignCreateRequest,
    CampaignDeleteRequest,
    CampaignsListRequest,
    CampaignUpdateRequest,
    ImageUploadRequest,
    InsightsRequest,
    PagesListRequest,
    SpendCapUpdateRequest,
    TimeRange,
)

API_ROOT = "https://graph.example.com/v22.0"


def test_common_helpers() -> None:
    assert normalize_account_id("123") == "act_123"
    assert normalize_account_id("act_123") == "act_123"
    assert build_fields_param(None, ("id", "name")) == "id,name"
    assert build_fields_param(["spend"], ("id",)) == "spend"
    assert format_budget("12345") == "123.45 USD"
    assert format_budget(500, "EUR") == "5.00 EUR"
    assert truncate_text("short") == "short"
    assert truncate_text("x" * 20, max_length=10).startswith("x" * 10 + "\n\n... [Response truncated.")


@pytest.mark.asyncio
async def test_accounts_list_paginates(register_tools, respx_mock) -> None:
    route = respx_mock.get(f"{API_ROOT}/me/adaccounts").mock(
        side_effect=[
            httpx.Response(
                200,
                json={
                    "data": [{"id": "act_1", "account_id": "1", "name": "One", "account_status": 1, "currency": "USD"}],
                    "paging": {"cursors": {"after": "A"}},
                },
            ),
            httpx.Response(
                200,
                json={"data": [{"id": "act_2", "account_id": "2", "name": "Two", "account_status": 2, "currency": "EUR"}]},
            ),
        ]
    )
    tools = register_tools(accounts)

    result = await tools["accounts.list"](AccountsListRequest(), MagicMock())

    assert result["ok"] is True
    assert [a["id"] for a in result["data"]] == ["act_1", "act_2"]
    assert route.calls[1].request.url.params["after"] == "A"
    assert "Found 2 ad account(s)" in result["summary"]
    assert "Status: DISABLED" in result["summary"]


@pytest.mark.asyncio
async def test_accounts_get_normalizes_id(register_tools, respx_mock) -> None:
    route = respx_mock.get(f"{API_ROOT}/act_42").mock(
        return_value=httpx.Response(200, json={"id": "act_42", "account_id": "42", "name": "Shop", "account_status": 1})
    )
    tools = register_tools(accounts)

    result = await tools["accounts.get"](AccountGetRequest(account_id="42"), MagicMock())

    assert result["ok"] is True
    assert "funding_source_details" in route.calls.last.request.url.params["fields"]
    assert "Account: Shop (42)" in result["summary"]


@pytest.mark.asyncio
async def test_accounts_pages_falls_back_to_owned_pages(register_tools, respx_mock) -> None:
    respx_mock.get(f"{API_ROOT}/act_1/promote_pages").mock(
        return_value=httpx.Response(400, json={"error": {"message": "Unsupported", "code": 100}})
    )
    respx_mock.get(f"{API_ROOT}/act_1/owned_pages").mock(
        return_value=httpx.Response(200, json={"data": [{"id": "p1", "name": "Brand", "category": "Shop"}]})
    )
    tools = register_tools(accounts)

    result = await tools["accounts.pages"](PagesListRequest(account_id="1"), MagicMock())

    assert result["ok"] is True
    assert result["data"] == [{"id": "p1", "name": "Brand", "category": "Shop"}]


@pytest.mark.asyncio
async def test_campaigns_list_sends_status_filter(register_tools, respx_mock) -> None:
    route = respx_mock.get(f"{API_ROOT}/act_1/campaigns").mock(
        return_value=httpx.Response(
            200,
            json={"data": [{"id": "c1", "name": "Launch", "status": "ACTIVE", "objective": "OUTCOME_SALES", "daily_budget": "5000"}]},
        )
    )
    tools = register_tools(campaigns)

    result = await tools["campaigns.list"](
        CampaignsListRequest(account_id="1", status_filter=["ACTIVE", "PAUSED"]), MagicMock()
    )

    assert result["ok"] is True
    params = route.calls.last.request.url.params
    assert json.loads(params["filtering"]) == [
        {"field": "effective_status", "operator": "IN", "value": ["ACTIVE", "PAUSED"]}
    ]
    assert params["limit"] == "25"
    assert "Budget: 5000/day" in result["summary"]


@pytest.mark.asyncio
async def test_campaigns_create_posts_form(register_tools, respx_mock) -> None:
    route = respx_mock.post(f"{API_ROOT}/act_1/campaigns").mock(return_value=httpx.Response(200, json={"id": "c9"}))
    tools = register_tools(campaigns)

    result = await tools["campaigns.create"](
        CampaignCreateRequest(account_id="act_1", name="Spring", objective="OUTCOME_TRAFFIC", daily_budget=2500),
        MagicMock(),
    )

    assert result["ok"] is True
    assert result["data"] == {"id": "c9"}
    body = route.calls.last.request.content.decode()
    assert "status=PAUSED" in body
    assert "daily_budget=2500" in body
    assert "lifetime_budget" not in body


@pytest.mark.asyncio
async def test_campaigns_create_duplicate_error(register_tools, respx_mock) -> None:
    respx_mock.post(f"{API_ROOT}/act_1/campaigns").mock(
        return_value=httpx.Response(400, json={"error": {"message": "Name already used", "code": 2650}})
    )
    tools = register_tools(campaigns)

    result = await tools["campaigns.create"](
        CampaignCreateRequest(account_id="1", name="Spring", objective="OUTCOME_TRAFFIC"), MagicMock()
    )

    assert result["ok"] is False
    assert result["error"]["kind"] == "DUPLICATE"


@pytest.mark.asyncio
async def test_campaigns_update_and_delete(register_tools, respx_mock) -> None:
    route = respx_mock.post(f"{API_ROOT}/c1").mock(return_value=httpx.Response(200, json={"success": True}))
    tools = register_tools(campaigns)

    updated = await tools["campaigns.update"](CampaignUpdateRequest(campaign_id="c1", status="ACTIVE"), MagicMock())
    deleted = await tools["campaigns.delete"](CampaignDeleteRequest(campaign_id="c1"), MagicMock())

    assert updated["ok"] is True
    assert updated["data"]["changes"] == {"status": "ACTIVE"}
    assert deleted["ok"] is True
    assert "status=DELETED" in route.calls.last.request.content.decode()


@pytest.mark.asyncio
async def test_campaigns_update_without_changes_skips_call(register_tools, respx_mock) -> None:
    tools = register_tools(campaigns)

    result = await tools["campaigns.update"](CampaignUpdateRequest(campaign_id="c1"), MagicMock())

    assert result["ok"] is True
    assert respx_mock.calls.call_count == 0


@pytest.mark.asyncio
async def test_audiences_list_and_delete(register_tools, respx_mock) -> None:
    respx_mock.get(f"{API_ROOT}/act_1/customaudiences").mock(
        return_value=httpx.Response(
            200,
            json={"data": [{"id": "a1", "name": "Buyers", "subtype": "CUSTOM", "approximate_count_lower_bound": 1000, "approximate_count_upper_bound": 1200}]},
        )
    )
    delete_route = respx_mock.delete(f"{API_ROOT}/a1").mock(return_value=httpx.Response(200, json={"success": True}))
    tools = register_tools(audiences)

    listed = await tools["audiences.list"](AudiencesListRequest(account_id="1"), MagicMock())
    deleted = await tools["audiences.delete"](AudienceDeleteRequest(audience_id="a1"), MagicMock())

    assert listed["ok"] is True
    assert "Size: 1000-1200" in listed["summary"]
    assert deleted["ok"] is True
    assert delete_route.called


@pytest.mark.asyncio
async def test_insights_single_row_summary(register_tools, respx_mock) -> None:
    route = respx_mock.get(f"{API_ROOT}/c1/insights").mock(
        return_value=httpx.Response(
            200,
            json={
                "data": [
                    {
                        "date_start": "2024-01-01",
                        "date_stop": "2024-01-31",
                        "impressions": "12345",
                        "clicks": "321",
                        "spend": "99.5",
                        "ctr": "2.6",
                        "actions": [{"action_type": "purchase", "value": "7"}],
                    }
                ]
            },
        )
    )
    tools = register_tools(insights)

    result = await tools["insights.get"](
        InsightsRequest(
            object_id="c1",
            time_range=TimeRange(since="2024-01-01", until="2024-01-31"),
            action_attribution_windows=["7d_click"],
            time_increment="monthly",
        ),
        MagicMock(),
    )

    assert result["ok"] is True
    params = route.calls.last.request.url.params
    assert json.loads(params["time_range"]) == {"since": "2024-01-01", "until": "2024-01-31"}
    assert json.loads(params["action_attribution_windows"]) == ["7d_click"]
    assert params["time_increment"] == "monthly"
    assert "date_preset" not in params
    assert "Impressions: 12,345" in result["summary"]
    assert "Spend: $99.50" in result["summary"]
    assert "purchase: 7" in result["summary"]


@pytest.mark.asyncio
async def test_insights_empty(register_tools, respx_mock) -> None:
    respx_mock.get(f"{API_ROOT}/act_1/insights").mock(return_value=httpx.Response(200, json={"data": []}))
    tools = register_tools(insights)

    result = await tools["insights.get"](InsightsRequest(object_id="act_1", date_preset="last_7d"), MagicMock())

    assert result["ok"] is True
    assert result["data"] == []
    assert result["summary"] == "No insights data available for the specified parameters."


@pytest.mark.asyncio
async def test_billing_info_and_spend_limit(register_tools, respx_mock) -> None:
    respx_mock.get(f"{API_ROOT}/act_1").mock(
        return_value=httpx.Response(
            200,
            json={
                "id": "act_1",
                "name": "Shop",
                "currency": "USD",
                "account_status": 9,
                "spend_cap": "100000",
                "amount_spent": "25000",
                "funding_source_details": {"id": "fs1", "display_string": "Visa *1234"},
            },
        )
    )
    tools = register_tools(billing)

    info = await tools["billing.info"](BillingAccountRequest(account_id="1"), MagicMock())
    limit = await tools["billing.spend_limit"](BillingAccountRequest(account_id="1"), MagicMock())

    assert "Status: IN_GRACE_PERIOD" in info["summary"]
    assert "Visa *1234 (ID: fs1)" in info["summary"]
    assert limit["data"]["remaining"] == 75000
    assert "Remaining: 750.00 USD" in limit["summary"]
    assert "Usage: 25.0% of spend cap used" in limit["summary"]


@pytest.mark.asyncio
async def test_billing_update_spend_cap(register_tools, respx_mock) -> None:
    route = respx_mock.post(f"{API_ROOT}/act_1").mock(return_value=httpx.Response(200, json={"success": True}))
    tools = register_tools(billing)

    result = await tools["billing.update_spend_cap"](SpendCapUpdateRequest(account_id="1", spend_cap=0), MagicMock())

    assert result["ok"] is True
    assert "spend_cap=0" in route.calls.last.request.content.decode()
    assert "No limit (removed)" in result["summary"]


@pytest.mark.asyncio
async def test_creatives_upload_image(register_tools, respx_mock) -> None:
    respx_mock.get("https://cdn.example.com/hero.png").mock(
        return_value=httpx.Response(200, content=b"\x89PNG\r\n", headers={"content-type": "image/png"})
    )
    upload = respx_mock.post(f"{API_ROOT}/act_1/adimages").mock(
        return_value=httpx.Response(
            200,
            json={"images": {"image.png": {"hash": "abc123", "url": "https://scontent.example.com/abc.png"}}},
        )
    )
    tools = register_tools(creatives)

    result = await tools["creatives.upload_image"](
        ImageUploadRequest(account_id="1", image_url="https://cdn.example.com/hero.png", name="hero"),
        MagicMock(),
    )

    assert result["ok"] is True
    assert result["data"] == {"hash": "abc123", "url": "https://scontent.example.com/abc.png", "name": "hero"}
    body = upload.calls.last.request.content
    assert b'filename="image.png"' in body
    assert b"\x89PNG" in body


@pytest.mark.asyncio
async def test_creatives_upload_image_download_failure(register_tools, respx_mock) -> None:
    respx_mock.get("https://cdn.example.com/missing.png").mock(return_value=httpx.Response(404))
    tools = register_tools(creatives)

    result = await tools["creatives.upload_image"](
        ImageUploadRequest(account_id="1", image_url="https://cdn.example.com/missing.png"), MagicMock()
    )

    assert result["ok"] is False
    assert result["error"]["message"] == "Failed to download image: HTTP 404"


@pytest.mark.asyncio
async def test_handlers_accept_text_bodies(register_tools, respx_mock) -> None:
    respx_mock.post(f"{API_ROOT}/act_1/campaigns").mock(return_value=httpx.Response(200, text="true"))
    respx_mock.post(f"{API_ROOT}/c1").mock(return_value=httpx.Response(200, text="true"))
    respx_mock.get(f"{API_ROOT}/act_1").mock(return_value=httpx.Response(200, text="ok"))
    respx_mock.get(f"{API_ROOT}/me/accounts").mock(return_value=httpx.Response(200, text="ok"))
    campaign_tools = register_tools(campaigns)
    billing_tools = register_tools(billing)
    account_tools = register_tools(accounts)

    created = await campaign_tools["campaigns.create"](
        CampaignCreateRequest(account_id="1", name="Spring", objective="OUTCOME_TRAFFIC"), MagicMock()
    )
    updated = await campaign_tools["campaigns.update"](CampaignUpdateRequest(campaign_id="c1", name="Renamed"), MagicMock())
    info = await billing_tools["billing.info"](BillingAccountRequest(account_id="1"), MagicMock())
    limit = await billing_tools["billing.spend_limit"](BillingAccountRequest(account_id="1"), MagicMock())
    pages = await account_tools["accounts.pages"](PagesListRequest(), MagicMock())

    assert created["ok"] is True
    assert created["data"] is True
    assert "ID: None" in created["summary"]
    assert updated["data"] == {"changes": {"name": "Renamed"}}
    assert info["ok"] is True
    assert info["data"] == "ok"
    assert limit["data"] == {"remaining": None}
    assert pages["data"] == []
    assert "No pages found." in pages["summary"]
