"""API tests for the deal review endpoints.

Sample mode runs end to end through create_app(). Live-mode behavior swaps
the services on app.state for ones built around a mocked HubSpot client.
"""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import pytest

from src.deal_review.deals.crm.client import UpstreamFailure
from src.deal_review.deals.crm.lookups import LookupCaches
from src.deal_review.deals.crm.sample_data import SAMPLE_DEALS
from src.deal_review.deals.mutations import TagMutationService
from src.deal_review.deals.schemas import RawDeal
from src.deal_review.deals.service import DealQueryService

TAG = "Next-meeting"


@pytest.fixture
def mock_crm() -> MagicMock:
    crm = MagicMock()
    crm.get_deal_pipelines = AsyncMock(
        return_value=[{"id": "default", "stages": [{"id": "contractsent", "label": "Contract Sent", "displayOrder": 4}]}]
    )
    crm.get_account_details = AsyncMock(return_value={"portalId": 4242})
    crm.get_owner = AsyncMock(return_value={"firstName": "Sarah", "lastName": "Chen"})
    crm.search_deals = AsyncMock(
        return_value=[
            RawDeal(
                id="501",
                properties={
                    "dealname": "Puzzle Quest",
                    "dealstage": "contractsent",
                    "hubspot_owner_id": "7",
                    "current_offer": "15000",
                    "ua_profit": "0.585",
                },
            )
        ]
    )
    crm.get_deal = AsyncMock(return_value=RawDeal(id="501", properties={"tags": "Hot;Next-meeting"}))
    crm.update_deal = AsyncMock()
    return crm


@pytest.fixture
def live_app(app, mock_crm):
    app.state.deal_query_service = DealQueryService(crm=mock_crm, caches=LookupCaches(), workflow_tag=TAG)
    app.state.tag_mutation_service = TagMutationService(crm=mock_crm, workflow_tag=TAG)
    return app


# ── Session Gate ──────────────────────────────────────────────────────────────


@pytest.mark.parametrize(
    ("method", "path"),
    [
        ("GET", "/api/deals"),
        ("POST", "/api/deals/1/remove-tag"),
        ("PATCH", "/api/deals/1/transfer-summary"),
    ],
)
async def test_deal_endpoints_require_session(client, method, path):
    response = await client.request(method, path, json={"transferSummary": "x"})

    assert response.status_code == 401
    assert response.json()["error"] == "Authentication required"


# ── Sample Mode ───────────────────────────────────────────────────────────────


async def test_sample_mode_lists_sample_deals(auth_client):
    response = await auth_client.get("/api/deals")

    assert response.status_code == 200
    data = response.json()
    assert data["deals"] == SAMPLE_DEALS
    assert data["portalId"] is None


async def test_sample_mode_remove_tag(auth_client):
    response = await auth_client.post("/api/deals/3/remove-tag")

    assert response.status_code == 200
    assert response.json() == {"success": True, "message": "Tag removed (dummy mode)"}


async def test_sample_mode_transfer_summary(auth_client):
    response = await auth_client.patch(
        "/api/deals/3/transfer-summary",
        json={"transferSummary": "Source code and keystore transferred."},
    )

    assert response.status_code == 200
    assert response.json() == {
        "success": True,
        "message": "Transfer summary updated (dummy mode)",
        "transferSummary": "Source code and keystore transferred.",
    }


async def test_invalid_deal_id_is_rejected(auth_client):
    response = await auth_client.post("/api/deals/bad%20id/remove-tag")
    assert response.status_code == 422


# ── Live Mode ─────────────────────────────────────────────────────────────────


async def test_live_listing(live_app, auth_client, mock_crm):
    response = await auth_client.get("/api/deals")

    assert response.status_code == 200
    data = response.json()
    assert data["portalId"] == 4242
    [deal] = data["deals"]
    assert deal["id"] == "501"
    assert deal["stageName"] == "Contract Sent"
    assert deal["owner"] == "Sarah Chen"
    assert deal["currentOffer"] == 15000.0
    assert deal["performance"]["pctUAProfit"] == 58.5
    assert deal["performance"]["avgProfit3m"] is None


async def test_live_listing_upstream_failure(live_app, auth_client, mock_crm):
    mock_crm.search_deals.side_effect = UpstreamFailure("You have reached your secondly limit.", 429, "search_deals")

    response = await auth_client.get("/api/deals")

    assert response.status_code == 429
    assert response.json() == {
        "error": "Failed to fetch deals from HubSpot",
        "details": "You have reached your secondly limit.",
    }


async def test_transport_failure_maps_to_bad_gateway(live_app, auth_client, mock_crm):
    mock_crm.search_deals.side_effect = UpstreamFailure("timed out", None, "search_deals")

    response = await auth_client.get("/api/deals")

    assert response.status_code == 502
    assert response.json()["details"] == "timed out"


async def test_live_remove_tag(live_app, auth_client, mock_crm):
    response = await auth_client.post("/api/deals/501/remove-tag")

    assert response.status_code == 200
    assert response.json() == {"success": True, "message": "Tag removed successfully"}
    mock_crm.update_deal.assert_awaited_once_with("501", {"tags": "Hot"})


async def test_live_remove_tag_failure(live_app, auth_client, mock_crm):
    mock_crm.get_deal.side_effect = UpstreamFailure("Object not found", 404, "get_deal")

    response = await auth_client.post("/api/deals/501/remove-tag")

    assert response.status_code == 404
    assert response.json() == {"error": "Failed to remove tag", "details": "Object not found"}


async def test_live_transfer_summary_failure(live_app, auth_client, mock_crm):
    mock_crm.update_deal.side_effect = UpstreamFailure("Property values were not valid", 400, "update_deal")

    response = await auth_client.patch("/api/deals/501/transfer-summary", json={"transferSummary": "x"})

    assert response.status_code == 400
    assert response.json()["error"] == "Failed to update transfer summary"


async def test_missing_service_returns_503(app, auth_client):
    app.state.deal_query_service = None

    response = await auth_client.get("/api/deals")

    assert response.status_code == 503
