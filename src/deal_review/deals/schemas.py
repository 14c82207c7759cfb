"""Pydantic schemas for the deal review queue.

Defines:
- RawDeal: the loosely-typed HubSpot record at the normalizer boundary
- PerformanceSnapshot, Deal: the strictly-typed display schema (camelCase on the wire)
- DealListing: GET /api/deals payload
- MutationResult, TransferSummaryUpdate, TransferSummaryResult: mutation payloads
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


# ── CRM Boundary ─────────────────────────────────────────────────────────────


class RawDeal(BaseModel):
    """One HubSpot deal object as returned by the search/read endpoints.

    Properties stay an untyped string bag; only the normalizer reads them.
    """

    model_config = ConfigDict(extra="ignore")

    id: str
    properties: dict[str, Any] = Field(default_factory=dict)


# ── Display Schema ───────────────────────────────────────────────────────────


class _CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class PerformanceSnapshot(_CamelModel):
    """App performance metrics shown in the deal detail view.

    Every numeric field is independently nullable: a metric missing in the
    CRM is None, never 0. Money and ratio fields carry at most 2 decimals,
    percentages are already scaled to 0-100, install counts are integers.
    """

    # 3-month averages
    avg_rev_ads_3m: float | None = Field(default=None, alias="avgRevAds3m")
    avg_rev_iap_3m: float | None = Field(default=None, alias="avgRevIAP3m")
    avg_expenses_3m: float | None = Field(default=None, alias="avgExpenses3m")
    avg_other_expenses_3m: float | None = Field(default=None, alias="avgOtherExpenses3m")
    avg_profit_3m: float | None = Field(default=None, alias="avgProfit3m")
    avg_ua_profit: float | None = Field(default=None, alias="avgUAProfit")
    avg_ua_rev_3m: float | None = Field(default=None, alias="avgUARev3m")
    pct_ua_profit: float | None = Field(default=None, alias="pctUAProfit")
    ua_roi: float | None = Field(default=None, alias="uaROI")
    avg_installs_3m: int | None = Field(default=None, alias="avgInstalls3m")
    avg_org_installs_3m: int | None = Field(default=None, alias="avgOrgInstalls3m")
    pct_org_installs: float | None = Field(default=None, alias="pctOrgInstalls")

    # App metrics
    top_countries: str | None = Field(default=None, alias="topCountries")
    app_rating: float | None = Field(default=None, alias="appRating")
    retention_d1: float | None = Field(default=None, alias="retentionD1")
    retention_d7: float | None = Field(default=None, alias="retentionD7")
    avg_engagement_time: float | None = Field(default=None, alias="avgEngagementTime")
    last_data_update: str = Field(default="--", alias="lastDataUpdate")

    # Last month
    rev_ads_last_month: float | None = Field(default=None, alias="revAdsLastMonth")
    rev_iap_last_month: float | None = Field(default=None, alias="revIAPLastMonth")
    expenses_last_month: float | None = Field(default=None, alias="expensesLastMonth")
    other_expenses_last_month: float | None = Field(default=None, alias="otherExpensesLastMonth")
    profit_last_month: float | None = Field(default=None, alias="profitLastMonth")
    installs_last_month: int | None = Field(default=None, alias="installsLastMonth")
    org_installs_last_month: int | None = Field(default=None, alias="orgInstallsLastMonth")
    other_expenses_details: str | None = Field(default=None, alias="otherExpensesDetails")


class Deal(_CamelModel):
    """A tagged HubSpot deal reshaped for display."""

    id: str
    name: str | None = None
    stage: str | None = None
    stage_name: str | None = Field(default=None, alias="stageName")
    stage_order: int = Field(default=999, alias="stageOrder")
    amount: str | None = None
    close_date: str | None = Field(default=None, alias="closeDate")
    owner_id: str | None = Field(default=None, alias="ownerId")
    owner: str | None = None
    last_modified: str | None = Field(default=None, alias="lastModified")
    current_offer: float | None = Field(default=None, alias="currentOffer")
    google_play_page: str | None = Field(default=None, alias="googlePlayPage")
    transfer_summary: str | None = Field(default=None, alias="transferSummary")
    performance: PerformanceSnapshot = Field(default_factory=PerformanceSnapshot)

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True)


class DealListing(BaseModel):
    """GET /api/deals payload.

    Deals are already in wire form: the sample dataset is served verbatim,
    live deals are Deal.to_wire() dicts.
    """

    model_config = ConfigDict(populate_by_name=True)

    deals: list[dict[str, Any]] = Field(default_factory=list)
    portal_id: int | str | None = Field(default=None, alias="portalId")


# ── Mutations ────────────────────────────────────────────────────────────────


class MutationResult(BaseModel):
    success: bool = True
    message: str


class TransferSummaryUpdate(BaseModel):
    """Request body for editing a deal's transfer summary."""

    model_config = ConfigDict(populate_by_name=True)

    transfer_summary: str | None = Field(default=None, alias="transferSummary", max_length=65536)


class TransferSummaryResult(MutationResult):
    model_config = ConfigDict(populate_by_name=True)

    transfer_summary: str | None = Field(default=None, alias="transferSummary")
