"""DealBoard: the list/detail state machine behind the review dashboard.

The board owns the fetched deals and the view state derived from them:
stage groups, the open detail position, a pending removal confirmation and
the last alert. Every mutation goes to the backend first; local state only
changes after the backend confirms.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

import structlog

from src.deal_review.dashboard.client import DashboardClient, DashboardError
from src.deal_review.dashboard.views import (
    StageGroup,
    deal_url,
    flatten_groups,
    group_by_stage,
    payback_multiplier,
    summarize,
)

logger = structlog.get_logger(__name__)


class BoardState(str, Enum):
    LOADING = "loading"
    LOADED = "loaded"
    ERRORED = "errored"


class DealBoard:
    """Review queue view model.

    Args:
        client: API client used for every load and mutation.
    """

    def __init__(self, client: DashboardClient) -> None:
        self._client = client
        self.state = BoardState.LOADING
        self.error: str | None = None
        self.alert: str | None = None
        self.portal_id: int | str | None = None
        self.groups: list[StageGroup] = []
        self.ordered: list[dict[str, Any]] = []
        self.selected_index: int | None = None
        self.pending_removal: str | None = None

    # ── Loading ──────────────────────────────────────────────────────────

    async def load(self) -> BoardState:
        """Fetch the queue. Ends in LOADED or ERRORED."""
        self.state = BoardState.LOADING
        self.error = None
        try:
            listing = await self._client.list_deals()
        except DashboardError as exc:
            self.state = BoardState.ERRORED
            self.error = exc.details
            return self.state

        self.portal_id = listing.get("portalId")
        self._set_deals(listing.get("deals") or [])
        self.selected_index = None
        self.state = BoardState.LOADED
        return self.state

    async def retry(self) -> BoardState:
        return await self.load()

    def _set_deals(self, deals: list[dict[str, Any]]) -> None:
        self.groups = group_by_stage(deals)
        self.ordered = flatten_groups(self.groups)

    @property
    def summary(self) -> dict[str, Any]:
        return summarize(self.ordered)

    # ── Detail Navigation ────────────────────────────────────────────────

    @property
    def selected(self) -> dict[str, Any] | None:
        if self.selected_index is None:
            return None
        return self.ordered[self.selected_index]

    def open_detail(self, index: int) -> dict[str, Any]:
        """Open the detail view at a position in the flattened list."""
        if not 0 <= index < len(self.ordered):
            raise IndexError(f"No deal at position {index}")
        self.selected_index = index
        return self.ordered[index]

    def close_detail(self) -> None:
        self.selected_index = None

    @property
    def has_previous(self) -> bool:
        return self.selected_index is not None and self.selected_index > 0

    @property
    def has_next(self) -> bool:
        return self.selected_index is not None and self.selected_index < len(self.ordered) - 1

    def next(self) -> dict[str, Any] | None:
        if not self.has_next:
            return self.selected
        return self.open_detail(self.selected_index + 1)

    def previous(self) -> dict[str, Any] | None:
        if not self.has_previous:
            return self.selected
        return self.open_detail(self.selected_index - 1)

    def selected_payback(self) -> int | None:
        deal = self.selected
        if deal is None:
            return None
        performance = deal.get("performance") or {}
        return payback_multiplier(deal.get("currentOffer"), performance.get("avgProfit3m"))

    def selected_url(self) -> str | None:
        deal = self.selected
        if deal is None:
            return None
        return deal_url(self.portal_id, deal["id"])

    # ── Tag Removal ──────────────────────────────────────────────────────

    def request_removal(self, deal_id: str) -> None:
        """Ask for confirmation before removing a deal from the queue."""
        self.pending_removal = deal_id

    def cancel_removal(self) -> None:
        self.pending_removal = None

    async def confirm_removal(self) -> bool:
        """Remove the pending deal's tag, then drop it locally.

        Returns False (and sets alert) if nothing is pending or the backend
        refuses; the list is left untouched in that case.
        """
        deal_id = self.pending_removal
        self.pending_removal = None
        if deal_id is None:
            return False

        try:
            await self._client.remove_tag(deal_id)
        except DashboardError as exc:
            self.alert = f"Failed to remove tag: {exc.details}"
            return False

        showing = self.selected
        if showing is not None and showing.get("id") == deal_id:
            self.selected_index = None
        remaining = [deal for deal in self.ordered if deal.get("id") != deal_id]
        self._set_deals(remaining)
        if showing is not None and self.selected_index is not None:
            self.selected_index = self.ordered.index(showing)

        logger.info("dashboard.deal_removed", deal_id=deal_id)
        return True

    # ── Transfer Summary ─────────────────────────────────────────────────

    async def save_transfer_summary(self, text: str) -> bool:
        """Save the open deal's transfer summary.

        The displayed value only changes once the backend confirms.
        """
        deal = self.selected
        if deal is None:
            return False

        try:
            result = await self._client.update_transfer_summary(deal["id"], text)
        except DashboardError as exc:
            self.alert = f"Failed to save transfer summary: {exc.details}"
            return False

        deal["transferSummary"] = result.get("transferSummary")
        return True

    def dismiss_alert(self) -> None:
        self.alert = None
