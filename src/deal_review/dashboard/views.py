"""Pure view helpers: stage grouping, derived metrics and display formatting.

Everything here works on wire-format deals (camelCase dicts as returned by
GET /api/deals), so it serves both live and sample data unchanged.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any

MISSING_STAGE_ORDER = 999
EMPTY_VALUE = "--"

HUBSPOT_APP_URL = "https://app.hubspot.com"


@dataclass
class StageGroup:
    """Deals sharing one raw stage id, in fetch order."""

    stage: str
    label: str
    order: int
    deals: list[dict[str, Any]] = field(default_factory=list)

    @property
    def count_label(self) -> str:
        n = len(self.deals)
        return f"{n} deal" if n == 1 else f"{n} deals"


# ── Grouping ─────────────────────────────────────────────────────────────────


def group_by_stage(deals: Iterable[Mapping[str, Any]]) -> list[StageGroup]:
    """Group deals by stage, most-advanced stage first.

    Groups are keyed by the raw stage id and sorted by stageOrder descending.
    The sort is stable, so groups with equal order keep first-seen order and
    deals inside a group keep their fetch order.
    """
    groups: dict[str, StageGroup] = {}
    for deal in deals:
        stage = deal.get("stage") or ""
        group = groups.get(stage)
        if group is None:
            order = deal.get("stageOrder")
            group = StageGroup(
                stage=stage,
                label=deal.get("stageName") or stage,
                order=MISSING_STAGE_ORDER if order is None else int(order),
            )
            groups[stage] = group
        group.deals.append(dict(deal))

    return sorted(groups.values(), key=lambda g: g.order, reverse=True)


def flatten_groups(groups: Sequence[StageGroup]) -> list[dict[str, Any]]:
    """Navigation order for the detail view: groups in display order, then fetch order."""
    return [deal for group in groups for deal in group.deals]


# ── Derived Metrics ──────────────────────────────────────────────────────────


def _half_up(value: float) -> int:
    return int(Decimal(repr(value)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def payback_multiplier(current_offer: float | None, avg_profit_3m: float | None) -> int | None:
    """Months of average profit needed to recoup the current offer.

    None unless the 3-month average profit is positive. A missing offer
    counts as 0.
    """
    if avg_profit_3m is None or avg_profit_3m <= 0:
        return None
    return _half_up((current_offer or 0) / avg_profit_3m)


def summarize(deals: Iterable[Mapping[str, Any]]) -> dict[str, Any]:
    """Header totals: number of deals and the sum of their amounts.

    Amounts are strings in HubSpot; unparseable or missing ones count as 0.
    """
    total_deals = 0
    total_value = Decimal("0")
    for deal in deals:
        total_deals += 1
        try:
            total_value += Decimal(str(deal.get("amount") or 0))
        except InvalidOperation:
            continue
    return {"total_deals": total_deals, "total_value": float(total_value)}


def deal_url(portal_id: int | str | None, deal_id: str) -> str | None:
    """Deep link to the deal record in HubSpot, or None without a portal id."""
    if portal_id is None:
        return None
    return f"{HUBSPOT_APP_URL}/contacts/{portal_id}/record/0-3/{deal_id}"


# ── Formatters ───────────────────────────────────────────────────────────────


def _grouped(value: float) -> str:
    # Thousands separators, at most 3 fraction digits, no trailing zeros.
    text = f"{value:,.3f}".rstrip("0").rstrip(".")
    return "0" if text in ("-0", "") else text


def format_number(value: float | None) -> str:
    if value is None:
        return EMPTY_VALUE
    return _grouped(value)


def format_currency(value: float | None) -> str:
    if value is None:
        return EMPTY_VALUE
    if value < 0:
        return f"-${_grouped(-value)}"
    return f"${_grouped(value)}"


def format_percent(value: float | None) -> str:
    if value is None:
        return EMPTY_VALUE
    return f"{_grouped(value)}%"


def format_amount(amount: str | float | None) -> str:
    """Table cell for an offer or amount: USD with cents, '-' when empty or zero."""
    if not amount:
        return "-"
    try:
        value = float(amount)
    except (TypeError, ValueError):
        return "-"
    if value == 0:
        return "-"
    if value < 0:
        return f"-${-value:,.2f}"
    return f"${value:,.2f}"


def stage_class(stage: str | None) -> str:
    """Badge style for a raw stage id."""
    if stage == "closedwon":
        return "won"
    if stage == "closedlost":
        return "lost"
    return "active"


def is_negative(value: float | None) -> bool:
    return value is not None and value < 0
