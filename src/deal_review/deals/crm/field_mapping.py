"""HubSpot property mappings and the deal normalizer.

Defines:
- DEAL_SEARCH_PROPERTIES: the explicit property list requested from the search API.
- PERFORMANCE_PROPERTY_MAP: PerformanceSnapshot field -> (HubSpot property, value kind).
- parse_number / round2 / to_display_percent / round_count: numeric rules.
- normalize_deal(): raw HubSpot deal -> Deal.
- remove_tag_token(): tag-string rewrite used by the tag mutation service.

Rounding goes through the shortest decimal representation of each value and
rounds half-up, so binary float artifacts never leak extra digits
(12.345 -> 12.35, 1.005 -> 1.01, 0.585 * 100 -> 58.5).
"""

from __future__ import annotations

import math
from collections.abc import Mapping
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation, localcontext
from enum import Enum
from typing import Any

import structlog

from src.deal_review.deals.crm.lookups import DEFAULT_STAGE_ORDER, StageInfo, owner_placeholder
from src.deal_review.deals.schemas import Deal, PerformanceSnapshot, RawDeal

logger = structlog.get_logger(__name__)

_TWO_PLACES = Decimal("0.01")
_WHOLE = Decimal("1")
_HUNDRED = Decimal(100)

MISSING_DATE = "--"


class ValueKind(str, Enum):
    MONEY = "money"  # round to 2 decimals (also plain ratios like ROI, rating)
    PERCENT = "percent"  # stored as a 0-1 fraction, shown x100 with 2 decimals
    COUNT = "count"  # nearest whole number
    TEXT = "text"


# ── Property Mappings ──────────────────────────────────────────────────────

PERFORMANCE_PROPERTY_MAP: dict[str, tuple[str, ValueKind]] = {
    # 3-month averages
    "avg_rev_ads_3m": ("avg_rev_last_3_months", ValueKind.MONEY),
    "avg_rev_iap_3m": ("avg_rev__iap__sub__last_3_months", ValueKind.MONEY),
    "avg_expenses_3m": ("avg_expenses_last_3_months", ValueKind.MONEY),
    "avg_other_expenses_3m": ("avg_other_expenses_last_3_months", ValueKind.MONEY),
    "avg_profit_3m": ("avg_profit_last_3_months", ValueKind.MONEY),
    "avg_ua_profit": ("avg_ua_profit", ValueKind.MONEY),
    "avg_ua_rev_3m": ("avg_ua_rev_last_3_months", ValueKind.MONEY),
    "pct_ua_profit": ("ua_profit", ValueKind.PERCENT),
    "ua_roi": ("ua_roi", ValueKind.MONEY),
    "avg_installs_3m": ("avg_installs_last_3_month", ValueKind.COUNT),
    "avg_org_installs_3m": ("avg_organic_installs_last_3_months", ValueKind.COUNT),
    "pct_org_installs": ("organic_installs", ValueKind.PERCENT),
    # App metrics
    "top_countries": ("top_countries", ValueKind.TEXT),
    "app_rating": ("app_rating", ValueKind.MONEY),
    "retention_d1": ("retention_day_1", ValueKind.PERCENT),
    "retention_d7": ("retention_day_7", ValueKind.PERCENT),
    "avg_engagement_time": ("average_engagement_time_per_active_user", ValueKind.MONEY),
    # Last month
    "rev_ads_last_month": ("app_revenue__from_ads_last_30_days", ValueKind.MONEY),
    "rev_iap_last_month": ("app_revenue__from_from_inapp_last_30_days", ValueKind.MONEY),
    "expenses_last_month": ("expenses_last_month", ValueKind.MONEY),
    "other_expenses_last_month": ("other_expenses_last_month", ValueKind.MONEY),
    "profit_last_month": ("profit_last_month", ValueKind.MONEY),
    "installs_last_month": ("installs_last_month", ValueKind.COUNT),
    "org_installs_last_month": ("organic_installs_last_month", ValueKind.COUNT),
}

DEAL_SEARCH_PROPERTIES: list[str] = [
    # Basic deal info
    "dealname",
    "dealstage",
    "amount",
    "closedate",
    "hubspot_owner_id",
    "hubspot_owner_assigneddate",
    "hs_object_source_label",
    "hs_lastmodifieddate",
    "current_offer",
    "tags",
    "google_play_page",
    "transfer_summary",
    # Performance metrics
    *(prop for prop, _ in PERFORMANCE_PROPERTY_MAP.values()),
]


# ── Numeric Rules ──────────────────────────────────────────────────────────


def parse_number(value: Any) -> Decimal | None:
    """Parse a HubSpot property value into a finite Decimal.

    Returns None for missing, blank, non-numeric or non-finite values.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, float) and not math.isfinite(value):
        return None
    text = str(value).strip()
    if not text:
        return None
    try:
        number = Decimal(text)
    except InvalidOperation:
        return None
    # Values beyond float range cannot be serialized to JSON.
    if not number.is_finite() or not math.isfinite(float(number)):
        return None
    return number


def _as_decimal(value: Decimal | float | int) -> Decimal:
    return value if isinstance(value, Decimal) else Decimal(str(value))


def _quantize(value: Decimal, exp: Decimal) -> Decimal:
    # Precision must cover every integer digit plus the kept decimals.
    with localcontext() as ctx:
        ctx.prec = max(ctx.prec, value.adjusted() + 4)
        return value.quantize(exp, rounding=ROUND_HALF_UP)


def round2(value: Decimal | float | int) -> float:
    """Round to exactly 2 decimals, half-up."""
    return float(_quantize(_as_decimal(value), _TWO_PLACES))


def to_display_percent(value: Decimal | float | int) -> float:
    """Scale a 0-1 fraction to a percentage rounded to 2 decimals."""
    return round2(_as_decimal(value) * _HUNDRED)


def round_count(value: Decimal | float | int) -> int:
    """Round to the nearest whole number, half-up."""
    return int(_quantize(_as_decimal(value), _WHOLE))


def _text(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value)
    return text if text.strip() else None


def _convert(deal_id: str, prop: str, raw: Any, kind: ValueKind) -> float | int | str | None:
    if kind is ValueKind.TEXT:
        return _text(raw)

    number = parse_number(raw)
    if number is None:
        if _text(raw) is not None:
            logger.debug("deal.unparseable_value", deal_id=deal_id, property=prop, value=raw)
        return None

    if kind is ValueKind.PERCENT:
        return to_display_percent(number)
    if kind is ValueKind.COUNT:
        return round_count(number)
    return round2(number)


def last_data_update(modified: Any) -> str:
    text = _text(modified)
    if text is None:
        return MISSING_DATE
    return text.split("T", 1)[0]


def _current_offer(raw: Any) -> float | None:
    # Zero offers are treated as "no offer".
    number = parse_number(raw)
    if number is None or number == 0:
        return None
    return float(number)


# ── Normalizer ─────────────────────────────────────────────────────────────


def normalize_performance(deal_id: str, props: Mapping[str, Any]) -> PerformanceSnapshot:
    values: dict[str, Any] = {
        field_name: _convert(deal_id, prop, props.get(prop), kind)
        for field_name, (prop, kind) in PERFORMANCE_PROPERTY_MAP.items()
    }
    values["last_data_update"] = last_data_update(props.get("hs_lastmodifieddate"))
    # No HubSpot property backs the expense breakdown yet.
    values["other_expenses_details"] = None
    return PerformanceSnapshot(**values)


def normalize_deal(
    raw: RawDeal | Mapping[str, Any],
    stages: Mapping[str, StageInfo],
    owners: Mapping[str, str],
) -> Deal:
    """Reshape one HubSpot deal into the display schema.

    Pure: the result depends only on the raw record and the two lookup
    snapshots. Unknown stages fall back to the raw stage ID, unknown owners
    to the "Owner #<id>" placeholder; a deal with no owner gets owner=None.
    """
    if not isinstance(raw, RawDeal):
        raw = RawDeal.model_validate(raw)
    props = raw.properties

    stage = _text(props.get("dealstage"))
    stage_info = stages.get(stage) if stage else None

    owner_id = _text(props.get("hubspot_owner_id"))
    owner = (owners.get(owner_id) or owner_placeholder(owner_id)) if owner_id else None

    return Deal(
        id=raw.id,
        name=props.get("dealname"),
        stage=stage,
        stage_name=stage_info.label if stage_info else stage,
        stage_order=stage_info.display_order if stage_info else DEFAULT_STAGE_ORDER,
        amount=props.get("amount"),
        close_date=props.get("closedate"),
        owner_id=owner_id,
        owner=owner,
        last_modified=props.get("hs_lastmodifieddate"),
        current_offer=_current_offer(props.get("current_offer")),
        google_play_page=_text(props.get("google_play_page")),
        transfer_summary=_text(props.get("transfer_summary")),
        performance=normalize_performance(raw.id, props),
    )


# ── Tags ───────────────────────────────────────────────────────────────────


def detect_tag_delimiter(tags: str) -> str:
    """HubSpot tag strings use ';' when present, ',' otherwise."""
    return ";" if ";" in tags else ","


def split_tags(tags: str | None) -> tuple[list[str], str]:
    tags = tags or ""
    delimiter = detect_tag_delimiter(tags)
    tokens = [token.strip() for token in tags.split(delimiter)]
    return [token for token in tokens if token], delimiter


def remove_tag_token(tags: str | None, marker: str) -> str:
    """Drop every token equal to marker, keeping the original delimiter."""
    tokens, delimiter = split_tags(tags)
    return delimiter.join(token for token in tokens if token != marker)
