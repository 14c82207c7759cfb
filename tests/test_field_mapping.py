"""Tests for the HubSpot -> display deal normalizer.

Covers the numeric rules (half-up rounding without float artifacts, percent
scaling, install counts), null handling, stage and owner fallbacks, and the
tag-string rewrite used by tag removal.
"""

from __future__ import annotations

import pytest

from src.deal_review.deals.crm.field_mapping import (
    DEAL_SEARCH_PROPERTIES,
    PERFORMANCE_PROPERTY_MAP,
    detect_tag_delimiter,
    last_data_update,
    normalize_deal,
    parse_number,
    remove_tag_token,
    round2,
    round_count,
    to_display_percent,
)
from src.deal_review.deals.crm.lookups import StageInfo
from src.deal_review.deals.schemas import RawDeal

STAGES = {
    "contractsent": StageInfo(label="Contract Sent", display_order=4),
    "closedwon": StageInfo(label="Closed Won", display_order=6),
}
OWNERS = {"101": "Sarah Chen"}


def _raw(**props) -> RawDeal:
    return RawDeal(id="42", properties=props)


# ── Numeric Rules ─────────────────────────────────────────────────────────────


class TestNumericRules:
    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            ("12.345", 12.35),
            (12.345, 12.35),
            ("1.005", 1.01),
            ("2.675", 2.68),
            ("-12.345", -12.35),
            ("100", 100.0),
            ("0.1", 0.1),
        ],
    )
    def test_round2_is_half_up_on_decimal_text(self, value, expected):
        assert round2(parse_number(value)) == expected

    @pytest.mark.parametrize(
        ("fraction", "expected"),
        [("0.585", 58.5), ("0.71", 71.0), ("0.12345", 12.35), ("1", 100.0), ("0", 0.0)],
    )
    def test_percent_scaling(self, fraction, expected):
        assert to_display_percent(parse_number(fraction)) == expected

    def test_large_values_round_without_context_overflow(self):
        assert round2(parse_number("1e30")) == 1e30
        assert round2(parse_number("123456789012345678901234567890.125")) == float("123456789012345678901234567890.13")
        assert round_count(parse_number("123456789012345678901234567890.5")) == 123456789012345678901234567891
        assert to_display_percent(parse_number("1e30")) == 1e32

    def test_counts_round_to_integers(self):
        assert round_count(parse_number("1234.5")) == 1235
        assert round_count(parse_number("1234.4")) == 1234
        assert isinstance(round_count(parse_number("7")), int)

    @pytest.mark.parametrize("value", [None, "", "   ", "n/a", "12abc", "NaN", "Infinity", "1e400", float("nan"), True])
    def test_unusable_values_parse_to_none(self, value):
        assert parse_number(value) is None

    def test_last_data_update_keeps_date_part(self):
        assert last_data_update("2026-01-20T14:30:00.000Z") == "2026-01-20"
        assert last_data_update(None) == "--"
        assert last_data_update("") == "--"


# ── Normalizer ────────────────────────────────────────────────────────────────


class TestNormalizeDeal:
    def test_basic_fields_and_lookups(self):
        deal = normalize_deal(
            _raw(
                dealname="Puzzle Quest",
                dealstage="contractsent",
                amount="75000",
                closedate="2026-02-15",
                hubspot_owner_id="101",
                hs_lastmodifieddate="2026-01-20T14:30:00Z",
                current_offer="15000",
                google_play_page="https://play.google.com/store/apps/details?id=x",
                transfer_summary="Assets: source + store listing",
            ),
            STAGES,
            OWNERS,
        )
        wire = deal.to_wire()
        assert wire["id"] == "42"
        assert wire["name"] == "Puzzle Quest"
        assert wire["stage"] == "contractsent"
        assert wire["stageName"] == "Contract Sent"
        assert wire["stageOrder"] == 4
        assert wire["amount"] == "75000"
        assert wire["ownerId"] == "101"
        assert wire["owner"] == "Sarah Chen"
        assert wire["currentOffer"] == 15000.0
        assert wire["transferSummary"] == "Assets: source + store listing"
        assert wire["performance"]["lastDataUpdate"] == "2026-01-20"

    def test_unknown_stage_falls_back_to_raw_id(self):
        wire = normalize_deal(_raw(dealstage="mystery"), STAGES, OWNERS).to_wire()
        assert wire["stageName"] == "mystery"
        assert wire["stageOrder"] == 999

    def test_unknown_owner_gets_placeholder(self):
        deal = normalize_deal(_raw(hubspot_owner_id="555"), STAGES, OWNERS)
        assert deal.owner == "Owner #555"

    def test_deal_without_owner(self):
        deal = normalize_deal(_raw(), STAGES, OWNERS)
        assert deal.owner_id is None
        assert deal.owner is None

    @pytest.mark.parametrize("offer", ["0", "", None, "abc"])
    def test_missing_or_zero_offer_is_null(self, offer):
        assert normalize_deal(_raw(current_offer=offer), STAGES, OWNERS).current_offer is None

    def test_performance_rounding_and_scaling(self):
        perf = normalize_deal(
            _raw(
                avg_profit_last_3_months="12.345",
                ua_profit="0.585",
                organic_installs="0.71",
                retention_day_1="0.4",
                avg_installs_last_3_month="1523.6",
                installs_last_month="99.5",
                top_countries="US, DE, BR",
                app_rating="4.456",
            ),
            STAGES,
            OWNERS,
        ).to_wire()["performance"]
        assert perf["avgProfit3m"] == 12.35
        assert perf["pctUAProfit"] == 58.5
        assert perf["pctOrgInstalls"] == 71.0
        assert perf["retentionD1"] == 40.0
        assert perf["avgInstalls3m"] == 1524
        assert perf["installsLastMonth"] == 100
        assert perf["topCountries"] == "US, DE, BR"
        assert perf["appRating"] == 4.46

    def test_absent_metrics_are_null_never_zero(self):
        perf = normalize_deal(_raw(), STAGES, OWNERS).to_wire()["performance"]
        numeric = {key: value for key, value in perf.items() if key not in ("lastDataUpdate",)}
        assert all(value is None for value in numeric.values())
        assert perf["lastDataUpdate"] == "--"

    def test_large_metric_values_normalize(self):
        perf = normalize_deal(
            _raw(avg_rev_last_3_months="1e30", installs_last_month="123456789012345678901234567890"),
            STAGES,
            OWNERS,
        ).to_wire()["performance"]
        assert perf["avgRevAds3m"] == 1e30
        assert perf["installsLastMonth"] == 123456789012345678901234567890

    def test_accepts_plain_mapping(self):
        deal = normalize_deal({"id": "7", "properties": {"dealname": "X"}}, STAGES, OWNERS)
        assert deal.id == "7"
        assert deal.name == "X"

    def test_search_properties_cover_every_performance_field(self):
        for prop, _ in PERFORMANCE_PROPERTY_MAP.values():
            assert prop in DEAL_SEARCH_PROPERTIES
        assert "tags" in DEAL_SEARCH_PROPERTIES
        assert "transfer_summary" in DEAL_SEARCH_PROPERTIES


# ── Tags ──────────────────────────────────────────────────────────────────────


class TestTagRewrite:
    def test_semicolon_delimiter_preserved(self):
        assert remove_tag_token("Hot;Next-meeting;Q1", "Next-meeting") == "Hot;Q1"

    def test_comma_delimiter_and_whitespace(self):
        assert remove_tag_token("Hot, Next-meeting , Q1", "Next-meeting") == "Hot,Q1"

    def test_semicolon_wins_when_both_present(self):
        assert detect_tag_delimiter("a,b;c") == ";"
        assert remove_tag_token("a,b;Next-meeting", "Next-meeting") == "a,b"

    def test_only_tag_leaves_empty_string(self):
        assert remove_tag_token("Next-meeting", "Next-meeting") == ""

    def test_empty_and_missing(self):
        assert remove_tag_token("", "Next-meeting") == ""
        assert remove_tag_token(None, "Next-meeting") == ""

    def test_every_occurrence_removed(self):
        assert remove_tag_token("Next-meeting;x;Next-meeting", "Next-meeting") == "x"

    def test_match_is_exact(self):
        assert remove_tag_token("Next-meeting-2;next-meeting", "Next-meeting") == "Next-meeting-2;next-meeting"

    def test_idempotent(self):
        once = remove_tag_token("Hot;Next-meeting;;Q1", "Next-meeting")
        assert remove_tag_token(once, "Next-meeting") == once
