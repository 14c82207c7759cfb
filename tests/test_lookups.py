"""Tests for the stage, portal and owner lookup caches."""

from __future__ import annotations

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest

from src.deal_review.deals.crm.client import UpstreamFailure
from src.deal_review.deals.crm.lookups import (
    CacheState,
    OwnerCache,
    PortalCache,
    StageCache,
    _LoadOnce,
    flatten_pipelines,
    resolve_owner_name,
)

PIPELINES = [
    {
        "id": "default",
        "stages": [
            {"id": "appointmentscheduled", "label": "Appointment Scheduled", "displayOrder": 0},
            {"id": "contractsent", "label": "Contract Sent", "displayOrder": 4},
        ],
    },
    {
        "id": "apps",
        "stages": [{"id": "listed", "label": "Listed", "displayOrder": 1}],
    },
]


def _crm(**methods) -> MagicMock:
    crm = MagicMock()
    for name, mock in methods.items():
        setattr(crm, name, mock)
    return crm


# ── Owner Names ───────────────────────────────────────────────────────────────


class TestResolveOwnerName:
    def test_full_name_first(self):
        owner = {"firstName": "Sarah", "lastName": "Chen", "email": "sarah@example.com"}
        assert resolve_owner_name("1", owner) == "Sarah Chen"

    def test_single_name_part(self):
        assert resolve_owner_name("1", {"firstName": "Sarah", "lastName": ""}) == "Sarah"
        assert resolve_owner_name("1", {"lastName": "Chen"}) == "Chen"

    def test_email_when_no_name(self):
        assert resolve_owner_name("1", {"firstName": " ", "email": "sarah@example.com"}) == "sarah@example.com"

    def test_placeholder_when_nothing(self):
        assert resolve_owner_name("77", {}) == "Owner #77"


# ── Stage Cache ───────────────────────────────────────────────────────────────


class TestStageCache:
    def test_flatten_pipelines_merges_all_pipelines(self):
        stages = flatten_pipelines(PIPELINES)
        assert set(stages) == {"appointmentscheduled", "contractsent", "listed"}
        assert stages["contractsent"].label == "Contract Sent"
        assert stages["contractsent"].display_order == 4

    def test_missing_display_order_defaults(self):
        stages = flatten_pipelines([{"stages": [{"id": "x", "label": "X"}]}])
        assert stages["x"].display_order == 999

    async def test_loads_once(self):
        crm = _crm(get_deal_pipelines=AsyncMock(return_value=PIPELINES))
        cache = StageCache()

        await cache.ensure_loaded(crm)
        await cache.ensure_loaded(crm)

        assert cache.state is CacheState.READY
        assert crm.get_deal_pipelines.await_count == 1
        assert cache.label("contractsent") == "Contract Sent"
        assert cache.label("unknown") == "unknown"
        assert cache.order("unknown") == 999

    async def test_concurrent_loads_are_single_flight(self):
        calls = 0

        async def slow_pipelines():
            nonlocal calls
            calls += 1
            await asyncio.sleep(0.01)
            return PIPELINES

        crm = _crm(get_deal_pipelines=AsyncMock(side_effect=slow_pipelines))
        cache = StageCache()

        await asyncio.gather(*(cache.ensure_loaded(crm) for _ in range(5)))

        assert calls == 1
        assert cache.ready

    async def test_failed_load_returns_to_empty_and_retries(self):
        crm = _crm(
            get_deal_pipelines=AsyncMock(
                side_effect=[UpstreamFailure("boom", 500, "get_pipelines"), PIPELINES]
            )
        )
        cache = StageCache()

        await cache.ensure_loaded(crm)
        assert cache.state is CacheState.EMPTY
        assert dict(cache.mapping) == {}

        await cache.ensure_loaded(crm)
        assert cache.state is CacheState.READY
        assert crm.get_deal_pipelines.await_count == 2

    def test_mapping_is_read_only(self):
        cache = StageCache()
        with pytest.raises(TypeError):
            cache.mapping["x"] = None  # type: ignore[index]


# ── Portal Cache ──────────────────────────────────────────────────────────────


class TestPortalCache:
    async def test_loads_portal_id(self):
        crm = _crm(get_account_details=AsyncMock(return_value={"portalId": 1234567}))
        cache = PortalCache()
        await cache.ensure_loaded(crm)
        await cache.ensure_loaded(crm)
        assert cache.portal_id == 1234567
        assert crm.get_account_details.await_count == 1

    async def test_missing_portal_id_is_a_failed_load(self):
        crm = _crm(get_account_details=AsyncMock(return_value={}))
        cache = PortalCache()
        await cache.ensure_loaded(crm)
        assert cache.portal_id is None
        assert cache.state is CacheState.EMPTY


# ── Owner Cache ───────────────────────────────────────────────────────────────


class TestOwnerCache:
    async def test_fetches_only_uncached_owners(self):
        owners = {
            "1": {"firstName": "Sarah", "lastName": "Chen"},
            "2": {"email": "mike@example.com"},
        }
        crm = _crm(get_owner=AsyncMock(side_effect=lambda oid: owners[oid]))
        cache = OwnerCache()

        await cache.ensure_owners(crm, ["1", "2", "1"])
        await cache.ensure_owners(crm, ["2"])

        assert crm.get_owner.await_count == 2
        assert dict(cache.mapping) == {"1": "Sarah Chen", "2": "mike@example.com"}

    async def test_one_failure_does_not_affect_the_batch(self):
        async def get_owner(owner_id):
            if owner_id == "bad":
                raise UpstreamFailure("not found", 404, "get_owner")
            return {"firstName": "Owner", "lastName": owner_id}

        crm = _crm(get_owner=AsyncMock(side_effect=get_owner))
        cache = OwnerCache()

        await cache.ensure_owners(crm, ["a", "bad", "b"])

        assert cache.name("a") == "Owner a"
        assert cache.name("b") == "Owner b"
        assert cache.name("bad") == "Owner #bad"
        assert "bad" not in cache.mapping

    async def test_failed_owner_is_retried_next_batch(self):
        crm = _crm(
            get_owner=AsyncMock(
                side_effect=[UpstreamFailure("timeout", None, "get_owner"), {"firstName": "Late"}]
            )
        )
        cache = OwnerCache()

        await cache.ensure_owners(crm, ["9"])
        await cache.ensure_owners(crm, ["9"])

        assert cache.name("9") == "Late"
        assert crm.get_owner.await_count == 2

    async def test_malformed_owner_record_does_not_affect_the_batch(self):
        async def get_owner(owner_id):
            if owner_id == "1":
                return []
            return {"firstName": "A", "lastName": "B"}

        crm = _crm(get_owner=AsyncMock(side_effect=get_owner))
        cache = OwnerCache()

        await cache.ensure_owners(crm, ["1", "2"])

        assert cache.name("1") == "Owner #1"
        assert cache.name("2") == "A B"
        assert "1" not in cache.mapping


# ── Loader Base ───────────────────────────────────────────────────────────────


def test_loader_base_requires_load_and_failure_hooks():
    with pytest.raises(TypeError):
        _LoadOnce()
