"""Process-wide lookup caches for HubSpot stage labels, owner names and the portal ID.

Each cache is loaded lazily and then kept for the process lifetime:

- StageCache: the whole deal pipeline catalog, fetched once and flattened to
  {stage_id: StageInfo}. Loads are single-flight; a failed load leaves the
  cache EMPTY so the next request tries again. Labels are never refreshed
  after a successful load.
- PortalCache: the HubSpot portal ID used for deep links, same pattern.
- OwnerCache: accreted per owner ID. Uncached owners referenced by a result
  page are fetched concurrently; one failed owner degrades to a placeholder
  name without affecting the rest of the batch.

All writes are idempotent (re-fetching an ID stores the same value), so
concurrent requests racing on the owner cache are harmless.
"""

from __future__ import annotations

import asyncio
from abc import ABC, abstractmethod
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any

import structlog

from src.deal_review.deals.crm.client import HubSpotClient, UpstreamFailure

logger = structlog.get_logger(__name__)

DEFAULT_STAGE_ORDER = 999


class CacheState(str, Enum):
    EMPTY = "empty"
    LOADING = "loading"
    READY = "ready"


@dataclass(frozen=True)
class StageInfo:
    """Display data for one pipeline stage."""

    label: str
    display_order: int = DEFAULT_STAGE_ORDER


def owner_placeholder(owner_id: str) -> str:
    return f"Owner #{owner_id}"


def resolve_owner_name(owner_id: str, owner: Mapping[str, Any]) -> str:
    """Pick the display name for a HubSpot owner record.

    Precedence: "first last" (blank parts skipped), then email, then the
    "Owner #<id>" placeholder.
    """
    parts = [
        str(owner.get(key) or "").strip()
        for key in ("firstName", "lastName")
    ]
    full_name = " ".join(part for part in parts if part)
    if full_name:
        return full_name

    email = str(owner.get("email") or "").strip()
    if email:
        return email

    return owner_placeholder(owner_id)


def flatten_pipelines(pipelines: Iterable[Mapping[str, Any]]) -> dict[str, StageInfo]:
    """Flatten HubSpot's pipeline catalog into {stage_id: StageInfo}."""
    stages: dict[str, StageInfo] = {}
    for pipeline in pipelines:
        for stage in pipeline.get("stages", []):
            stage_id = stage.get("id")
            if not stage_id:
                continue
            order = stage.get("displayOrder")
            stages[str(stage_id)] = StageInfo(
                label=stage.get("label") or str(stage_id),
                display_order=int(order) if isinstance(order, (int, float)) else DEFAULT_STAGE_ORDER,
            )
    return stages


class _LoadOnce(ABC):
    """Single-flight, retry-on-failure loader shared by the stage and portal caches."""

    def __init__(self) -> None:
        self.state = CacheState.EMPTY
        self._lock = asyncio.Lock()

    @property
    def ready(self) -> bool:
        return self.state is CacheState.READY

    async def ensure_loaded(self, crm: HubSpotClient) -> None:
        if self.state is CacheState.READY:
            return
        async with self._lock:
            # Another request may have finished the load while we waited.
            if self.state is CacheState.READY:
                return
            self.state = CacheState.LOADING
            try:
                await self._load(crm)
            except UpstreamFailure as exc:
                self.state = CacheState.EMPTY
                self._log_failure(exc)
                return
            self.state = CacheState.READY

    @abstractmethod
    async def _load(self, crm: HubSpotClient) -> None:
        """Fetch and store the cached value. Raise UpstreamFailure on failure."""
        ...

    @abstractmethod
    def _log_failure(self, exc: UpstreamFailure) -> None:
        """Log a failed load with cache-specific context."""
        ...


class StageCache(_LoadOnce):
    """Stage ID -> StageInfo, loaded from the deal pipeline catalog."""

    def __init__(self) -> None:
        super().__init__()
        self._stages: dict[str, StageInfo] = {}

    @property
    def mapping(self) -> Mapping[str, StageInfo]:
        return MappingProxyType(self._stages)

    def label(self, stage_id: str) -> str:
        info = self._stages.get(stage_id)
        return info.label if info else stage_id

    def order(self, stage_id: str) -> int:
        info = self._stages.get(stage_id)
        return info.display_order if info else DEFAULT_STAGE_ORDER

    async def _load(self, crm: HubSpotClient) -> None:
        pipelines = await crm.get_deal_pipelines()
        self._stages = flatten_pipelines(pipelines)
        logger.info("crm.stage_mapping_loaded", stages=len(self._stages))

    def _log_failure(self, exc: UpstreamFailure) -> None:
        logger.error("crm.stage_mapping_failed", status_code=exc.status_code, error=exc.message)


class PortalCache(_LoadOnce):
    """HubSpot portal (account) ID, used to build deep links into the CRM."""

    def __init__(self) -> None:
        super().__init__()
        self.portal_id: int | str | None = None

    async def _load(self, crm: HubSpotClient) -> None:
        details = await crm.get_account_details()
        portal_id = details.get("portalId")
        if portal_id is None:
            raise UpstreamFailure("Account details carry no portalId", None, "get_account_details")
        self.portal_id = portal_id
        logger.info("crm.portal_id_loaded", portal_id=portal_id)

    def _log_failure(self, exc: UpstreamFailure) -> None:
        logger.error("crm.portal_id_failed", status_code=exc.status_code, error=exc.message)


class OwnerCache:
    """Owner ID -> display name, extended one batch at a time."""

    def __init__(self) -> None:
        self._names: dict[str, str] = {}

    @property
    def mapping(self) -> Mapping[str, str]:
        return MappingProxyType(self._names)

    def name(self, owner_id: str) -> str:
        return self._names.get(owner_id) or owner_placeholder(owner_id)

    async def fetch_owner(self, crm: HubSpotClient, owner_id: str) -> str:
        """Resolve one owner, caching only successful lookups."""
        cached = self._names.get(owner_id)
        if cached:
            return cached
        try:
            owner = await crm.get_owner(owner_id)
        except UpstreamFailure as exc:
            logger.warning(
                "crm.owner_fetch_failed",
                owner_id=owner_id,
                status_code=exc.status_code,
                error=exc.message,
            )
            return owner_placeholder(owner_id)

        if not isinstance(owner, Mapping):
            logger.warning("crm.owner_malformed", owner_id=owner_id, body_type=type(owner).__name__)
            return owner_placeholder(owner_id)

        name = resolve_owner_name(owner_id, owner)
        self._names[owner_id] = name
        return name

    async def ensure_owners(self, crm: HubSpotClient, owner_ids: Iterable[str]) -> None:
        """Fetch every owner in owner_ids not cached yet, concurrently."""
        uncached = [oid for oid in dict.fromkeys(owner_ids) if oid and oid not in self._names]
        if not uncached:
            return
        await asyncio.gather(*(self.fetch_owner(crm, oid) for oid in uncached))
        logger.info("crm.owner_mapping_loaded", requested=len(uncached), owners=len(self._names))


@dataclass
class LookupCaches:
    """The three process-wide caches, injected together into the query service."""

    stages: StageCache = field(default_factory=StageCache)
    owners: OwnerCache = field(default_factory=OwnerCache)
    portal: PortalCache = field(default_factory=PortalCache)
