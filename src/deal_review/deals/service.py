"""Deal query service -- the read path behind GET /api/deals.

Loads the lookup caches, runs the tagged-deal search against HubSpot and
normalizes every result. In sample mode (no usable HubSpot key) the built-in
sample queue is returned as-is and HubSpot is never contacted.
"""

from __future__ import annotations

import copy

import structlog

from src.deal_review.deals.crm.client import HubSpotClient
from src.deal_review.deals.crm.field_mapping import DEAL_SEARCH_PROPERTIES, normalize_deal
from src.deal_review.deals.crm.lookups import LookupCaches
from src.deal_review.deals.crm.sample_data import SAMPLE_DEALS
from src.deal_review.deals.schemas import DealListing

logger = structlog.get_logger(__name__)

SEARCH_LIMIT = 100


class DealQueryService:
    """Lists the deals currently tagged with the workflow marker.

    Args:
        crm: HubSpot client, or None in sample mode.
        caches: Process-wide lookup caches (stages, owners, portal ID).
        workflow_tag: Tag token that marks a deal for review.
    """

    def __init__(
        self,
        crm: HubSpotClient | None,
        caches: LookupCaches,
        workflow_tag: str,
    ) -> None:
        self._crm = crm
        self._caches = caches
        self._workflow_tag = workflow_tag

    @property
    def uses_sample_data(self) -> bool:
        return self._crm is None

    async def list_deals(self) -> DealListing:
        """Return the review queue plus the HubSpot portal ID.

        Raises:
            UpstreamFailure: If the deal search itself fails. Lookup-cache
                failures are logged and degrade to raw IDs instead.
        """
        if self._crm is None:
            # Copy so callers can never mutate the built-in dataset.
            return DealListing(deals=copy.deepcopy(SAMPLE_DEALS), portal_id=None)

        crm = self._crm
        caches = self._caches

        await caches.stages.ensure_loaded(crm)
        await caches.portal.ensure_loaded(crm)

        results = await crm.search_deals(
            self._workflow_tag,
            DEAL_SEARCH_PROPERTIES,
            limit=SEARCH_LIMIT,
        )

        owner_ids = [
            str(raw.properties["hubspot_owner_id"])
            for raw in results
            if raw.properties.get("hubspot_owner_id")
        ]
        if owner_ids:
            await caches.owners.ensure_owners(crm, owner_ids)

        stages = caches.stages.mapping
        owners = caches.owners.mapping
        deals = [normalize_deal(raw, stages, owners).to_wire() for raw in results]

        logger.info(
            "deals.listed",
            count=len(deals),
            owners=len(set(owner_ids)),
            portal_id=caches.portal.portal_id,
        )
        return DealListing(deals=deals, portal_id=caches.portal.portal_id)
