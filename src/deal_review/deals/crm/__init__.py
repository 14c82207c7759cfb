"""HubSpot integration layer for the deal review queue.

- HubSpotClient: thin async wrapper over the CRM v3 endpoints the queue uses
- LookupCaches: process-wide stage/owner/portal caches (load once, then reuse)
- normalize_deal: raw HubSpot deal -> display Deal
- SAMPLE_DEALS: built-in dataset served when no HubSpot key is configured
"""

from src.deal_review.deals.crm.client import HubSpotClient, UpstreamFailure
from src.deal_review.deals.crm.field_mapping import (
    DEAL_SEARCH_PROPERTIES,
    PERFORMANCE_PROPERTY_MAP,
    normalize_deal,
    remove_tag_token,
)
from src.deal_review.deals.crm.lookups import (
    CacheState,
    LookupCaches,
    OwnerCache,
    PortalCache,
    StageCache,
    StageInfo,
    resolve_owner_name,
)
from src.deal_review.deals.crm.sample_data import SAMPLE_DEALS

__all__ = [
    "HubSpotClient",
    "UpstreamFailure",
    "DEAL_SEARCH_PROPERTIES",
    "PERFORMANCE_PROPERTY_MAP",
    "normalize_deal",
    "remove_tag_token",
    "CacheState",
    "LookupCaches",
    "OwnerCache",
    "PortalCache",
    "StageCache",
    "StageInfo",
    "resolve_owner_name",
    "SAMPLE_DEALS",
]
