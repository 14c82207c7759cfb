"""REST API endpoints for the deal review queue.

All endpoints require a valid session cookie. HubSpot failures are caught
here and returned as {"error", "details"} with the upstream status code.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Path, status
from fastapi.responses import JSONResponse

from src.deal_review.api.deps import (
    get_current_identity,
    get_deal_query_service,
    get_tag_mutation_service,
)
from src.deal_review.deals.crm.client import UpstreamFailure
from src.deal_review.deals.mutations import TagMutationService
from src.deal_review.deals.schemas import (
    DealListing,
    MutationResult,
    TransferSummaryResult,
    TransferSummaryUpdate,
)
from src.deal_review.deals.service import DealQueryService
from src.deal_review.schemas.auth import Identity

router = APIRouter(prefix="/api/deals", tags=["deals"])

DealId = Path(..., min_length=1, max_length=64, pattern=r"^[A-Za-z0-9_-]+$")


def _upstream_error(exc: UpstreamFailure, error: str) -> JSONResponse:
    """Translate an UpstreamFailure into the structured error body."""
    status_code = exc.status_code if exc.status_code and exc.status_code >= 400 else status.HTTP_502_BAD_GATEWAY
    return JSONResponse(
        status_code=status_code,
        content={"error": error, "details": exc.message},
    )


@router.get("", response_model=DealListing)
async def list_deals(
    identity: Identity = Depends(get_current_identity),
    service: DealQueryService = Depends(get_deal_query_service),
):
    """Deals tagged for review, normalized for display, plus the portal ID."""
    try:
        return await service.list_deals()
    except UpstreamFailure as exc:
        return _upstream_error(exc, "Failed to fetch deals from HubSpot")


@router.post("/{deal_id}/remove-tag", response_model=MutationResult)
async def remove_tag(
    deal_id: str = DealId,
    identity: Identity = Depends(get_current_identity),
    service: TagMutationService = Depends(get_tag_mutation_service),
):
    """Take a deal out of the review queue by removing the workflow tag."""
    try:
        return await service.remove_tag(deal_id)
    except UpstreamFailure as exc:
        return _upstream_error(exc, "Failed to remove tag")


@router.patch("/{deal_id}/transfer-summary", response_model=TransferSummaryResult)
async def update_transfer_summary(
    body: TransferSummaryUpdate,
    deal_id: str = DealId,
    identity: Identity = Depends(get_current_identity),
    service: TagMutationService = Depends(get_tag_mutation_service),
):
    """Save an edited transfer summary to HubSpot."""
    try:
        return await service.update_transfer_summary(deal_id, body.transfer_summary)
    except UpstreamFailure as exc:
        return _upstream_error(exc, "Failed to update transfer summary")
