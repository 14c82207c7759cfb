"""Deal mutations: workflow tag removal and transfer summary edits.

Both operations are a single overwrite of one HubSpot property, so there is
no partial state to roll back. In sample mode they report success without
contacting HubSpot.
"""

from __future__ import annotations

import structlog

from src.deal_review.deals.crm.client import HubSpotClient
from src.deal_review.deals.crm.field_mapping import remove_tag_token
from src.deal_review.deals.schemas import MutationResult, TransferSummaryResult

logger = structlog.get_logger(__name__)


class TagMutationService:
    """Writes review-queue changes back to HubSpot.

    Args:
        crm: HubSpot client, or None in sample mode.
        workflow_tag: Tag token removed by remove_tag().
    """

    def __init__(self, crm: HubSpotClient | None, workflow_tag: str) -> None:
        self._crm = crm
        self._workflow_tag = workflow_tag

    async def remove_tag(self, deal_id: str) -> MutationResult:
        """Remove the workflow tag from a deal's tags property.

        Idempotent: a deal that no longer carries the tag is rewritten with
        the same tag string and still reports success.

        Raises:
            UpstreamFailure: If reading or writing the deal fails.
        """
        log = logger.bind(deal_id=deal_id, tag=self._workflow_tag)

        if self._crm is None:
            log.info("tags.removed", mode="sample")
            return MutationResult(success=True, message="Tag removed (dummy mode)")

        deal = await self._crm.get_deal(deal_id, ["tags"])
        current = deal.properties.get("tags") or ""
        updated = remove_tag_token(current, self._workflow_tag)
        log.debug("tags.rewrite", current=current, updated=updated)

        await self._crm.update_deal(deal_id, {"tags": updated})
        log.info("tags.removed", changed=current != updated)
        return MutationResult(success=True, message="Tag removed successfully")

    async def update_transfer_summary(self, deal_id: str, summary: str | None) -> TransferSummaryResult:
        """Overwrite a deal's transfer summary. Blank text clears it.

        Raises:
            UpstreamFailure: If the write fails.
        """
        cleaned = summary.strip() if summary else ""
        stored = cleaned or None

        if self._crm is None:
            logger.info("deals.summary_updated", deal_id=deal_id, mode="sample")
            return TransferSummaryResult(
                success=True,
                message="Transfer summary updated (dummy mode)",
                transfer_summary=stored,
            )

        await self._crm.update_deal(deal_id, {"transfer_summary": cleaned})
        logger.info("deals.summary_updated", deal_id=deal_id, cleared=stored is None)
        return TransferSummaryResult(
            success=True,
            message="Transfer summary updated",
            transfer_summary=stored,
        )
