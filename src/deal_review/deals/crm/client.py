"""Async HTTP client wrapper for the HubSpot CRM v3 REST API.

Covers exactly the endpoints the review queue needs: the deal pipeline
catalog, account details (portal ID), single owners, the deal search, and
single-deal read/update. Every call is timed via track_crm_call and logged
with structlog. Failures surface as UpstreamFailure carrying the upstream
status code and message; nothing is retried.
"""

from __future__ import annotations

from typing import Any

import httpx
import structlog
from pydantic import ValidationError

from src.deal_review.core.monitoring import track_crm_call
from src.deal_review.deals.schemas import RawDeal

logger = structlog.get_logger(__name__)

DEFAULT_BASE_URL = "https://api.hubapi.com"


class UpstreamFailure(Exception):
    """A HubSpot call failed.

    Attributes:
        status_code: Upstream HTTP status, or None for transport errors.
        message: Upstream error message (HubSpot's "message" field when present).
        operation: Logical operation name, e.g. "search_deals".
    """

    def __init__(self, message: str, status_code: int | None = None, operation: str = "") -> None:
        self.message = message
        self.status_code = status_code
        self.operation = operation
        super().__init__(str(self))

    def __str__(self) -> str:
        status = self.status_code if self.status_code is not None else "n/a"
        return f"HubSpot {self.operation} failed [{status}]: {self.message}"


def _expect_object(data: Any, operation: str) -> dict[str, Any]:
    if not isinstance(data, dict):
        logger.error("crm.unexpected_shape", operation=operation, body_type=type(data).__name__)
        raise UpstreamFailure(f"Expected a JSON object, got {type(data).__name__}", None, operation)
    return data


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text or response.reason_phrase
    if isinstance(body, dict) and body.get("message"):
        return str(body["message"])
    return response.reason_phrase or f"HTTP {response.status_code}"


class HubSpotClient:
    """Async client for the HubSpot CRM API, authenticated with a private app token.

    Args:
        api_key: HubSpot private app access token.
        base_url: API root (overridable for tests and sandboxes).
        timeout: Per-request timeout in seconds.
        transport: Optional httpx transport (tests inject httpx.MockTransport).
    """

    def __init__(
        self,
        api_key: str,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._client = httpx.AsyncClient(
            base_url=base_url,
            headers={
                "Authorization": f"Bearer {api_key}",
                "Content-Type": "application/json",
            },
            timeout=timeout,
            transport=transport,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _request(self, operation: str, method: str, path: str, **kwargs: Any) -> Any:
        try:
            async with track_crm_call(operation):
                response = await self._client.request(method, path, **kwargs)
                response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            message = _error_message(exc.response)
            logger.error(
                "crm.request_failed",
                operation=operation,
                path=path,
                status_code=exc.response.status_code,
                error=message,
            )
            raise UpstreamFailure(message, exc.response.status_code, operation) from exc
        except httpx.HTTPError as exc:
            logger.error("crm.transport_error", operation=operation, path=path, error=str(exc))
            raise UpstreamFailure(str(exc) or type(exc).__name__, None, operation) from exc

        if not response.content:
            return {}
        try:
            return response.json()
        except ValueError as exc:
            logger.error("crm.invalid_body", operation=operation, path=path, status_code=response.status_code)
            raise UpstreamFailure("HubSpot returned a non-JSON body", response.status_code, operation) from exc

    # ── Lookups ──────────────────────────────────────────────────────────

    async def get_deal_pipelines(self) -> list[dict[str, Any]]:
        """GET /crm/v3/pipelines/deals -> every pipeline with its stages."""
        data = await self._request("get_pipelines", "GET", "/crm/v3/pipelines/deals")
        return _expect_object(data, "get_pipelines").get("results", [])

    async def get_account_details(self) -> dict[str, Any]:
        """GET /account-info/v3/details -> account info including portalId."""
        data = await self._request("get_account_details", "GET", "/account-info/v3/details")
        return _expect_object(data, "get_account_details")

    async def get_owner(self, owner_id: str) -> dict[str, Any]:
        """GET /crm/v3/owners/{owner_id}."""
        return await self._request("get_owner", "GET", f"/crm/v3/owners/{owner_id}")

    # ── Deals ────────────────────────────────────────────────────────────

    async def search_deals(
        self,
        tag: str,
        properties: list[str],
        limit: int = 100,
    ) -> list[RawDeal]:
        """Search deals whose tags property contains the given token."""
        body = {
            "filterGroups": [
                {
                    "filters": [
                        {
                            "propertyName": "tags",
                            "operator": "CONTAINS_TOKEN",
                            "value": tag,
                        }
                    ]
                }
            ],
            "limit": limit,
            "properties": properties,
        }
        data = await self._request("search_deals", "POST", "/crm/v3/objects/deals/search", json=body)
        items = _expect_object(data, "search_deals").get("results", [])
        try:
            results = [RawDeal.model_validate(item) for item in items]
        except ValidationError as exc:
            raise UpstreamFailure(
                f"Malformed deal in search results: {exc.error_count()} errors", None, "search_deals"
            ) from exc
        logger.info("crm.deals_searched", tag=tag, count=len(results))
        return results

    async def get_deal(self, deal_id: str, properties: list[str]) -> RawDeal:
        data = await self._request(
            "get_deal",
            "GET",
            f"/crm/v3/objects/deals/{deal_id}",
            params={"properties": ",".join(properties)},
        )
        try:
            return RawDeal.model_validate(_expect_object(data, "get_deal"))
        except ValidationError as exc:
            raise UpstreamFailure("Malformed deal record", None, "get_deal") from exc

    async def update_deal(self, deal_id: str, properties: dict[str, Any]) -> None:
        await self._request(
            "update_deal",
            "PATCH",
            f"/crm/v3/objects/deals/{deal_id}",
            json={"properties": properties},
        )
        logger.info("crm.deal_updated", deal_id=deal_id, fields=sorted(properties))
