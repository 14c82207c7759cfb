"""Async HTTP client for the deal review API, as used by the dashboard."""

from __future__ import annotations

from typing import Any

import httpx
import structlog

from src.deal_review.core.security import SESSION_COOKIE_NAME

logger = structlog.get_logger(__name__)


class DashboardError(Exception):
    """A deal review API call failed.

    Attributes:
        details: Server-provided detail text, suitable for display.
        status_code: HTTP status, or None for transport errors.
    """

    def __init__(self, details: str, status_code: int | None = None) -> None:
        self.details = details
        self.status_code = status_code
        super().__init__(details)


class DashboardClient:
    """Talks to /api/deals and /api/auth on behalf of the dashboard.

    Args:
        base_url: API origin, e.g. "http://localhost:3001".
        session_token: Value of the auth_token cookie, if already signed in.
        transport: Optional httpx transport (tests inject ASGITransport).
    """

    def __init__(
        self,
        base_url: str,
        session_token: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        timeout: float = 30.0,
    ) -> None:
        cookies = {SESSION_COOKIE_NAME: session_token} if session_token else None
        self._client = httpx.AsyncClient(
            base_url=base_url,
            cookies=cookies,
            transport=transport,
            timeout=timeout,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> DashboardClient:
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def _call(self, method: str, path: str, **kwargs: Any) -> dict[str, Any]:
        try:
            response = await self._client.request(method, path, **kwargs)
        except httpx.HTTPError as exc:
            logger.warning("dashboard.request_failed", path=path, error=str(exc))
            raise DashboardError(str(exc) or type(exc).__name__) from exc

        if response.is_success:
            return response.json()

        details = response.reason_phrase or f"HTTP {response.status_code}"
        try:
            body = response.json()
        except ValueError:
            body = None
        if isinstance(body, dict):
            details = body.get("details") or body.get("error") or body.get("detail") or details
        logger.warning("dashboard.request_rejected", path=path, status_code=response.status_code, details=details)
        raise DashboardError(str(details), response.status_code)

    # ── Deals ────────────────────────────────────────────────────────────

    async def list_deals(self) -> dict[str, Any]:
        """Return {"deals": [...], "portalId": ...}."""
        return await self._call("GET", "/api/deals")

    async def remove_tag(self, deal_id: str) -> dict[str, Any]:
        return await self._call("POST", f"/api/deals/{deal_id}/remove-tag")

    async def update_transfer_summary(self, deal_id: str, text: str) -> dict[str, Any]:
        return await self._call(
            "PATCH",
            f"/api/deals/{deal_id}/transfer-summary",
            json={"transferSummary": text},
        )

    # ── Session ──────────────────────────────────────────────────────────

    async def me(self) -> dict[str, Any]:
        body = await self._call("GET", "/api/auth/me")
        return body["user"]

    async def logout(self) -> None:
        await self._call("POST", "/api/auth/logout")
        self._client.cookies.clear()
