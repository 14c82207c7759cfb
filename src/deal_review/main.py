"""FastAPI application factory.

Creates the app with logging middleware, metrics middleware, CORS, Sentry,
the deal services on app.state, and the v1 API router.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from collections.abc import AsyncGenerator

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.requests import Request
from fastapi.responses import JSONResponse, Response

from src.deal_review.api.middleware.logging import LoggingMiddleware, configure_structlog
from src.deal_review.api.v1.router import router as v1_router
from src.deal_review.config import get_settings
from src.deal_review.core.identity import GoogleOAuthClient
from src.deal_review.core.monitoring import MetricsMiddleware, get_metrics_response, init_sentry
from src.deal_review.core.security import AuthenticationRequired
from src.deal_review.deals.crm import HubSpotClient, LookupCaches, UpstreamFailure
from src.deal_review.deals.mutations import TagMutationService
from src.deal_review.deals.service import DealQueryService


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan: logging and Sentry on startup, close HubSpot client on shutdown."""
    log = structlog.get_logger(__name__)
    settings = get_settings()
    configure_structlog()

    # Initialize Sentry if DSN is configured
    if settings.SENTRY_DSN:
        init_sentry(dsn=settings.SENTRY_DSN, environment=settings.ENVIRONMENT.value)

    if settings.use_sample_data:
        log.warning("deals.sample_mode_enabled", hint="set HUBSPOT_API_KEY to use live data")
    if not app.state.oauth_client.configured:
        log.warning("auth.google_not_configured")

    log.info(
        "app.started",
        environment=settings.ENVIRONMENT.value,
        sample_data=settings.use_sample_data,
        workflow_tag=settings.WORKFLOW_TAG,
    )

    yield

    crm = getattr(app.state, "hubspot_client", None)
    if crm is not None:
        await crm.aclose()
    log.info("app.stopped")


# ── Exception Handlers ───────────────────────────────────────────────────────


async def _authentication_required_handler(request: Request, exc: AuthenticationRequired) -> JSONResponse:
    return JSONResponse(
        status_code=401,
        content={"error": "Authentication required", "reason": exc.reason},
    )


async def _upstream_failure_handler(request: Request, exc: UpstreamFailure) -> JSONResponse:
    # Routes translate known operations themselves; this catches the rest.
    status_code = exc.status_code if exc.status_code and exc.status_code >= 400 else 502
    return JSONResponse(
        status_code=status_code,
        content={"error": "HubSpot request failed", "details": exc.message},
    )


def _build_services(app: FastAPI) -> None:
    """Attach the HubSpot client, caches, deal services and OAuth client to app.state."""
    settings = get_settings()

    crm = None
    if not settings.use_sample_data:
        crm = HubSpotClient(
            api_key=settings.HUBSPOT_API_KEY,
            base_url=settings.HUBSPOT_BASE_URL,
            timeout=settings.HUBSPOT_TIMEOUT,
        )

    app.state.hubspot_client = crm
    app.state.lookup_caches = LookupCaches()
    app.state.deal_query_service = DealQueryService(
        crm=crm,
        caches=app.state.lookup_caches,
        workflow_tag=settings.WORKFLOW_TAG,
    )
    app.state.tag_mutation_service = TagMutationService(crm=crm, workflow_tag=settings.WORKFLOW_TAG)
    app.state.oauth_client = GoogleOAuthClient(
        client_id=settings.GOOGLE_CLIENT_ID,
        client_secret=settings.GOOGLE_CLIENT_SECRET,
        redirect_uri=settings.CALLBACK_URL,
    )


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title="Weekly Deal Review API",
        version="0.1.0",
        description="Authenticated review queue over HubSpot deals tagged for the weekly meeting",
        lifespan=lifespan,
    )

    _build_services(app)

    # Middleware is added in reverse order (last added = outermost)

    # CORS middleware (credentials require an explicit origin)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.FRONTEND_URL],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Logging middleware (logs every request with timing)
    app.add_middleware(LoggingMiddleware)

    # Metrics middleware (outermost -- records Prometheus metrics for all requests)
    app.add_middleware(MetricsMiddleware)

    app.add_exception_handler(AuthenticationRequired, _authentication_required_handler)
    app.add_exception_handler(UpstreamFailure, _upstream_failure_handler)

    # Include v1 API router (health, auth, deals)
    app.include_router(v1_router)

    # Prometheus metrics endpoint (infrastructure route, outside v1 router)
    @app.get("/metrics", include_in_schema=False)
    async def metrics(request: Request) -> Response:
        """Prometheus metrics endpoint."""
        return get_metrics_response()

    return app


# Module-level app for uvicorn
app = create_app()
