"""FastAPI dependency injection for authentication and the deal services.

These dependencies are used in endpoint function signatures to inject the
signed-in identity (the auth gate) and the services built by create_app().
"""

from __future__ import annotations

import structlog
from fastapi import Depends, HTTPException, Request, status

from src.deal_review.core.identity import GoogleOAuthClient
from src.deal_review.core.security import (
    SESSION_COOKIE_NAME,
    AuthenticationRequired,
    verify_session_token,
)
from src.deal_review.deals.mutations import TagMutationService
from src.deal_review.deals.service import DealQueryService
from src.deal_review.schemas.auth import Identity


async def get_current_identity(request: Request) -> Identity:
    """Admit the request only with a valid session cookie.

    Attaches the resolved identity to request.state and binds the user's
    email into the structlog context for the rest of the request.

    Raises:
        AuthenticationRequired: No cookie, or the credential is invalid/expired.
            Rendered as 401 with a machine-readable reason by the app.
    """
    token = request.cookies.get(SESSION_COOKIE_NAME)
    if not token:
        raise AuthenticationRequired("Authentication required")

    identity = verify_session_token(token)
    request.state.identity = identity
    structlog.contextvars.bind_contextvars(user_email=identity.email)
    return identity


def _from_state(request: Request, name: str, label: str):
    service = getattr(request.app.state, name, None)
    if service is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=f"{label} not initialized",
        )
    return service


def get_deal_query_service(request: Request) -> DealQueryService:
    """Retrieve DealQueryService from app.state, 503 if not available."""
    return _from_state(request, "deal_query_service", "Deal queries")


def get_tag_mutation_service(request: Request) -> TagMutationService:
    """Retrieve TagMutationService from app.state, 503 if not available."""
    return _from_state(request, "tag_mutation_service", "Deal mutations")


def get_oauth_client(request: Request) -> GoogleOAuthClient:
    return _from_state(request, "oauth_client", "Google sign-in")


# Alias for cleaner endpoint signatures
require_auth = Depends(get_current_identity)
