"""Authentication API endpoints.

Google sign-in (consent redirect + callback), current user info, and logout.
The session credential lives in an httpOnly cookie; nothing is persisted
server-side.
"""

from __future__ import annotations

import structlog
from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse, RedirectResponse

from src.deal_review.api.deps import get_current_identity, get_oauth_client
from src.deal_review.config import get_settings
from src.deal_review.core.identity import GoogleOAuthClient, IdentityRejected, verify_profile
from src.deal_review.core.security import (
    OAUTH_STATE_COOKIE_NAME,
    OAUTH_STATE_TTL,
    clear_session_cookie,
    issue_oauth_state,
    issue_session_token,
    set_session_cookie,
    verify_oauth_state,
)
from src.deal_review.schemas.auth import Identity, LogoutResponse, MeResponse

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/api/auth", tags=["auth"])


def _login_failure_redirect() -> RedirectResponse:
    settings = get_settings()
    response = RedirectResponse(
        f"{settings.FRONTEND_URL.rstrip('/')}/login",
        status_code=status.HTTP_307_TEMPORARY_REDIRECT,
    )
    response.delete_cookie(OAUTH_STATE_COOKIE_NAME, path="/api/auth")
    return response


@router.get("/google")
async def start_google_login(oauth: GoogleOAuthClient = Depends(get_oauth_client)):
    """Redirect the browser into Google's consent screen."""
    settings = get_settings()
    state, signed_state = issue_oauth_state()

    response = RedirectResponse(
        oauth.authorization_url(state),
        status_code=status.HTTP_307_TEMPORARY_REDIRECT,
    )
    response.set_cookie(
        OAUTH_STATE_COOKIE_NAME,
        signed_state,
        max_age=int(OAUTH_STATE_TTL.total_seconds()),
        path="/api/auth",
        httponly=True,
        secure=settings.secure_cookies,
        samesite="lax",
    )
    return response


@router.get("/google/callback")
async def google_callback(
    request: Request,
    code: str | None = None,
    state: str | None = None,
    error: str | None = None,
    oauth: GoogleOAuthClient = Depends(get_oauth_client),
):
    """Complete Google sign-in, set the session cookie and return to the web client."""
    settings = get_settings()

    if error or not code:
        logger.warning("auth.login_denied", error=error or "missing_code")
        return _login_failure_redirect()

    if not verify_oauth_state(request.cookies.get(OAUTH_STATE_COOKIE_NAME), state):
        logger.warning("auth.state_mismatch")
        return _login_failure_redirect()

    try:
        profile = await oauth.fetch_profile(code)
        identity = verify_profile(profile)
    except IdentityRejected as exc:
        logger.warning("auth.login_rejected", error=str(exc))
        return _login_failure_redirect()

    response = RedirectResponse(settings.FRONTEND_URL, status_code=status.HTTP_307_TEMPORARY_REDIRECT)
    set_session_cookie(response, issue_session_token(identity))
    response.delete_cookie(OAUTH_STATE_COOKIE_NAME, path="/api/auth")
    logger.info("auth.login_succeeded", user_email=identity.email)
    return response


@router.get("/me", response_model=MeResponse)
async def get_me(identity: Identity = Depends(get_current_identity)):
    """Return the identity carried by the session cookie."""
    return MeResponse(user=identity)


@router.post("/logout", response_model=LogoutResponse)
async def logout():
    """Clear the session cookie. Works with or without a valid session."""
    response = JSONResponse(LogoutResponse().model_dump())
    clear_session_cookie(response)
    return response
