"""Session credential signing and verification.

Provides the core security primitives used by the auth endpoints and the
auth gate:

- issue_session_token / verify_session_token: JWT session credential that
  embeds the full Identity and expires after SESSION_TTL_DAYS.
- set_session_cookie / clear_session_cookie: httpOnly, SameSite=lax cookie
  transport, marked secure in production.
- issue_oauth_state / verify_oauth_state: short-lived signed state used to
  tie the OAuth callback to the browser that started the flow.
"""

from __future__ import annotations

import secrets
from datetime import datetime, timedelta, timezone

from fastapi import Response
from jose import ExpiredSignatureError, JWTError, jwt

from src.deal_review.config import get_settings
from src.deal_review.schemas.auth import Identity

SESSION_COOKIE_NAME = "auth_token"
OAUTH_STATE_COOKIE_NAME = "oauth_state"
OAUTH_STATE_TTL = timedelta(minutes=10)

_SESSION_TOKEN_TYPE = "session"
_STATE_TOKEN_TYPE = "oauth_state"


# ── Errors ────────────────────────────────────────────────────────────────────


class AuthenticationRequired(Exception):
    """No usable session credential accompanies the request.

    Attributes:
        reason: Machine-readable reason returned to the client.
    """

    reason = "missing_credential"

    def __init__(self, message: str = "Authentication required", reason: str | None = None) -> None:
        super().__init__(message)
        if reason is not None:
            self.reason = reason


class InvalidCredential(AuthenticationRequired):
    """Signature mismatch, malformed token or unexpected claims."""

    reason = "invalid_credential"


class CredentialExpired(AuthenticationRequired):
    """The credential was valid once but is past its expiry."""

    reason = "expired_credential"


# ── Session Credential ────────────────────────────────────────────────────────


def issue_session_token(identity: Identity, now: datetime | None = None) -> str:
    """Sign a session credential carrying the full identity."""
    settings = get_settings()
    now = now or datetime.now(timezone.utc)
    claims = {
        "sub": identity.id,
        "email": identity.email,
        "name": identity.name,
        "picture": identity.picture,
        "iat": now,
        "exp": now + timedelta(days=settings.SESSION_TTL_DAYS),
        "type": _SESSION_TOKEN_TYPE,
    }
    return jwt.encode(claims, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def verify_session_token(token: str) -> Identity:
    """Decode and validate a session credential.

    Raises:
        CredentialExpired: If the token is past its expiry.
        InvalidCredential: If the signature, structure or claims are wrong.
    """
    settings = get_settings()
    try:
        payload = jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM])
    except ExpiredSignatureError:
        raise CredentialExpired("Session expired")
    except JWTError:
        raise InvalidCredential("Invalid or expired token")

    if payload.get("type") != _SESSION_TOKEN_TYPE or not payload.get("sub"):
        raise InvalidCredential("Invalid or expired token")
    if not payload.get("email"):
        raise InvalidCredential("Invalid or expired token")

    return Identity(
        id=payload["sub"],
        email=payload["email"],
        name=payload.get("name") or payload["email"],
        picture=payload.get("picture"),
    )


def set_session_cookie(response: Response, token: str) -> None:
    settings = get_settings()
    response.set_cookie(
        SESSION_COOKIE_NAME,
        token,
        max_age=int(timedelta(days=settings.SESSION_TTL_DAYS).total_seconds()),
        path="/",
        httponly=True,
        secure=settings.secure_cookies,
        samesite="lax",
    )


def clear_session_cookie(response: Response) -> None:
    settings = get_settings()
    response.delete_cookie(
        SESSION_COOKIE_NAME,
        path="/",
        httponly=True,
        secure=settings.secure_cookies,
        samesite="lax",
    )


# ── OAuth State ───────────────────────────────────────────────────────────────


def issue_oauth_state() -> tuple[str, str]:
    """Create a random OAuth state and its signed cookie form.

    Returns:
        (state, signed_state): the raw value sent to the provider and the
        JWT stored in the oauth_state cookie.
    """
    settings = get_settings()
    state = secrets.token_urlsafe(24)
    now = datetime.now(timezone.utc)
    signed = jwt.encode(
        {"state": state, "exp": now + OAUTH_STATE_TTL, "type": _STATE_TOKEN_TYPE},
        settings.SESSION_SECRET,
        algorithm=settings.JWT_ALGORITHM,
    )
    return state, signed


def verify_oauth_state(signed_state: str | None, returned_state: str | None) -> bool:
    """Check that the provider echoed the state this browser was given."""
    if not signed_state or not returned_state:
        return False
    settings = get_settings()
    try:
        payload = jwt.decode(signed_state, settings.SESSION_SECRET, algorithms=[settings.JWT_ALGORITHM])
    except JWTError:
        return False
    if payload.get("type") != _STATE_TOKEN_TYPE:
        return False
    return secrets.compare_digest(str(payload.get("state", "")), returned_state)
