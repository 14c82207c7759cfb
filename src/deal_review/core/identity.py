"""Google sign-in: consent redirect, code exchange, and identity extraction.

The OAuth handshake itself is delegated to Google. GoogleOAuthClient only
builds the consent URL, trades the authorization code for an access token
and fetches the OpenID userinfo document, which it returns as a
ProviderProfile. verify_profile() turns that profile into the Identity
embedded in the session credential.

No domain allowlist is applied here: the OAuth application registration
restricts which accounts may sign in.
"""

from __future__ import annotations

from urllib.parse import urlencode

import httpx
import structlog

from src.deal_review.schemas.auth import Identity, ProfileEmail, ProviderProfile

logger = structlog.get_logger(__name__)

GOOGLE_AUTHORIZE_URL = "https://accounts.google.com/o/oauth2/v2/auth"
GOOGLE_TOKEN_URL = "https://oauth2.googleapis.com/token"
GOOGLE_USERINFO_URL = "https://openidconnect.googleapis.com/v1/userinfo"
GOOGLE_SCOPES = ["openid", "email", "profile"]


class IdentityRejected(Exception):
    """The provider did not produce a usable identity."""


def verify_profile(profile: ProviderProfile) -> Identity:
    """Extract the normalized Identity from a provider profile.

    Uses the first verified email, the display name (falling back to the
    email) and the first photo if any.

    Raises:
        IdentityRejected: If the profile carries no verified email.
    """
    email = next((e.value for e in profile.emails if e.verified and e.value), None)
    if email is None:
        raise IdentityRejected(f"Profile {profile.id} has no verified email")

    name = (profile.display_name or "").strip() or email
    picture = next((p for p in profile.photos if p), None)
    return Identity(id=profile.id, email=email, name=name, picture=picture)


def profile_from_userinfo(userinfo: dict) -> ProviderProfile:
    """Map Google's OpenID userinfo document onto a ProviderProfile."""
    if not userinfo.get("sub"):
        raise IdentityRejected("Userinfo response has no subject")

    emails: list[ProfileEmail] = []
    if userinfo.get("email"):
        emails.append(
            ProfileEmail(value=userinfo["email"], verified=bool(userinfo.get("email_verified")))
        )
    photos = [userinfo["picture"]] if userinfo.get("picture") else []
    return ProviderProfile(
        id=str(userinfo["sub"]),
        display_name=userinfo.get("name"),
        emails=emails,
        photos=photos,
    )


class GoogleOAuthClient:
    """Authorization-code client for Google sign-in.

    Args:
        client_id: OAuth client ID.
        client_secret: OAuth client secret.
        redirect_uri: Registered callback URL.
        http_client: Optional shared httpx client (tests inject a mock transport).
    """

    TIMEOUT = 10.0

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        redirect_uri: str,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self._client_id = client_id
        self._client_secret = client_secret
        self._redirect_uri = redirect_uri
        self._http = http_client

    @property
    def configured(self) -> bool:
        return bool(self._client_id and self._client_secret)

    def authorization_url(self, state: str) -> str:
        query = urlencode(
            {
                "client_id": self._client_id,
                "redirect_uri": self._redirect_uri,
                "response_type": "code",
                "scope": " ".join(GOOGLE_SCOPES),
                "state": state,
                "prompt": "select_account",
            }
        )
        return f"{GOOGLE_AUTHORIZE_URL}?{query}"

    async def fetch_profile(self, code: str) -> ProviderProfile:
        """Exchange an authorization code and return the signed-in profile.

        Raises:
            IdentityRejected: On any token or userinfo failure.
        """
        if self._http is not None:
            return await self._fetch_profile(self._http, code)
        async with httpx.AsyncClient(timeout=self.TIMEOUT) as client:
            return await self._fetch_profile(client, code)

    async def _fetch_profile(self, client: httpx.AsyncClient, code: str) -> ProviderProfile:
        try:
            token_response = await client.post(
                GOOGLE_TOKEN_URL,
                data={
                    "code": code,
                    "client_id": self._client_id,
                    "client_secret": self._client_secret,
                    "redirect_uri": self._redirect_uri,
                    "grant_type": "authorization_code",
                },
            )
            token_response.raise_for_status()
            access_token = token_response.json().get("access_token")
            if not access_token:
                raise IdentityRejected("Token response has no access_token")

            userinfo_response = await client.get(
                GOOGLE_USERINFO_URL,
                headers={"Authorization": f"Bearer {access_token}"},
            )
            userinfo_response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            logger.warning(
                "oauth.provider_error",
                url=str(exc.request.url),
                status_code=exc.response.status_code,
            )
            raise IdentityRejected(f"Provider returned {exc.response.status_code}") from exc
        except httpx.HTTPError as exc:
            logger.warning("oauth.transport_error", error=str(exc))
            raise IdentityRejected("Identity provider unreachable") from exc

        return profile_from_userinfo(userinfo_response.json())
