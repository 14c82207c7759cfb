"""Pydantic schemas for authentication API endpoints."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class Identity(BaseModel):
    """Normalized identity of a signed-in user.

    Embedded in the session credential and immutable for its lifetime.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    email: str
    name: str
    picture: str | None = None


class ProfileEmail(BaseModel):
    """One email address asserted by the identity provider."""

    value: str
    verified: bool = False


class ProviderProfile(BaseModel):
    """Profile assertion returned by the identity provider."""

    id: str
    display_name: str | None = None
    emails: list[ProfileEmail] = Field(default_factory=list)
    photos: list[str] = Field(default_factory=list)


class MeResponse(BaseModel):
    """Response schema for current user info."""

    user: Identity


class LogoutResponse(BaseModel):
    success: bool = True
