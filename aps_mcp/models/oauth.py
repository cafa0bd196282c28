"""
Domain models for OAuth token caching and persistence.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional

from pydantic import BaseModel, Field


class CachedToken(BaseModel):
    """The single client-credentials token slot held by the token cache."""

    token: str
    expires_at: datetime
    scope: str

    def is_valid_for(self, scope: str, *, margin: timedelta, now: datetime) -> bool:
        return self.scope == scope and self.expires_at > now + margin


class InteractiveTokenRecord(BaseModel):
    """Represents the user session persisted after an interactive login."""

    access_token: str
    refresh_token: str
    expires_at: datetime = Field(..., description="UTC instant the access token expires.")
    scope: Optional[str] = None

    def remaining(self, now: Optional[datetime] = None) -> timedelta:
        now = now or datetime.now(timezone.utc)
        expires_at = self.expires_at
        if expires_at.tzinfo is None:
            expires_at = expires_at.replace(tzinfo=timezone.utc)
        return expires_at - now


__all__ = ["CachedToken", "InteractiveTokenRecord"]
