"""
Domain models for relay sessions and rate-limit counters.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class TokenSet(BaseModel):
    """Tokens returned by the provider's authorization-code exchange."""

    access_token: str
    refresh_token: Optional[str] = None
    expires_in: Optional[int] = None
    token_type: Optional[str] = None


class RelaySession(BaseModel):
    """Represents a session document bridging the browser and polling legs."""

    state: str = Field(..., description="Relay-generated CSRF token; document key.")
    session_id: str = Field(..., description="Client-supplied polling handle.")
    source: str = Field("unknown", description="Client kind tag: cli, agent or unknown.")
    scope: Optional[str] = Field(None, description="Normalized scope sent to the provider.")
    created_at: datetime
    access_token: Optional[str] = None
    refresh_token: Optional[str] = None
    expires_in: Optional[int] = None
    token_type: Optional[str] = None
    completed: bool = False

    def tokens(self) -> TokenSet | None:
        if not self.completed or not self.access_token:
            return None
        return TokenSet(
            access_token=self.access_token,
            refresh_token=self.refresh_token,
            expires_in=self.expires_in,
            token_type=self.token_type,
        )


class RateLimitRecord(BaseModel):
    """Fixed-window counter stored under ``identifier:action``."""

    count: int
    window_start: datetime


__all__ = ["RateLimitRecord", "RelaySession", "TokenSet"]
