"""Schemas returned by the relay's JSON endpoints."""

from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel, Field


class TokenDeliveryResponse(BaseModel):
    """Tokens handed to the polling client exactly once."""

    access_token: str = Field(..., description="Provider access token.")
    refresh_token: Optional[str] = Field(None, description="Provider refresh token.")
    expires_in: Optional[int] = Field(None, description="Access token lifetime in seconds.")
    token_type: Optional[str] = None


class PendingResponse(BaseModel):
    """Returned while the browser leg has not delivered tokens yet."""

    status: Literal["pending"] = "pending"


class ErrorResponse(BaseModel):
    error: str


__all__ = ["ErrorResponse", "PendingResponse", "TokenDeliveryResponse"]
