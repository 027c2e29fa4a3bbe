"""Scope filtering for authorization requests."""

from __future__ import annotations

from typing import Iterable

VALID_SCOPES: frozenset[str] = frozenset(
    {
        "product.compact",
        "cart.basic:write",
        "profile.compact",
        "coupon.basic",
    }
)
DEFAULT_SCOPE = "cart.basic:write profile.compact"


def validate_scope(
    requested: str,
    allowed: Iterable[str] = VALID_SCOPES,
    default: str = DEFAULT_SCOPE,
) -> str:
    """Keep only allow-listed scopes, in request order; fall back to ``default``."""
    allowed_set = frozenset(allowed)
    kept = [scope for scope in requested.split() if scope in allowed_set]
    return " ".join(kept) if kept else default


__all__ = ["DEFAULT_SCOPE", "VALID_SCOPES", "validate_scope"]
