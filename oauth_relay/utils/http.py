"""HTTP helpers shared by the relay routes."""

from __future__ import annotations

from typing import Any, Dict

from starlette.requests import Request

UNKNOWN_CLIENT = "unknown"


def resolve_client_ip(request: Request, *, trusted_proxy_count: int = 0) -> str:
    """Return the caller's address as seen by the outermost trusted proxy.

    Each proxy appends the peer it saw, so only the last ``trusted_proxy_count``
    X-Forwarded-For entries are trustworthy; anything left of them is
    client-supplied.
    """
    if trusted_proxy_count > 0:
        forwarded = request.headers.get("x-forwarded-for", "")
        hops = [hop.strip() for hop in forwarded.split(",") if hop.strip()]
        if len(hops) >= trusted_proxy_count:
            return hops[-trusted_proxy_count]
    if request.client and request.client.host:
        return request.client.host
    return UNKNOWN_CLIENT


async def read_form_or_json(request: Request) -> Dict[str, Any]:
    """Parse a JSON or form-encoded body; anything unreadable yields ``{}``."""
    content_type = request.headers.get("content-type", "")
    if "application/x-www-form-urlencoded" in content_type or (
        "multipart/form-data" in content_type
    ):
        form = await request.form()
        return dict(form)
    body = await request.body()
    if not body:
        return {}
    try:
        payload = await request.json()
    except ValueError:
        return {}
    return payload if isinstance(payload, dict) else {}


__all__ = ["UNKNOWN_CLIENT", "read_form_or_json", "resolve_client_ip"]
