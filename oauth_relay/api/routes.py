"""
FastAPI routes for the OAuth relay.

Every failure is converted to a response here: JSON ``{"error": ...}`` for
the API endpoints and an HTML page for the browser-facing callback.
"""

from __future__ import annotations

import logging
from http import HTTPStatus
from typing import Annotated

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse, JSONResponse, RedirectResponse, Response

from oauth_relay.clients.provider_oauth import OAuthTokenExchangeError
from oauth_relay.core.config import AppSettings
from oauth_relay.dependencies import (
    get_app_settings,
    get_client_ip,
    get_oauth_relay,
    get_token_proxy,
)
from oauth_relay.schemas import ErrorResponse, PendingResponse, TokenDeliveryResponse
from oauth_relay.services.pages import render_error_page, render_success_page
from oauth_relay.services.relay import (
    InvalidRequestError,
    OAuthRelay,
    RateLimitExceededError,
    SessionExpiredError,
    TokenProxy,
)
from oauth_relay.services.sessions import SessionNotFoundError
from oauth_relay.utils.http import read_form_or_json

router = APIRouter()
logger = logging.getLogger(__name__)

# Routes accept every verb so the wrong one gets the relay's own 405 body.
_ANY_METHOD = ["GET", "POST", "PUT", "PATCH", "DELETE"]


def _error(status: HTTPStatus, message: str) -> JSONResponse:
    return JSONResponse(status_code=status, content=ErrorResponse(error=message).model_dump())


def _page(status: HTTPStatus, title: str, message: str) -> HTMLResponse:
    return HTMLResponse(status_code=status, content=render_error_page(title, message))


def _upstream_status(exc: OAuthTokenExchangeError) -> int:
    if 400 <= exc.status_code < 600:
        return exc.status_code
    return HTTPStatus.BAD_GATEWAY


@router.get("/health", status_code=HTTPStatus.OK)
async def healthcheck() -> dict:
    """Simple health endpoint for monitoring."""
    return {"status": "ok"}


@router.api_route("/authorize", methods=_ANY_METHOD)
async def authorize(
    request: Request,
    relay: Annotated[OAuthRelay, Depends(get_oauth_relay)],
    client_ip: Annotated[str, Depends(get_client_ip)],
) -> Response:
    """Start the browser leg: create a session and redirect to the provider."""
    if request.method != "GET":
        return _error(HTTPStatus.METHOD_NOT_ALLOWED, "Method not allowed")

    params = request.query_params
    try:
        authorization_url = relay.begin_authorization(
            session_id=params.get("session_id"),
            client_ip=client_ip,
            scope=params.get("scope"),
            source=params.get("source"),
        )
    except InvalidRequestError as exc:
        return _error(HTTPStatus.BAD_REQUEST, str(exc))
    except RateLimitExceededError:
        return _error(HTTPStatus.TOO_MANY_REQUESTS, "Rate limit exceeded")
    except Exception:
        logger.exception("authorize failed")
        return _error(HTTPStatus.INTERNAL_SERVER_ERROR, "Internal server error")

    return RedirectResponse(url=authorization_url, status_code=HTTPStatus.FOUND)


@router.api_route("/callback", methods=_ANY_METHOD, response_class=HTMLResponse)
async def callback(
    request: Request,
    relay: Annotated[OAuthRelay, Depends(get_oauth_relay)],
    settings: Annotated[AppSettings, Depends(get_app_settings)],
) -> HTMLResponse:
    """Provider redirect target: exchange the code and confirm in the browser."""
    if request.method != "GET":
        return _page(HTTPStatus.METHOD_NOT_ALLOWED, "Error", "Method not allowed")

    code = request.query_params.get("code")
    state = request.query_params.get("state")
    if not code or not state:
        return _page(HTTPStatus.BAD_REQUEST, "Error", "Missing code or state parameter.")

    try:
        source = await relay.complete_authorization(code=code, state=state)
    except SessionNotFoundError:
        return _page(HTTPStatus.BAD_REQUEST, "Error", "Invalid or expired session.")
    except SessionExpiredError:
        return _page(
            HTTPStatus.BAD_REQUEST,
            "Session Expired",
            "Your login session has expired. Please try again.",
        )
    except OAuthTokenExchangeError:
        return _page(
            HTTPStatus.BAD_GATEWAY,
            "Error",
            "Failed to complete login with the provider. Please try again.",
        )
    except Exception:
        logger.exception("callback error")
        return _page(
            HTTPStatus.INTERNAL_SERVER_ERROR,
            "Error",
            "An unexpected error occurred. Please try again.",
        )

    ttl_minutes = max(1, settings.oauth.session_ttl_seconds // 60)
    return HTMLResponse(
        status_code=HTTPStatus.OK,
        content=render_success_page(source, session_ttl_minutes=ttl_minutes),
    )


@router.api_route("/token", methods=_ANY_METHOD)
async def poll_token(
    request: Request,
    relay: Annotated[OAuthRelay, Depends(get_oauth_relay)],
) -> Response:
    """Polling leg: deliver parked tokens once, otherwise report pending."""
    if request.method != "GET":
        return _error(HTTPStatus.METHOD_NOT_ALLOWED, "Method not allowed")

    session_id = request.query_params.get("session_id")
    if not session_id:
        return _error(HTTPStatus.BAD_REQUEST, "session_id is required")

    try:
        tokens = relay.claim_tokens(session_id)
    except Exception:
        logger.exception("token polling failed")
        return _error(HTTPStatus.INTERNAL_SERVER_ERROR, "Internal server error")

    if tokens is None:
        return JSONResponse(
            status_code=HTTPStatus.ACCEPTED, content=PendingResponse().model_dump()
        )
    delivery = TokenDeliveryResponse(**tokens.model_dump())
    return JSONResponse(status_code=HTTPStatus.OK, content=delivery.model_dump())


@router.api_route("/token/client", methods=_ANY_METHOD)
async def client_token(
    request: Request,
    proxy: Annotated[TokenProxy, Depends(get_token_proxy)],
    client_ip: Annotated[str, Depends(get_client_ip)],
) -> Response:
    """Client-credential grant performed with the relay's secret."""
    if request.method != "POST":
        return _error(HTTPStatus.METHOD_NOT_ALLOWED, "Method not allowed")

    try:
        payload = await proxy.client_token(client_ip=client_ip)
    except RateLimitExceededError:
        return _error(HTTPStatus.TOO_MANY_REQUESTS, "Rate limit exceeded")
    except OAuthTokenExchangeError as exc:
        logger.error("Client token request failed (%s): %s", exc.status_code, exc.body)
        return _error(_upstream_status(exc), "Failed to obtain client token")
    except Exception:
        logger.exception("client token request failed")
        return _error(HTTPStatus.INTERNAL_SERVER_ERROR, "Internal server error")

    return JSONResponse(status_code=HTTPStatus.OK, content=payload)


@router.api_route("/token/refresh", methods=_ANY_METHOD)
async def refresh_token(
    request: Request,
    proxy: Annotated[TokenProxy, Depends(get_token_proxy)],
    client_ip: Annotated[str, Depends(get_client_ip)],
) -> Response:
    """Refresh-token grant performed with the relay's secret."""
    if request.method != "POST":
        return _error(HTTPStatus.METHOD_NOT_ALLOWED, "Method not allowed")

    body = await read_form_or_json(request)
    try:
        payload = await proxy.refresh(
            client_ip=client_ip, refresh_token=body.get("refresh_token")
        )
    except InvalidRequestError as exc:
        return _error(HTTPStatus.BAD_REQUEST, str(exc))
    except RateLimitExceededError:
        return _error(HTTPStatus.TOO_MANY_REQUESTS, "Rate limit exceeded")
    except OAuthTokenExchangeError as exc:
        logger.error("Token refresh failed (%s): %s", exc.status_code, exc.body)
        return _error(_upstream_status(exc), "Failed to refresh token")
    except Exception:
        logger.exception("token refresh failed")
        return _error(HTTPStatus.INTERNAL_SERVER_ERROR, "Internal server error")

    return JSONResponse(status_code=HTTPStatus.OK, content=payload)


__all__ = ["router"]
