# Auth router — Google sign-in, callback, refresh, logout, status.
# Created: 2026-10-08
#
# Session state lives entirely in cookies; every handler replays the token
# store's pending writes onto the response it returns.

from __future__ import annotations

import logging
import urllib.parse

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse, RedirectResponse

from notebookchat.api.deps import get_auth_flow, get_token_store, http_error, request_origin
from notebookchat.api.v1.schemas.auth import AuthStatusResponse
from notebookchat.errors import ConfigMissing, NotebookChatError, RefreshFailed
from notebookchat.integrations.oauth import AuthorizationFlow
from notebookchat.integrations.token_store import (
    ACCESS_TOKEN_KEY,
    IDENTITY_KEY,
    CookieTokenStore,
)

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Auth"])


def _error_redirect(code: str) -> RedirectResponse:
    return RedirectResponse(f"/?error={urllib.parse.quote(code, safe='')}", status_code=302)


@router.get("/auth/login")
async def login(
    request: Request,
    store: CookieTokenStore = Depends(get_token_store),
    flow: AuthorizationFlow = Depends(get_auth_flow),
):
    """Redirect the browser to the Google consent screen."""
    try:
        url = flow.initiate(store, request_origin(request))
    except ConfigMissing as e:
        raise http_error(e)

    response = RedirectResponse(url, status_code=302)
    store.apply(response)
    return response


@router.get("/auth/callback")
async def callback(
    request: Request,
    code: str | None = None,
    state: str | None = None,
    error: str | None = None,
    store: CookieTokenStore = Depends(get_token_store),
    flow: AuthorizationFlow = Depends(get_auth_flow),
):
    """Provider redirect target: exchange the code and set the session cookies."""
    try:
        session = await flow.complete_callback(
            store, code=code, state=state, error=error, origin=request_origin(request)
        )
    except NotebookChatError as e:
        logger.warning("OAuth callback failed: %s (%s)", e.code, e.message)
        response = _error_redirect(e.code)
    else:
        logger.info("OAuth login complete for %s", session.identity_label)
        response = RedirectResponse("/", status_code=302)

    # The consumed nonce is cleared on success and failure alike
    store.apply(response)
    return response


@router.post("/auth/refresh")
async def refresh(
    store: CookieTokenStore = Depends(get_token_store),
    flow: AuthorizationFlow = Depends(get_auth_flow),
):
    """Mint a new access token from the refresh token cookie."""
    try:
        await flow.refresh(store)
    except (RefreshFailed, ConfigMissing) as e:
        raise http_error(e)

    response = JSONResponse(content={"success": True})
    store.apply(response)
    return response


@router.post("/auth/logout")
async def logout(
    store: CookieTokenStore = Depends(get_token_store),
    flow: AuthorizationFlow = Depends(get_auth_flow),
):
    """Clear every session cookie."""
    flow.logout(store)
    response = JSONResponse(content={"success": True})
    store.apply(response)
    return response


@router.get("/auth/status", response_model=AuthStatusResponse)
async def status(store: CookieTokenStore = Depends(get_token_store)):
    return AuthStatusResponse(
        authenticated=bool(store.get(ACCESS_TOKEN_KEY)),
        identityLabel=store.get(IDENTITY_KEY),
    )
