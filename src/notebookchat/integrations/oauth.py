# Authorization Flow — Google OAuth 2.0 auth code flow + token refresh.
# Created: 2026-10-03
#
# initiate() -> browser redirect -> complete_callback() -> refresh() ... -> logout()
# All state lives in the caller's TokenStore; nothing is kept on the instance.

from __future__ import annotations

import hmac
import logging
import secrets
import time
import urllib.parse
from typing import Any

import httpx

from notebookchat.config import Settings
from notebookchat.errors import (
    ConfigMissing,
    InvalidState,
    MissingCode,
    ProviderError,
    RefreshFailed,
    TokenExchangeFailed,
)
from notebookchat.integrations.identity import IdentityResolver
from notebookchat.integrations.token_store import (
    ACCESS_TOKEN_KEY,
    ACCESS_TOKEN_MAX_AGE,
    IDENTITY_KEY,
    REFRESH_TOKEN_KEY,
    STATE_KEY,
    STATE_MAX_AGE,
    Session,
    TokenStore,
    clear_session,
    save_session,
)

logger = logging.getLogger(__name__)

AUTH_URL = "https://accounts.google.com/o/oauth2/v2/auth"
TOKEN_URL = "https://oauth2.googleapis.com/token"

# cloud-platform is required by the notebook API; drive.readonly lets users add
# Docs/Slides as sources.
OAUTH_SCOPES = [
    "https://www.googleapis.com/auth/cloud-platform",
    "https://www.googleapis.com/auth/drive.readonly",
    "openid",
    "email",
    "profile",
]

CALLBACK_PATH = "/api/v1/auth/callback"


def _expires_in(data: dict[str, Any]) -> int:
    """Token lifetime in seconds; the default max-age when missing or malformed."""
    try:
        return int(data.get("expires_in") or ACCESS_TOKEN_MAX_AGE)
    except (TypeError, ValueError):
        logger.warning("Ignoring malformed expires_in: %r", data.get("expires_in"))
        return ACCESS_TOKEN_MAX_AGE


class AuthorizationFlow:
    """Drives login, callback exchange, refresh and logout for one provider."""

    def __init__(
        self,
        settings: Settings,
        identity: IdentityResolver | None = None,
        *,
        timeout: float = 15,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.settings = settings
        self.identity = identity or IdentityResolver(transport=transport)
        self.timeout = timeout
        self._transport = transport

    def redirect_uri(self, origin: str) -> str:
        """Configured redirect URI, or the callback route on *origin*."""
        return self.settings.google_cloud_redirect_uri or f"{origin.rstrip('/')}{CALLBACK_PATH}"

    def initiate(self, store: TokenStore, origin: str) -> str:
        """Issue a one-shot state nonce and return the provider authorization URL."""
        client_id = self.settings.google_cloud_client_id
        if not client_id:
            raise ConfigMissing("GOOGLE_CLOUD_CLIENT_ID not configured")

        redirect_uri = self.redirect_uri(origin)
        state = secrets.token_urlsafe(16)
        store.set(STATE_KEY, state, max_age=STATE_MAX_AGE, http_only=True)

        params = {
            "client_id": client_id,
            "redirect_uri": redirect_uri,
            "response_type": "code",
            "scope": " ".join(OAUTH_SCOPES),
            "access_type": "offline",
            "prompt": "consent",  # forces a refresh token on repeat consent
            "state": state,
        }
        logger.info("Starting OAuth login, redirect_uri=%s", redirect_uri)
        return f"{AUTH_URL}?{urllib.parse.urlencode(params)}"

    async def complete_callback(
        self,
        store: TokenStore,
        *,
        code: str | None,
        state: str | None,
        error: str | None = None,
        origin: str = "",
    ) -> Session:
        """Validate the callback and exchange the code for a session.

        Raises InvalidState, ProviderError, MissingCode, ConfigMissing or
        TokenExchangeFailed. The stored nonce is consumed on every path.
        """
        stored_state = store.get(STATE_KEY)
        store.delete(STATE_KEY)

        if not state or not stored_state or not hmac.compare_digest(
            state.encode(), stored_state.encode()
        ):
            logger.warning("OAuth callback rejected: state mismatch")
            raise InvalidState()
        if error:
            raise ProviderError(error)
        if not code:
            raise MissingCode()

        client_id, client_secret = self._client_credentials()
        data = await self._post_token(
            {
                "code": code,
                "client_id": client_id,
                "client_secret": client_secret,
                "redirect_uri": self.redirect_uri(origin),
                "grant_type": "authorization_code",
            }
        )

        access_token = data.get("access_token")
        if not access_token:
            raise TokenExchangeFailed("Token response has no access token", code="no_access_token")

        session = Session(
            access_token=access_token,
            access_token_expiry=time.time() + _expires_in(data),
            refresh_token=data.get("refresh_token"),
            identity_label=await self.identity.resolve(access_token),
        )
        save_session(store, session)
        return session

    async def refresh(self, store: TokenStore) -> Session:
        """Obtain a new access token. The stored refresh token is left untouched."""
        refresh_token = store.get(REFRESH_TOKEN_KEY)
        if not refresh_token:
            raise RefreshFailed("No refresh token available")

        client_id, client_secret = self._client_credentials()
        try:
            data = await self._post_token(
                {
                    "refresh_token": refresh_token,
                    "client_id": client_id,
                    "client_secret": client_secret,
                    "grant_type": "refresh_token",
                }
            )
        except TokenExchangeFailed as e:
            raise RefreshFailed() from e

        access_token = data.get("access_token")
        if not access_token:
            raise RefreshFailed("No access token in response")

        store.set(ACCESS_TOKEN_KEY, access_token, max_age=ACCESS_TOKEN_MAX_AGE)
        logger.info("Refreshed OAuth access token")
        return Session(
            access_token=access_token,
            access_token_expiry=time.time() + _expires_in(data),
            refresh_token=refresh_token,
            identity_label=store.get(IDENTITY_KEY) or "Unknown",
        )

    def logout(self, store: TokenStore) -> None:
        clear_session(store)

    def _client_credentials(self) -> tuple[str, str]:
        client_id = self.settings.google_cloud_client_id
        client_secret = self.settings.google_cloud_client_secret
        if not client_id or not client_secret:
            raise ConfigMissing("OAuth not configured")
        return client_id, client_secret

    async def _post_token(self, form: dict[str, str]) -> dict[str, Any]:
        grant = form["grant_type"]
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                resp = await client.post(TOKEN_URL, data=form)
        except httpx.HTTPError as e:
            logger.error("Token endpoint unreachable (%s): %s", grant, e)
            raise TokenExchangeFailed() from e

        if not resp.is_success:
            # Body may echo request details; keep it in logs only
            logger.error("Token endpoint rejected %s: %d %s", grant, resp.status_code, resp.text)
            raise TokenExchangeFailed(upstream_status=resp.status_code, upstream_body=resp.text)

        try:
            return resp.json()
        except ValueError as e:
            raise TokenExchangeFailed(upstream_status=resp.status_code) from e
