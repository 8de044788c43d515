# Credential Broker — bearer tokens for upstream Google APIs.
# Created: 2026-10-04
#
# Trust order: the signed-in user's own token > operator override token >
# service account (key file, then inline JSON) > ambient default credentials.

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from notebookchat.config import Settings
from notebookchat.errors import NoCredentialsAvailable
from notebookchat.integrations.identity import decode_token_claims
from notebookchat.integrations.token_store import ACCESS_TOKEN_KEY, IDENTITY_KEY, TokenStore

logger = logging.getLogger(__name__)

CLOUD_PLATFORM_SCOPE = "https://www.googleapis.com/auth/cloud-platform"


@dataclass(frozen=True)
class Credentials:
    """Request-scoped credentials, passed explicitly down the call chain."""

    access_token: str | None = None
    identity_label: str | None = None

    @classmethod
    def from_store(cls, store: TokenStore) -> Credentials:
        return cls(
            access_token=store.get(ACCESS_TOKEN_KEY),
            identity_label=store.get(IDENTITY_KEY),
        )

    @property
    def authenticated(self) -> bool:
        return bool(self.access_token)


def _fetch_token(google_credentials) -> str:
    """Refresh google-auth credentials and return the bearer token (blocking)."""
    from google.auth.transport.requests import Request

    google_credentials.refresh(Request())
    if not google_credentials.token:
        raise RuntimeError("Failed to get access token from credentials")
    return google_credentials.token


class CredentialBroker:
    """Resolve a valid bearer token by trying credential sources in priority order."""

    def __init__(self, settings: Settings):
        self.settings = settings

    async def resolve_access_token(self, credentials: Credentials | None = None) -> str:
        strategies: list[tuple[str, Callable[[], Awaitable[str | None]]]] = [
            ("request", lambda: self._request_token(credentials)),
            ("operator", self._operator_token),
            ("service_account_file", self._service_account_file_token),
            ("service_account_json", self._service_account_json_token),
            ("application_default", self._application_default_token),
        ]

        for name, strategy in strategies:
            try:
                token = await strategy()
            except Exception as e:
                logger.warning("Credential source %s failed: %s", name, e)
                continue
            if token:
                logger.debug("Using credential source: %s", name)
                return token

        raise NoCredentialsAvailable()

    async def _request_token(self, credentials: Credentials | None) -> str | None:
        if credentials is None:
            return None
        return credentials.access_token

    async def _operator_token(self) -> str | None:
        token = (self.settings.google_cloud_access_token or "").strip()
        if not token:
            return None
        claims = decode_token_claims(token)
        if claims:
            logger.info(
                "Operator token issued for account: %s",
                claims.get("email") or claims.get("sub") or "Unknown",
            )
        return token

    async def _service_account_file_token(self) -> str | None:
        path = self.settings.google_application_credentials
        if not path:
            return None
        from google.oauth2 import service_account

        creds = service_account.Credentials.from_service_account_file(
            path, scopes=[CLOUD_PLATFORM_SCOPE]
        )
        logger.info("Using service account: %s", getattr(creds, "service_account_email", "Unknown"))
        return await asyncio.to_thread(_fetch_token, creds)

    async def _service_account_json_token(self) -> str | None:
        raw = self.settings.google_service_account_json
        if not raw:
            return None
        from google.oauth2 import service_account

        try:
            info = json.loads(raw)
        except ValueError as e:
            raise ValueError("Invalid GOOGLE_SERVICE_ACCOUNT_JSON format") from e

        creds = service_account.Credentials.from_service_account_info(
            info, scopes=[CLOUD_PLATFORM_SCOPE]
        )
        logger.info("Using service account: %s", info.get("client_email", "Unknown"))
        return await asyncio.to_thread(_fetch_token, creds)

    async def _application_default_token(self) -> str | None:
        import google.auth

        creds, project = google.auth.default(scopes=[CLOUD_PLATFORM_SCOPE])
        account = getattr(creds, "service_account_email", None)
        if account:
            logger.info("Using service account: %s", account)
        else:
            logger.info("Using Application Default Credentials (project=%s)", project)
        return await asyncio.to_thread(_fetch_token, creds)
