# Identity Resolver — display label for an access token.
# Created: 2026-10-03
#
# The userinfo endpoints are unreliable for some token types, so the label comes
# from a cascade of strategies. Nothing here is used for authorization.

from __future__ import annotations

import base64
import binascii
import json
import logging
from typing import Any

import httpx

logger = logging.getLogger(__name__)

USERINFO_URL = "https://www.googleapis.com/oauth2/v2/userinfo"
USERINFO_V3_URL = "https://www.googleapis.com/oauth2/v3/userinfo"

UNKNOWN_IDENTITY = "Unknown"


def decode_token_claims(token: str) -> dict[str, Any] | None:
    """Best-effort decode of a three-part signed token's payload.

    The signature is NOT checked. Returns None when the token is not
    structurally a signed token or the payload is not a JSON object.
    """
    parts = token.split(".")
    if len(parts) != 3:
        return None

    payload = parts[1]
    payload += "=" * (-len(payload) % 4)
    try:
        claims = json.loads(base64.urlsafe_b64decode(payload).decode("utf-8"))
    except (binascii.Error, UnicodeDecodeError, ValueError):
        return None
    return claims if isinstance(claims, dict) else None


def _first_text(data: dict[str, Any], *keys: str) -> str | None:
    # Claims and userinfo bodies are untrusted; only non-empty strings count.
    for key in keys:
        value = data.get(key)
        if isinstance(value, str) and value:
            return value
    return None


class IdentityResolver:
    """Resolve a human-readable identity for an access token.

    Strategies, tried in order until one yields a label:
    1. userinfo v2 (``email``, then ``name``)
    2. unverified decode of the token payload (``email``, ``sub``, ``name``)
    3. userinfo v3
    Falls back to ``"Unknown"``; never raises.
    """

    def __init__(self, *, timeout: float = 10, transport: httpx.AsyncBaseTransport | None = None):
        self.timeout = timeout
        self._transport = transport

    async def resolve(self, access_token: str) -> str:
        strategies = (
            self._from_userinfo,
            self._from_token_claims,
            self._from_userinfo_v3,
        )
        for strategy in strategies:
            label = await strategy(access_token)
            if label:
                return label
        return UNKNOWN_IDENTITY

    async def _from_userinfo(self, access_token: str) -> str | None:
        return await self._fetch_userinfo(USERINFO_URL, access_token)

    async def _from_userinfo_v3(self, access_token: str) -> str | None:
        return await self._fetch_userinfo(USERINFO_V3_URL, access_token)

    async def _from_token_claims(self, access_token: str) -> str | None:
        claims = decode_token_claims(access_token)
        if not claims:
            return None
        label = _first_text(claims, "email", "sub", "name")
        if label:
            logger.debug("Identity from token payload: %s", label)
        return label

    async def _fetch_userinfo(self, url: str, access_token: str) -> str | None:
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                resp = await client.get(url, headers={"Authorization": f"Bearer {access_token}"})
            if not resp.is_success:
                logger.warning("Userinfo endpoint %s returned %d", url, resp.status_code)
                return None
            data = resp.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.warning("Userinfo lookup via %s failed: %s", url, e)
            return None

        if not isinstance(data, dict):
            return None
        return _first_text(data, "email", "name")
