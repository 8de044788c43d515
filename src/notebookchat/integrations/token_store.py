# Token Store — per-browser credential storage behind a small key-value protocol.
# Created: 2026-10-02
#
# Nothing is persisted server-side: the HTTP surface uses CookieTokenStore, which
# reads the request cookies and replays pending writes onto the response.

from __future__ import annotations

import logging
import time
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Protocol

logger = logging.getLogger(__name__)

ACCESS_TOKEN_KEY = "google_access_token"
REFRESH_TOKEN_KEY = "google_refresh_token"
IDENTITY_KEY = "google_user_email"
STATE_KEY = "oauth_state"

ACCESS_TOKEN_MAX_AGE = 3600  # access tokens typically expire in 1 hour
REFRESH_TOKEN_MAX_AGE = 60 * 60 * 24 * 30
IDENTITY_MAX_AGE = 60 * 60 * 24 * 30
STATE_MAX_AGE = 600

SESSION_KEYS = (ACCESS_TOKEN_KEY, REFRESH_TOKEN_KEY, IDENTITY_KEY, STATE_KEY)


@dataclass
class Session:
    """Credentials held for one browser."""

    access_token: str
    access_token_expiry: float  # Unix timestamp
    refresh_token: str | None = None
    identity_label: str = "Unknown"


class TokenStore(Protocol):
    """Key-value medium for small credential blobs with a max-age."""

    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str, *, max_age: int, http_only: bool = True) -> None: ...

    def delete(self, key: str) -> None: ...


class MemoryTokenStore:
    """In-process store with expiry and the same per-key http-only flag as cookies."""

    def __init__(self):
        self._values: dict[str, tuple[str, float, bool]] = {}

    def get(self, key: str) -> str | None:
        entry = self._values.get(key)
        if entry is None:
            return None
        value, expires_at, _ = entry
        if expires_at <= time.time():
            del self._values[key]
            return None
        return value

    def set(self, key: str, value: str, *, max_age: int, http_only: bool = True) -> None:
        self._values[key] = (value, time.time() + max_age, http_only)

    def delete(self, key: str) -> None:
        self._values.pop(key, None)

    def is_http_only(self, key: str) -> bool:
        entry = self._values.get(key)
        return bool(entry and entry[2])


@dataclass
class _CookieWrite:
    value: str | None  # None = delete
    max_age: int = 0
    http_only: bool = True


class CookieTokenStore:
    """Store backed by request cookies; writes are applied to the outgoing response.

    Reads see pending writes, so a value set earlier in the same request is
    visible to later components.
    """

    def __init__(self, cookies: Mapping[str, str], *, secure: bool = False):
        self._cookies = dict(cookies)
        self._secure = secure
        self._pending: dict[str, _CookieWrite] = {}

    def get(self, key: str) -> str | None:
        if key in self._pending:
            return self._pending[key].value
        return self._cookies.get(key) or None

    def set(self, key: str, value: str, *, max_age: int, http_only: bool = True) -> None:
        self._pending[key] = _CookieWrite(value=value, max_age=max_age, http_only=http_only)

    def delete(self, key: str) -> None:
        self._pending[key] = _CookieWrite(value=None)

    def apply(self, response) -> None:
        """Write pending cookie changes onto a Starlette/FastAPI response."""
        for key, write in self._pending.items():
            if write.value is None:
                response.delete_cookie(key=key, path="/")
                continue
            response.set_cookie(
                key=key,
                value=write.value,
                max_age=write.max_age,
                httponly=write.http_only,
                secure=self._secure,
                samesite="lax",
                path="/",
            )
        self._pending.clear()


def save_session(store: TokenStore, session: Session) -> None:
    """Persist a freshly exchanged session."""
    store.set(ACCESS_TOKEN_KEY, session.access_token, max_age=ACCESS_TOKEN_MAX_AGE)
    if session.refresh_token:
        store.set(REFRESH_TOKEN_KEY, session.refresh_token, max_age=REFRESH_TOKEN_MAX_AGE)
    # Display only, readable by client-side script
    store.set(IDENTITY_KEY, session.identity_label, max_age=IDENTITY_MAX_AGE, http_only=False)
    logger.info("Saved session for %s", session.identity_label)


def clear_session(store: TokenStore) -> None:
    for key in SESSION_KEYS:
        store.delete(key)
