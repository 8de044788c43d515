# Auth schemas.
# Created: 2026-10-08

from __future__ import annotations

from notebookchat.api.v1.schemas.common import APIResponse


class AuthStatusResponse(APIResponse):
    """Whether this browser holds an access token, and for whom."""

    authenticated: bool
    identityLabel: str | None = None
