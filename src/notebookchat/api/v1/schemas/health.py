# Health schemas.
# Created: 2026-10-08

from __future__ import annotations

from pydantic import BaseModel


class HealthSummary(BaseModel):
    """Configuration readiness, without secrets."""

    status: str = "ok"
    version: str = ""
    oauthConfigured: bool = False
    llmProvider: str = ""
    llmConfigured: bool = False
    projectConfigured: bool = False
