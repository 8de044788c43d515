# Health router — configuration readiness summary.
# Created: 2026-10-09

from __future__ import annotations

from fastapi import APIRouter, Depends

from notebookchat import __version__
from notebookchat.api.v1.schemas.health import HealthSummary
from notebookchat.config import Settings, get_settings
from notebookchat.llm.client import resolve_llm_client

router = APIRouter(tags=["Health"])


@router.get("/health", response_model=HealthSummary)
async def get_health_status(settings: Settings = Depends(get_settings)):
    """Report which integrations are configured. Never echoes secrets."""
    llm = resolve_llm_client(settings)
    return HealthSummary(
        version=__version__,
        oauthConfigured=settings.oauth_configured,
        llmProvider=llm.provider,
        llmConfigured=bool(llm.api_key),
        projectConfigured=bool(settings.google_cloud_project_number),
    )
