# Shared FastAPI dependencies for the API layer.
# Created: 2026-10-08
#
# Every component is built per request from the cached Settings, so tests can
# swap any of them through app.dependency_overrides.

from __future__ import annotations

from fastapi import Depends, HTTPException, Request

from notebookchat.config import Settings, get_settings
from notebookchat.context.aggregator import CollectionAggregator
from notebookchat.errors import NotebookChatError
from notebookchat.integrations.credentials import CredentialBroker, Credentials
from notebookchat.integrations.notebooklm import NotebookLMClient, NotebookScope
from notebookchat.integrations.oauth import AuthorizationFlow
from notebookchat.integrations.token_store import CookieTokenStore
from notebookchat.llm.client import CompletionService, resolve_llm_client


def get_token_store(request: Request, settings: Settings = Depends(get_settings)) -> CookieTokenStore:
    return CookieTokenStore(request.cookies, secure=settings.is_production)


def get_credentials(store: CookieTokenStore = Depends(get_token_store)) -> Credentials:
    return Credentials.from_store(store)


def get_auth_flow(settings: Settings = Depends(get_settings)) -> AuthorizationFlow:
    return AuthorizationFlow(settings, timeout=settings.upstream_timeout)


def get_credential_broker(settings: Settings = Depends(get_settings)) -> CredentialBroker:
    return CredentialBroker(settings)


def get_notebook_client(
    settings: Settings = Depends(get_settings),
    broker: CredentialBroker = Depends(get_credential_broker),
    credentials: Credentials = Depends(get_credentials),
) -> NotebookLMClient:
    return NotebookLMClient(broker, credentials, timeout=settings.upstream_timeout)


def get_aggregator(client: NotebookLMClient = Depends(get_notebook_client)) -> CollectionAggregator:
    return CollectionAggregator(client)


def get_completion_service(settings: Settings = Depends(get_settings)) -> CompletionService:
    return resolve_llm_client(settings)


def request_origin(request: Request) -> str:
    """Scheme and host the browser used, e.g. ``http://localhost:3000``."""
    return f"{request.url.scheme}://{request.url.netloc}"


def build_scope(
    settings: Settings,
    project_number: str | None,
    location: str | None = None,
    endpoint_location: str | None = None,
) -> NotebookScope:
    """Notebook scope from request values; 400 when no project number is known."""
    project = project_number or settings.google_cloud_project_number
    if not project:
        raise HTTPException(status_code=400, detail="projectNumber is required")
    return NotebookScope(
        project_number=project,
        location=location or settings.notebook_location,
        endpoint_location=endpoint_location or settings.notebook_endpoint_location,
    )


def http_error(exc: NotebookChatError, status_code: int | None = None) -> HTTPException:
    """Translate a core error into an HTTPException carrying its message."""
    return HTTPException(status_code=status_code or exc.status_code, detail=exc.message)
