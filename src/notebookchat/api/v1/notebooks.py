# Notebooks router — list, create, read and delete notebooks; manage sources.
# Created: 2026-10-09
#
# Every route needs a project number: from the request, else the configured
# GOOGLE_CLOUD_PROJECT_NUMBER. Upstream failures surface as their own status.

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile

from notebookchat.api.deps import build_scope, get_notebook_client, http_error
from notebookchat.api.v1.schemas.common import ErrorResponse, SuccessResponse
from notebookchat.api.v1.schemas.notebooks import (
    AddSourceRequest,
    CreateNotebookRequest,
    NotebookListResponse,
    NotebookResponse,
    SourceListResponse,
    SourceResponse,
)
from notebookchat.config import Settings, get_settings
from notebookchat.errors import NoCredentialsAvailable, UpstreamUnavailable
from notebookchat.integrations.notebooklm import NotebookLMClient, guess_content_type

logger = logging.getLogger(__name__)

router = APIRouter(
    tags=["Notebooks"],
    responses={
        400: {"model": ErrorResponse},
        401: {"model": ErrorResponse},
        502: {"model": ErrorResponse},
    },
)


def _upstream_error(e: UpstreamUnavailable | NoCredentialsAvailable) -> HTTPException:
    if isinstance(e, UpstreamUnavailable) and e.status and 400 <= e.status < 500:
        return http_error(e, status_code=e.status)
    return http_error(e)


@router.get("/notebooks", response_model=NotebookListResponse)
async def list_notebooks(
    projectNumber: str | None = None,
    location: str | None = None,
    endpointLocation: str | None = None,
    settings: Settings = Depends(get_settings),
    client: NotebookLMClient = Depends(get_notebook_client),
):
    """Recently viewed notebooks."""
    scope = build_scope(settings, projectNumber, location, endpointLocation)
    try:
        notebooks = await client.list_notebooks(scope)
    except (UpstreamUnavailable, NoCredentialsAvailable) as e:
        raise _upstream_error(e)
    return NotebookListResponse(notebooks=[n.to_dict() for n in notebooks])


@router.post("/notebooks", response_model=NotebookResponse)
async def create_notebook(
    body: CreateNotebookRequest,
    settings: Settings = Depends(get_settings),
    client: NotebookLMClient = Depends(get_notebook_client),
):
    scope = build_scope(settings, body.projectNumber, body.location, body.endpointLocation)
    title = (body.title or "").strip()
    if not title:
        raise HTTPException(status_code=400, detail="title is required")

    try:
        notebook = await client.create_notebook(scope, title)
    except (UpstreamUnavailable, NoCredentialsAvailable) as e:
        raise _upstream_error(e)
    return NotebookResponse(notebook=notebook.to_dict())


@router.get("/notebooks/{notebook_id}", response_model=NotebookResponse)
async def get_notebook(
    notebook_id: str,
    projectNumber: str | None = None,
    location: str | None = None,
    endpointLocation: str | None = None,
    settings: Settings = Depends(get_settings),
    client: NotebookLMClient = Depends(get_notebook_client),
):
    scope = build_scope(settings, projectNumber, location, endpointLocation)
    try:
        notebook = await client.get_notebook(scope, notebook_id)
    except (UpstreamUnavailable, NoCredentialsAvailable) as e:
        raise _upstream_error(e)
    return NotebookResponse(notebook=notebook.to_dict())


@router.delete("/notebooks/{notebook_id}", response_model=SuccessResponse)
async def delete_notebook(
    notebook_id: str,
    projectNumber: str | None = None,
    location: str | None = None,
    endpointLocation: str | None = None,
    notebookName: str | None = None,
    settings: Settings = Depends(get_settings),
    client: NotebookLMClient = Depends(get_notebook_client),
):
    """Delete a notebook by its full resource name.

    The name comes from ``notebookName`` when given, else from the fetched
    record; if that fetch fails the client constructs it from the scope.
    """
    scope = build_scope(settings, projectNumber, location, endpointLocation)
    name = notebookName
    if not name:
        try:
            name = (await client.get_notebook(scope, notebook_id)).name or None
        except UpstreamUnavailable as e:
            logger.warning("Could not fetch notebook name, will construct it: %s", e)

    try:
        await client.delete_notebook(scope, notebook_id, name)
    except (UpstreamUnavailable, NoCredentialsAvailable) as e:
        raise _upstream_error(e)
    return SuccessResponse()


@router.get("/notebooks/{notebook_id}/sources", response_model=SourceListResponse)
async def list_sources(
    notebook_id: str,
    projectNumber: str | None = None,
    location: str | None = None,
    endpointLocation: str | None = None,
    settings: Settings = Depends(get_settings),
    client: NotebookLMClient = Depends(get_notebook_client),
):
    scope = build_scope(settings, projectNumber, location, endpointLocation)
    try:
        sources = await client.notebook_sources(scope, notebook_id)
    except (UpstreamUnavailable, NoCredentialsAvailable) as e:
        raise _upstream_error(e)
    logger.info("Notebook %s has %d source(s)", notebook_id, len(sources))
    return SourceListResponse(sources=[s.to_dict() for s in sources])


@router.get("/notebooks/{notebook_id}/sources/{source_id}", response_model=SourceResponse)
async def get_source(
    notebook_id: str,
    source_id: str,
    projectNumber: str | None = None,
    location: str | None = None,
    endpointLocation: str | None = None,
    settings: Settings = Depends(get_settings),
    client: NotebookLMClient = Depends(get_notebook_client),
):
    scope = build_scope(settings, projectNumber, location, endpointLocation)
    try:
        source = await client.get_source(scope, notebook_id, source_id)
    except (UpstreamUnavailable, NoCredentialsAvailable) as e:
        raise _upstream_error(e)
    return SourceResponse(source=source.to_dict())


@router.post("/notebooks/{notebook_id}/sources", response_model=SourceListResponse)
async def add_source(
    notebook_id: str,
    body: AddSourceRequest,
    settings: Settings = Depends(get_settings),
    client: NotebookLMClient = Depends(get_notebook_client),
):
    """Add a video link or a Google Drive document as a source."""
    scope = build_scope(settings, body.projectNumber, body.location, body.endpointLocation)
    if not body.videoUrl and body.googleDriveContent is None:
        raise HTTPException(
            status_code=400, detail="Either videoUrl or googleDriveContent is required"
        )

    drive = body.googleDriveContent.model_dump() if body.googleDriveContent else None
    try:
        sources = await client.add_sources(
            scope, notebook_id, video_url=body.videoUrl, drive_content=drive
        )
    except (UpstreamUnavailable, NoCredentialsAvailable) as e:
        raise _upstream_error(e)
    return SourceListResponse(sources=[s.to_dict() for s in sources])


@router.post("/notebooks/{notebook_id}/sources/upload", response_model=SourceResponse)
async def upload_source(
    notebook_id: str,
    file: UploadFile | None = File(None),
    projectNumber: str | None = Form(None),
    location: str | None = Form(None),
    endpointLocation: str | None = Form(None),
    settings: Settings = Depends(get_settings),
    client: NotebookLMClient = Depends(get_notebook_client),
):
    """Upload a local file (multipart ``file`` field) as a new source."""
    scope = build_scope(settings, projectNumber, location, endpointLocation)
    if file is None or not file.filename:
        raise HTTPException(status_code=400, detail="File is required")

    data = await file.read()
    content_type = guess_content_type(file.filename, file.content_type)
    try:
        source = await client.upload_file(scope, notebook_id, file.filename, data, content_type)
    except (UpstreamUnavailable, NoCredentialsAvailable) as e:
        raise _upstream_error(e)
    return SourceResponse(source=source.to_dict())
