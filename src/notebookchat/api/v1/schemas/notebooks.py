# Notebook and source schemas.
# Created: 2026-10-08
#
# Field names follow the notebook service's camelCase JSON.

from __future__ import annotations

from typing import Any

from pydantic import BaseModel


class NotebookListResponse(BaseModel):
    notebooks: list[dict[str, Any]] = []


class NotebookResponse(BaseModel):
    notebook: dict[str, Any]


class CreateNotebookRequest(BaseModel):
    title: str | None = None
    projectNumber: str | None = None
    location: str | None = None
    endpointLocation: str | None = None


class DriveContent(BaseModel):
    """A Google Drive document to add as a source."""

    documentId: str
    mimeType: str
    sourceName: str


class AddSourceRequest(BaseModel):
    """Exactly one of ``videoUrl`` or ``googleDriveContent`` is expected."""

    videoUrl: str | None = None
    googleDriveContent: DriveContent | None = None
    projectNumber: str | None = None
    location: str | None = None
    endpointLocation: str | None = None


class SourceListResponse(BaseModel):
    sources: list[dict[str, Any]] = []


class SourceResponse(BaseModel):
    source: dict[str, Any]
