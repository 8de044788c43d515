# NotebookLM Client — HTTP client for the regional notebook API.
# Created: 2026-10-05
#
# Endpoints live under https://{endpoint}-discoveryengine.googleapis.com/v1alpha.
# The service partitions data by region and rejects a "global" location on a
# regional endpoint, so locations are normalized before every call.

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Any

import httpx

from notebookchat.errors import UpstreamUnavailable
from notebookchat.integrations.credentials import CredentialBroker, Credentials

logger = logging.getLogger(__name__)

_API_HOST = "https://{endpoint}-discoveryengine.googleapis.com"
_REGIONAL_ENDPOINTS = ("us", "eu")

PLACEHOLDER_EMOJI = "\U0001f4d3"

# Status codes meaning "this endpoint does not exist for this notebook"
_LISTING_UNSUPPORTED = (404, 405)

_CONTENT_TYPES: dict[str, str] = {
    "pdf": "application/pdf",
    "txt": "text/plain",
    "md": "text/markdown",
    "docx": "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    "pptx": "application/vnd.openxmlformats-officedocument.presentationml.presentation",
    "xlsx": "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    "3g2": "audio/3gpp2",
    "3gp": "audio/3gpp",
    "aac": "audio/aac",
    "aif": "audio/aiff",
    "aifc": "audio/aiff",
    "aiff": "audio/aiff",
    "amr": "audio/amr",
    "au": "audio/basic",
    "avi": "video/x-msvideo",
    "cda": "application/x-cdf",
    "m4a": "audio/m4a",
    "mid": "audio/midi",
    "midi": "audio/midi",
    "mp3": "audio/mpeg",
    "mp4": "video/mp4",
    "mpeg": "audio/mpeg",
    "ogg": "audio/ogg",
    "opus": "audio/ogg",
    "ra": "audio/vnd.rn-realaudio",
    "ram": "audio/vnd.rn-realaudio",
    "snd": "audio/basic",
    "wav": "audio/wav",
    "weba": "audio/webm",
    "wma": "audio/x-ms-wma",
    "png": "image/png",
    "jpg": "image/jpg",
    "jpeg": "image/jpeg",
}


def resolve_location(location: str, endpoint_location: str) -> str:
    """Effective location for *endpoint_location*: ``global`` maps to the region."""
    if location == "global" and endpoint_location in _REGIONAL_ENDPOINTS:
        return endpoint_location
    return location


def guess_content_type(filename: str, declared: str | None = None) -> str:
    """Content type for an upload: the declared type unless it is missing or generic."""
    if declared and declared != "application/octet-stream":
        return declared
    ext = filename.lower().rsplit(".", 1)[-1] if "." in filename else ""
    return _CONTENT_TYPES.get(ext, "application/octet-stream")


def _as_int(value: Any) -> int | None:
    # int64 fields arrive as JSON strings
    try:
        return int(value) if value is not None else None
    except (TypeError, ValueError):
        return None


@dataclass(frozen=True)
class NotebookScope:
    """Where notebooks live: project plus location/endpoint pair."""

    project_number: str
    location: str = "global"
    endpoint_location: str = "us"

    @property
    def effective_location(self) -> str:
        return resolve_location(self.location, self.endpoint_location)

    @property
    def parent(self) -> str:
        return f"projects/{self.project_number}/locations/{self.effective_location}"

    @property
    def base_url(self) -> str:
        host = _API_HOST.format(endpoint=self.endpoint_location)
        return f"{host}/v1alpha/{self.parent}/notebooks"

    @property
    def upload_base_url(self) -> str:
        host = _API_HOST.format(endpoint=self.endpoint_location)
        return f"{host}/upload/v1alpha/{self.parent}/notebooks"

    def notebook_name(self, notebook_id: str) -> str:
        return f"{self.parent}/notebooks/{notebook_id}"


@dataclass
class Source:
    """A document inside a notebook."""

    source_id: str
    title: str
    name: str = ""
    word_count: int | None = None
    token_count: int | None = None
    status: str | None = None

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> Source:
        raw_id = data.get("sourceId")
        if isinstance(raw_id, dict):
            source_id = raw_id.get("id", "")
        else:
            source_id = raw_id or data.get("id", "")
        name = data.get("name", "")
        if not source_id and name:
            source_id = name.rsplit("/", 1)[-1]

        metadata = data.get("metadata") or {}
        settings = data.get("settings") or {}
        return cls(
            source_id=source_id,
            title=data.get("title", ""),
            name=name,
            word_count=_as_int(metadata.get("wordCount")),
            token_count=_as_int(metadata.get("tokenCount")),
            status=settings.get("status"),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "sourceId": self.source_id,
            "title": self.title,
            "name": self.name,
            "wordCount": self.word_count,
            "tokenCount": self.token_count,
            "status": self.status,
        }


@dataclass
class Notebook:
    """A notebook record as returned by the service."""

    notebook_id: str
    title: str
    emoji: str = ""
    name: str = ""
    user_role: str = ""
    is_shared: bool = False
    is_shareable: bool = False
    last_viewed: str | None = None
    create_time: str | None = None
    # None = the response carried no sources field at all
    sources: list[Source] | None = field(default=None, repr=False)

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> Notebook:
        metadata = data.get("metadata") or {}
        name = data.get("name", "")
        raw_sources = data.get("sources")
        return cls(
            notebook_id=data.get("notebookId") or name.rsplit("/", 1)[-1],
            title=data.get("title", ""),
            emoji=data.get("emoji", ""),
            name=name,
            user_role=metadata.get("userRole", ""),
            is_shared=bool(metadata.get("isShared", False)),
            is_shareable=bool(metadata.get("isShareable", False)),
            last_viewed=metadata.get("lastViewed"),
            create_time=metadata.get("createTime"),
            sources=[Source.from_api(s) for s in raw_sources if isinstance(s, dict)]
            if isinstance(raw_sources, list)
            else None,
        )

    @classmethod
    def placeholder(cls, notebook_id: str, scope: NotebookScope) -> Notebook:
        """Stand-in for a notebook whose record could not be fetched."""
        return cls(
            notebook_id=notebook_id,
            title=f"Notebook {notebook_id}",
            emoji=PLACEHOLDER_EMOJI,
            name=scope.notebook_name(notebook_id),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "notebookId": self.notebook_id,
            "title": self.title,
            "emoji": self.emoji,
            "name": self.name,
            "metadata": {
                "userRole": self.user_role,
                "isShared": self.is_shared,
                "isShareable": self.is_shareable,
                "lastViewed": self.last_viewed,
                "createTime": self.create_time,
            },
        }


def _extract_sources(data: Any) -> list[dict[str, Any]]:
    """Listing responses come as {"sources": [...]}, a bare list, or {"source": [...]}."""
    if isinstance(data, list):
        return [s for s in data if isinstance(s, dict)]
    if isinstance(data, dict):
        for key in ("sources", "source"):
            value = data.get(key)
            if isinstance(value, list):
                return [s for s in value if isinstance(s, dict)]
        if data:
            logger.warning("Unexpected response format for sources: %s", list(data))
    return []


def _error_message(resp: httpx.Response) -> str:
    try:
        body = resp.json()
    except ValueError:
        return resp.reason_phrase or f"HTTP {resp.status_code}"
    if isinstance(body, dict):
        error = body.get("error")
        if isinstance(error, dict) and error.get("message"):
            return error["message"]
        if body.get("message"):
            return body["message"]
    return resp.reason_phrase or f"HTTP {resp.status_code}"


class NotebookLMClient:
    """HTTP client for notebooks and their sources.

    Bearer tokens come from the CredentialBroker, using the request-scoped
    ``credentials`` when present.
    """

    def __init__(
        self,
        broker: CredentialBroker,
        credentials: Credentials | None = None,
        *,
        timeout: float = 15,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.broker = broker
        self.credentials = credentials
        self.timeout = timeout
        self._transport = transport

    async def _request(
        self,
        method: str,
        url: str,
        *,
        action: str,
        allow_status: tuple[int, ...] = (),
        content_type: str = "application/json",
        headers: dict[str, str] | None = None,
        **kwargs: Any,
    ) -> httpx.Response:
        token = await self.broker.resolve_access_token(self.credentials)
        request_headers = {"Authorization": f"Bearer {token}", "Content-Type": content_type}
        request_headers.update(headers or {})

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                resp = await client.request(method, url, headers=request_headers, **kwargs)
        except httpx.HTTPError as e:
            logger.error("Failed to %s: %s", action, e)
            raise UpstreamUnavailable(f"Failed to {action}: {e}") from e

        logger.debug("%s %s -> %d", method, url, resp.status_code)
        if resp.is_success or resp.status_code in allow_status:
            return resp

        logger.error("Failed to %s (%d): %s", action, resp.status_code, resp.text)
        raise UpstreamUnavailable(
            f"Failed to {action}: {_error_message(resp)}", status=resp.status_code
        )

    async def list_notebooks(self, scope: NotebookScope) -> list[Notebook]:
        resp = await self._request(
            "GET", f"{scope.base_url}:listRecentlyViewed", action="list notebooks"
        )
        data = resp.json()
        return [Notebook.from_api(n) for n in data.get("notebooks", [])]

    async def get_notebook(self, scope: NotebookScope, notebook_id: str) -> Notebook:
        resp = await self._request(
            "GET", f"{scope.base_url}/{notebook_id}", action="get notebook"
        )
        return Notebook.from_api(resp.json())

    async def create_notebook(self, scope: NotebookScope, title: str) -> Notebook:
        resp = await self._request(
            "POST", scope.base_url, action="create notebook", json={"title": title}
        )
        notebook = Notebook.from_api(resp.json())
        logger.info("Created notebook %s (%s)", notebook.notebook_id, title)
        return notebook

    async def delete_notebook(
        self, scope: NotebookScope, notebook_id: str, name: str | None = None
    ) -> None:
        """Delete via batchDelete; *name* is the full resource name when known."""
        full_name = name or scope.notebook_name(notebook_id)
        await self._request(
            "POST",
            f"{scope.base_url}:batchDelete",
            action="delete notebook",
            json={"names": [full_name]},
        )
        logger.info("Deleted notebook %s", full_name)

    async def list_sources(self, scope: NotebookScope, notebook_id: str) -> list[Source]:
        """List sources via the dedicated endpoint.

        404/405 mean the endpoint is not available and yield an empty list.
        """
        resp = await self._request(
            "GET",
            f"{scope.base_url}/{notebook_id}/sources",
            action="list sources",
            allow_status=_LISTING_UNSUPPORTED,
        )
        if resp.status_code in _LISTING_UNSUPPORTED:
            logger.warning(
                "Sources list endpoint returned %d for notebook %s", resp.status_code, notebook_id
            )
            return []
        try:
            data = resp.json()
        except ValueError:
            logger.warning("Sources list for %s is not JSON", notebook_id)
            return []
        return [Source.from_api(s) for s in _extract_sources(data)]

    async def notebook_sources(self, scope: NotebookScope, notebook_id: str) -> list[Source]:
        """Sources embedded in the notebook record, else the listing endpoint."""
        try:
            notebook = await self.get_notebook(scope, notebook_id)
        except UpstreamUnavailable as e:
            logger.warning("Could not get notebook %s to check for sources: %s", notebook_id, e)
        else:
            if notebook.sources:
                return notebook.sources
        return await self.list_sources(scope, notebook_id)

    async def get_source(self, scope: NotebookScope, notebook_id: str, source_id: str) -> Source:
        resp = await self._request(
            "GET",
            f"{scope.base_url}/{notebook_id}/sources/{source_id}",
            action="get source",
        )
        return Source.from_api(resp.json())

    async def add_sources(
        self,
        scope: NotebookScope,
        notebook_id: str,
        *,
        video_url: str | None = None,
        drive_content: dict[str, str] | None = None,
    ) -> list[Source]:
        """Add a Google Drive document or a video link as a source."""
        if drive_content:
            user_content = {
                "googleDriveContent": {
                    "documentId": drive_content["documentId"],
                    "mimeType": drive_content["mimeType"],
                    "sourceName": drive_content["sourceName"],
                }
            }
        elif video_url:
            # videoContent is rejected for YouTube links; webContent works
            user_content = {
                "webContent": {
                    "url": video_url,
                    "sourceName": f"YouTube Video - {date.today().isoformat()}",
                }
            }
        else:
            raise ValueError("Either video_url or drive_content must be provided")

        resp = await self._request(
            "POST",
            f"{scope.base_url}/{notebook_id}/sources:batchCreate",
            action="add source",
            json={"userContents": [user_content]},
        )
        return [Source.from_api(s) for s in _extract_sources(resp.json())]

    async def upload_file(
        self,
        scope: NotebookScope,
        notebook_id: str,
        file_name: str,
        data: bytes,
        content_type: str,
    ) -> Source:
        """Upload raw file bytes as a new source."""
        resp = await self._request(
            "POST",
            f"{scope.upload_base_url}/{notebook_id}/sources:uploadFile",
            action="upload file",
            content_type=content_type,
            headers={
                "X-Goog-Upload-File-Name": file_name,
                "X-Goog-Upload-Protocol": "raw",
            },
            content=data,
        )
        logger.info("Uploaded %s (%d bytes) to notebook %s", file_name, len(data), notebook_id)
        return Source.from_api(resp.json())
