# Collection Aggregator — concurrent notebook + sources fetch with partial failure.
# Created: 2026-10-06
#
# One fetch-set per notebook id, joined with asyncio.gather. A failing id
# degrades to a placeholder result; it never cancels or fails its siblings.

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field

from notebookchat.integrations.notebooklm import (
    Notebook,
    NotebookLMClient,
    NotebookScope,
    Source,
)

logger = logging.getLogger(__name__)


@dataclass
class AggregationResult:
    """One notebook and whatever sources could be gathered for it."""

    notebook: Notebook
    sources: list[Source] = field(default_factory=list)
    error: str | None = None

    @property
    def degraded(self) -> bool:
        return self.error is not None


class CollectionAggregator:
    """Fetch notebooks and their sources for a batch of ids."""

    def __init__(self, client: NotebookLMClient):
        self.client = client

    async def aggregate(
        self,
        notebook_ids: list[str],
        scope: NotebookScope,
        *,
        deadline: float | None = None,
    ) -> list[AggregationResult]:
        """Results follow the order of *notebook_ids*, not completion order.

        *deadline* (seconds) bounds each notebook's fetch-set individually.
        """
        results = await asyncio.gather(
            *(self._guarded_fetch(nid, scope, deadline) for nid in notebook_ids)
        )

        for index, result in enumerate(results, 1):
            logger.info(
                "Notebook %d: %r, %d source(s)%s",
                index,
                result.notebook.title,
                len(result.sources),
                f" [degraded: {result.error}]" if result.degraded else "",
            )
        return list(results)

    async def _guarded_fetch(
        self, notebook_id: str, scope: NotebookScope, deadline: float | None
    ) -> AggregationResult:
        try:
            if deadline is None:
                return await self.fetch(notebook_id, scope)
            return await asyncio.wait_for(self.fetch(notebook_id, scope), timeout=deadline)
        except TimeoutError:
            logger.warning("Notebook %s timed out after %.1fs", notebook_id, deadline)
            return AggregationResult(
                notebook=Notebook.placeholder(notebook_id, scope), error="timed out"
            )
        except Exception as e:
            logger.error("Unexpected failure aggregating notebook %s: %s", notebook_id, e)
            return AggregationResult(notebook=Notebook.placeholder(notebook_id, scope), error=str(e))

    async def fetch(self, notebook_id: str, scope: NotebookScope) -> AggregationResult:
        """Notebook record first, then sources: embedded if present, else listed."""
        try:
            notebook = await self.client.get_notebook(scope, notebook_id)
        except Exception as e:
            logger.error("Failed to get notebook %s: %s", notebook_id, e)
            return await self._recover(notebook_id, scope, e)

        if notebook.sources:
            return AggregationResult(notebook=notebook, sources=notebook.sources)

        sources = await self._list_sources_quietly(notebook_id, scope)
        return AggregationResult(notebook=notebook, sources=sources or [])

    async def _recover(
        self, notebook_id: str, scope: NotebookScope, cause: Exception
    ) -> AggregationResult:
        # The record is gone or unreadable; sources may still be listable.
        sources = await self._list_sources_quietly(notebook_id, scope)
        return AggregationResult(
            notebook=Notebook.placeholder(notebook_id, scope),
            sources=sources or [],
            error=str(cause),
        )

    async def _list_sources_quietly(
        self, notebook_id: str, scope: NotebookScope
    ) -> list[Source] | None:
        try:
            return await self.client.list_sources(scope, notebook_id)
        except Exception as e:
            logger.warning("Failed to load sources for notebook %s: %s", notebook_id, e)
            return None
