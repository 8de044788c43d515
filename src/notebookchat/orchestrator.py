# Chat Orchestrator — one chat turn: aggregate, compose, complete.
# Created: 2026-10-07

from __future__ import annotations

import logging
from collections.abc import Sequence

from notebookchat.context.aggregator import AggregationResult, CollectionAggregator
from notebookchat.context.composer import ContextComposer
from notebookchat.errors import CompletionFailed
from notebookchat.integrations.notebooklm import NotebookScope
from notebookchat.llm.client import SYSTEM_INSTRUCTION, ChatTurn, CompletionService

logger = logging.getLogger(__name__)

DEFAULT_HISTORY_LIMIT = 10


def truncate_history(history: Sequence[ChatTurn], limit: int = DEFAULT_HISTORY_LIMIT) -> list[ChatTurn]:
    """Most recent *limit* turns in chronological order; older turns are dropped."""
    if limit <= 0:
        return []
    return list(history[-limit:])


class ChatOrchestrator:
    """Coordinates aggregation, context composition and completion for a turn."""

    def __init__(
        self,
        aggregator: CollectionAggregator,
        completion: CompletionService,
        composer: ContextComposer | None = None,
        *,
        history_limit: int = DEFAULT_HISTORY_LIMIT,
        system_instruction: str = SYSTEM_INSTRUCTION,
    ):
        self.aggregator = aggregator
        self.completion = completion
        self.composer = composer or ContextComposer()
        self.history_limit = history_limit
        self.system_instruction = system_instruction

    async def respond(
        self,
        message: str,
        history: Sequence[ChatTurn],
        notebook_ids: Sequence[str],
        scope: NotebookScope | None,
        *,
        deadline: float | None = None,
    ) -> str:
        results: list[AggregationResult] = []
        if notebook_ids and scope is not None:
            try:
                results = await self.aggregator.aggregate(
                    list(notebook_ids), scope, deadline=deadline
                )
            except Exception:
                logger.exception("Error fetching notebook contexts; continuing without context")

        prompt = self.composer.enhance(message, results)
        recent = truncate_history(history, self.history_limit)
        logger.info(
            "Chat turn: %d notebook(s), context %d chars, %d history turn(s)",
            len(results),
            len(prompt) - len(message),
            len(recent),
        )
        logger.debug("Full prompt: %s", prompt)

        try:
            return await self.completion.complete(self.system_instruction, recent, prompt)
        except Exception as e:
            logger.error("Completion service error: %s", e)
            raise CompletionFailed() from e
