# Chat router — one grounded chat turn per request.
# Created: 2026-10-08

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException

from notebookchat.api.deps import (
    build_scope,
    get_aggregator,
    get_completion_service,
    http_error,
)
from notebookchat.api.v1.schemas.chat import ChatRequest, ChatResponse
from notebookchat.config import Settings, get_settings
from notebookchat.context.aggregator import CollectionAggregator
from notebookchat.errors import CompletionFailed
from notebookchat.llm.client import ChatTurn, CompletionService
from notebookchat.orchestrator import ChatOrchestrator

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Chat"])


@router.post("/chat", response_model=ChatResponse)
async def chat(
    body: ChatRequest,
    settings: Settings = Depends(get_settings),
    aggregator: CollectionAggregator = Depends(get_aggregator),
    completion: CompletionService = Depends(get_completion_service),
):
    """Answer *message*, grounded in the sources of the selected notebooks."""
    if not body.message or not body.message.strip():
        raise HTTPException(status_code=400, detail="Message is required")

    scope = None
    if body.notebookIds and (body.projectNumber or settings.google_cloud_project_number):
        scope = build_scope(
            settings, body.projectNumber, body.location, body.endpointLocation
        )

    orchestrator = ChatOrchestrator(
        aggregator, completion, history_limit=settings.history_limit
    )
    history = [ChatTurn(role=m.role, content=m.content) for m in body.chatHistory]

    try:
        text = await orchestrator.respond(body.message, history, body.notebookIds, scope)
    except CompletionFailed as e:
        raise http_error(e)
    return ChatResponse(response=text)
