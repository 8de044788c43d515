# Chat schemas.
# Created: 2026-10-08

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field


class ChatMessage(BaseModel):
    """A prior turn of the conversation."""

    role: Literal["user", "assistant"]
    content: str


class ChatRequest(BaseModel):
    """One chat turn, optionally grounded in selected notebooks."""

    message: str | None = Field(None, max_length=100000)
    chatHistory: list[ChatMessage] = []
    notebookIds: list[str] = []
    projectNumber: str | None = None
    location: str | None = None
    endpointLocation: str | None = None


class ChatResponse(BaseModel):
    response: str
