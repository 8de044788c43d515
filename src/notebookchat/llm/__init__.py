"""Completion package for notebookchat."""

from notebookchat.llm.client import (
    SYSTEM_INSTRUCTION,
    ChatTurn,
    CompletionService,
    LLMClient,
    resolve_llm_client,
)

__all__ = ["SYSTEM_INSTRUCTION", "ChatTurn", "CompletionService", "LLMClient", "resolve_llm_client"]
