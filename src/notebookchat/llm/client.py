"""Completion service abstraction.

Resolves which provider answers chat turns and wraps its SDK behind a single
``complete(system_instruction, history, prompt) -> str`` call.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Literal, Protocol

from notebookchat.config import Settings
from notebookchat.errors import CompletionFailed, ConfigMissing

logger = logging.getLogger(__name__)

SYSTEM_INSTRUCTION = (
    "You are a helpful AI assistant working with NotebookLM notebooks. When users ask about "
    "sources in their notebooks, you MUST provide helpful responses based on the source "
    "information provided to you in the conversation. Always use the source information that "
    "is explicitly provided in the user's messages. Never say you cannot access sources or that "
    "you don't have access to them. Always work with the information you are given and provide "
    "detailed, informative responses about the sources based on their titles and metadata. If "
    "source information is provided in the current message, that takes priority over any "
    "previous conversation context."
)


@dataclass(frozen=True)
class ChatTurn:
    role: Literal["user", "assistant"]
    content: str


class CompletionService(Protocol):
    async def complete(
        self, system_instruction: str, history: list[ChatTurn], prompt: str
    ) -> str: ...


@dataclass(frozen=True)
class LLMClient:
    """Immutable descriptor for a resolved completion provider.

    Created via ``resolve_llm_client()``. Implements ``CompletionService``.
    """

    provider: str  # "gemini" | "anthropic"
    model: str
    api_key: str | None
    timeout: float = 60.0

    @property
    def is_gemini(self) -> bool:
        return self.provider == "gemini"

    async def complete(
        self, system_instruction: str, history: list[ChatTurn], prompt: str
    ) -> str:
        if not self.api_key:
            env = "GEMINI_API_KEY" if self.is_gemini else "ANTHROPIC_API_KEY"
            raise ConfigMissing(f"{env} is not set")

        try:
            if self.is_gemini:
                return await self._complete_gemini(system_instruction, history, prompt)
            return await self._complete_anthropic(system_instruction, history, prompt)
        except Exception as e:
            logger.error("Error calling %s API: %s", self.provider, e)
            raise CompletionFailed(f"Failed to generate response from {self.provider}") from e

    async def _complete_gemini(
        self, system_instruction: str, history: list[ChatTurn], prompt: str
    ) -> str:
        import google.generativeai as genai

        genai.configure(api_key=self.api_key)
        model = genai.GenerativeModel(self.model, system_instruction=system_instruction)
        chat = model.start_chat(
            history=[
                {"role": "user" if turn.role == "user" else "model", "parts": [turn.content]}
                for turn in history
            ]
        )
        result = await chat.send_message_async(prompt, request_options={"timeout": self.timeout})
        return result.text

    async def _complete_anthropic(
        self, system_instruction: str, history: list[ChatTurn], prompt: str
    ) -> str:
        from anthropic import AsyncAnthropic

        client = AsyncAnthropic(api_key=self.api_key, timeout=self.timeout, max_retries=2)
        messages = [{"role": turn.role, "content": turn.content} for turn in history]
        messages.append({"role": "user", "content": prompt})
        response = await client.messages.create(
            model=self.model,
            max_tokens=4096,
            system=system_instruction,
            messages=messages,
        )
        return "".join(block.text for block in response.content if block.type == "text")


def resolve_llm_client(
    settings: Settings,
    *,
    force_provider: str | None = None,
) -> LLMClient:
    """Resolve settings into an ``LLMClient``.

    Auto-resolution order (when ``llm_provider == "auto"``):
        gemini (if key set) -> anthropic (if key set) -> gemini (fails on first call).
    """
    provider = force_provider or settings.llm_provider

    if provider == "auto":
        if settings.gemini_api_key:
            provider = "gemini"
        elif settings.anthropic_api_key:
            provider = "anthropic"
        else:
            provider = "gemini"

    if provider == "anthropic":
        return LLMClient(
            provider="anthropic",
            model=settings.anthropic_model,
            api_key=settings.anthropic_api_key,
        )

    return LLMClient(
        provider="gemini",
        model=settings.gemini_model,
        api_key=settings.gemini_api_key,
    )
