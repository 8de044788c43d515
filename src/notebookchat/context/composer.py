"""Context Composer — turns aggregated notebooks into the prompt preamble.

Output is deterministic for a given input: notebooks in request order, sources
in service order, followed by a summary that lists every source once more with
its notebook title so "list all my sources" needs no re-derivation.
"""

from __future__ import annotations

from notebookchat.context.aggregator import AggregationResult
from notebookchat.integrations.notebooklm import Source

SOURCE_MARKER = "**"
HEADING_MARKER = "###"
UNTITLED_SOURCE = "Untitled Source"
NO_SOURCES = "No sources have been added to this notebook yet."


def _plural(count: int, word: str) -> str:
    return f"{count} {word}" if count == 1 else f"{count} {word}s"


def _source_title(source: Source) -> str:
    return source.title or UNTITLED_SOURCE


class ContextComposer:
    """Build the grounding text block for a chat turn."""

    def compose(self, results: list[AggregationResult]) -> str:
        if not results:
            return ""

        parts = [self._header(len(results))]
        for index, result in enumerate(results, 1):
            parts.append(self._notebook_section(index, result))
        summary = self._summary(results)
        if summary:
            parts.append(summary)
        parts.append(self._footer())
        return "".join(parts)

    def enhance(self, message: str, results: list[AggregationResult]) -> str:
        """Prepend the composed context to *message*; pass it through if there is none."""
        context = self.compose(results)
        if not context:
            return message
        return f"{context}\n\nUser question: {message}"

    def _header(self, count: int) -> str:
        notebooks = "notebook" if count == 1 else "notebooks"
        lines = [
            f"You are an AI assistant helping a user who has selected {count} NotebookLM "
            f"{notebooks} with the following sources. You have access to information about "
            "these sources and MUST provide helpful responses based on this information.",
            "",
            "CRITICAL INSTRUCTIONS:",
            "- You MUST always work with the source information provided below",
            "- NEVER say you cannot access the sources or that you don't have access to them",
            "- Use the source titles to understand what topics they cover",
            "- Provide detailed, helpful responses based on the source titles and your "
            "knowledge of those topics",
            "- When asked about sources, list them, describe what they likely contain based "
            "on their titles, and provide relevant information",
            "- Be confident and helpful - act as if you have access to this information",
            f"- FORMATTING: Whenever you mention a source name, surround it with double "
            f"asterisks like this: {SOURCE_MARKER}source name{SOURCE_MARKER}. This helps "
            "highlight source references in the response.",
            f'- TITLE FORMATTING: For section titles and headers (like "From your notebook..." '
            f"or any major section headers), use markdown header syntax with {HEADING_MARKER} "
            f'followed by the title text. For example: {HEADING_MARKER} From your notebook '
            '"Notebook Name":. This helps format titles to be larger and bolder in the response.',
            "",
            "",
        ]
        return "\n".join(lines)

    def _notebook_section(self, index: int, result: AggregationResult) -> str:
        notebook = result.notebook
        lines = [
            f'=== Notebook {index}: "{notebook.title}" ===',
            f"Notebook ID: {notebook.notebook_id}",
        ]
        if not result.sources:
            lines += [NO_SOURCES, "", ""]
            return "\n".join(lines)

        lines += [f"This notebook contains {_plural(len(result.sources), 'source')}:", ""]
        for number, source in enumerate(result.sources, 1):
            line = f'{number}. "{_source_title(source)}"'
            if source.word_count is not None:
                line += f" ({source.word_count} words)"
            if source.token_count is not None:
                line += f" ({source.token_count} tokens)"
            lines.append(line)
        lines += ["", ""]
        return "\n".join(lines)

    def _summary(self, results: list[AggregationResult]) -> str:
        entries = [
            (result.notebook.title, source) for result in results for source in result.sources
        ]
        if not entries:
            return ""

        lines = ["", "=== SUMMARY: All Sources Across All Notebooks ==="]
        for number, (notebook_title, source) in enumerate(entries, 1):
            line = f'{number}. "{_source_title(source)}" (from notebook: "{notebook_title}")'
            if source.word_count is not None:
                line += f" - {source.word_count} words"
            lines.append(line)
        lines += ["", ""]
        return "\n".join(lines)

    def _footer(self) -> str:
        lines = [
            "",
            "When the user asks about their sources:",
            "- List all sources from all notebooks",
            "- Describe what each source likely contains based on its title",
            "- Provide relevant information, insights, or summaries based on the source topics",
            "- Reference specific source names when discussing them - ALWAYS wrap source names "
            f"in {SOURCE_MARKER}double asterisks{SOURCE_MARKER} like "
            f"{SOURCE_MARKER}source name{SOURCE_MARKER}",
            f'- For section titles and headers (like "From your notebook..." headers), use '
            f"{HEADING_MARKER} followed by the title text",
            "- Be helpful and informative - never refuse to help or say you don't have access",
            f"- Remember: Every time you mention a source title, format it as "
            f"{SOURCE_MARKER}source title{SOURCE_MARKER}. For section headers, use "
            f"{HEADING_MARKER} Header Text",
            "",
            "",
        ]
        return "\n".join(lines)
