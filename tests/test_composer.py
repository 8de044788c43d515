# Tests for context/composer.py
# Created: 2026-10-12

from notebookchat.context.aggregator import AggregationResult
from notebookchat.context.composer import NO_SOURCES, ContextComposer
from notebookchat.integrations.notebooklm import Notebook, Source


def _result(nid, title, sources=()):
    return AggregationResult(notebook=Notebook(notebook_id=nid, title=title), sources=list(sources))


def test_no_results_compose_nothing():
    assert ContextComposer().compose([]) == ""


def test_enhance_passes_message_through_without_context():
    assert ContextComposer().enhance("hello?", []) == "hello?"


def test_enhance_appends_user_question():
    composer = ContextComposer()
    results = [_result("n1", "Research", [Source("s1", "Paper")])]
    prompt = composer.enhance("What is in my notebook?", results)
    assert prompt == composer.compose(results) + "\n\nUser question: What is in my notebook?"


def test_notebook_without_sources_says_so():
    context = ContextComposer().compose([_result("n1", "Empty")])
    assert '=== Notebook 1: "Empty" ===' in context
    assert "Notebook ID: n1" in context
    assert NO_SOURCES in context
    assert "=== SUMMARY" not in context


def test_word_and_token_counts_rendered():
    sources = [Source("s1", "Paper", word_count=120, token_count=300)]
    context = ContextComposer().compose([_result("n1", "Research", sources)])
    assert '1. "Paper" (120 words) (300 tokens)' in context
    assert '1. "Paper" (from notebook: "Research") - 120 words' in context


def test_zero_word_count_is_still_rendered():
    context = ContextComposer().compose([_result("n1", "R", [Source("s1", "Blank", word_count=0)])])
    assert '"Blank" (0 words)' in context


def test_missing_counts_omitted():
    context = ContextComposer().compose([_result("n1", "R", [Source("s1", "Plain")])])
    assert '1. "Plain"\n' in context
    assert '1. "Plain" (from notebook: "R")\n' in context


def test_untitled_source():
    context = ContextComposer().compose([_result("n1", "R", [Source("s1", "")])])
    assert '"Untitled Source"' in context


def test_source_count_pluralization():
    one = ContextComposer().compose([_result("n1", "R", [Source("s1", "A")])])
    two = ContextComposer().compose([_result("n1", "R", [Source("s1", "A"), Source("s2", "B")])])
    assert "This notebook contains 1 source:" in one
    assert "This notebook contains 2 sources:" in two


def test_summary_numbers_across_notebooks_in_order():
    results = [
        _result("n1", "First", [Source("s1", "A"), Source("s2", "B")]),
        _result("n2", "Second", [Source("s3", "C")]),
    ]
    context = ContextComposer().compose(results)

    assert context.index('=== Notebook 1: "First" ===') < context.index('=== Notebook 2: "Second" ===')
    summary = context[context.index("=== SUMMARY") :]
    assert '1. "A" (from notebook: "First")' in summary
    assert '2. "B" (from notebook: "First")' in summary
    assert '3. "C" (from notebook: "Second")' in summary


def test_header_counts_notebooks():
    context = ContextComposer().compose([_result("n1", "A"), _result("n2", "B")])
    assert "has selected 2 NotebookLM notebooks" in context
    assert "CRITICAL INSTRUCTIONS:" in context


def test_output_is_deterministic():
    results = [_result("n1", "R", [Source("s1", "A", word_count=5)])]
    composer = ContextComposer()
    assert composer.compose(results) == composer.compose(results)
