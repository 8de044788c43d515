"""Notebook context: concurrent aggregation and prompt composition."""

from notebookchat.context.aggregator import AggregationResult, CollectionAggregator
from notebookchat.context.composer import ContextComposer

__all__ = ["AggregationResult", "CollectionAggregator", "ContextComposer"]
