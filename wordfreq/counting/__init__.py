"""Per-source counting and concurrent aggregation of word counts."""

from wordfreq.counting.aggregator import (
    AggregationResult,
    SourceOutcome,
    WordCountAggregator,
    aggregate_sources,
    get_aggregate_word_count,
)
from wordfreq.counting.counter import WordCountPair, count_source, count_words

__all__ = [
    "AggregationResult",
    "SourceOutcome",
    "WordCountAggregator",
    "WordCountPair",
    "aggregate_sources",
    "count_source",
    "count_words",
    "get_aggregate_word_count",
]
