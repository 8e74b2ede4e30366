"""
Per-source word counting.
"""

from collections import Counter
from typing import Dict, Iterable, Iterator, NamedTuple

from wordfreq.core.text_utils import normalize
from wordfreq.extraction.extractors import TextExtractor


class WordCountPair(NamedTuple):
    """A single (word, count) contribution emitted by one source."""

    word: str
    count: int


def count_words(tokens: Iterable[str]) -> Dict[str, int]:
    """
    Counts occurrences of each token.

    Matching is exact and case-sensitive. The token sequence is consumed once.
    """
    return dict(Counter(tokens))


def count_source(extractor: TextExtractor) -> Dict[str, int]:
    """Extracts, normalizes and counts one source. ExtractionFailure propagates."""
    return count_words(normalize(extractor.extract()))


def iter_word_counts(table: Dict[str, int]) -> Iterator[WordCountPair]:
    """Yields one pair per distinct word of a per-source table."""
    for word, count in table.items():
        yield WordCountPair(word, count)
