"""
Shared text utilities.

Turns raw text into the word tokens that the counters consume.
"""

import re
from typing import Iterator

# A maximal run of letters, digits or underscores.
WORD_RE = re.compile(r"\w+")


def normalize(raw_text: str) -> Iterator[str]:
    """
    Lazily yields the word tokens of raw_text.

    Every character that is not a letter, digit or underscore acts as a
    separator and runs of separators collapse, so empty tokens never appear.
    Calling again with the same input yields the same tokens.

    Args:
        raw_text: The text to tokenize

    Returns:
        Iterator over the tokens, in order of appearance
    """
    for match in WORD_RE.finditer(raw_text):
        yield match.group(0)

