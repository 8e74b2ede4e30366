"""
Source descriptors.

A source is one of three immutable variants: literal text, a remote URL or a
local file path. Descriptors are created from caller input and never mutated.
"""

import re
from dataclasses import dataclass
from typing import ClassVar, List, Optional, Union

WHITESPACE_RE = re.compile(r"\s+")


@dataclass(frozen=True)
class LiteralSource:
    """Text supplied inline by the caller."""

    text: str
    kind: ClassVar[str] = "literal"

    @property
    def label(self) -> str:
        preview = self.text if len(self.text) <= 30 else self.text[:27] + "..."
        return f"literal:{preview!r}"


@dataclass(frozen=True)
class RemoteSource:
    """A document fetched over HTTP."""

    url: str
    kind: ClassVar[str] = "url"

    @property
    def label(self) -> str:
        return self.url


@dataclass(frozen=True)
class LocalSource:
    """A document read from the local filesystem."""

    path: str
    kind: ClassVar[str] = "file"

    @property
    def label(self) -> str:
        return self.path


SourceDescriptor = Union[LiteralSource, RemoteSource, LocalSource]


def split_targets(value: Optional[str]) -> List[str]:
    """Splits a whitespace-separated list of URLs or paths, dropping blanks."""
    if not value:
        return []
    return [token for token in WHITESPACE_RE.split(value) if token]


def build_sources(
    text: Optional[str] = None,
    urls: Optional[str] = None,
    paths: Optional[str] = None,
) -> List[SourceDescriptor]:
    """
    Builds the ordered source list from raw caller input.

    Args:
        text: A literal string; empty or None means no literal source
        urls: Whitespace-separated URLs
        paths: Whitespace-separated file paths

    Returns:
        Literal source first, then URLs, then files, each in the given order
    """
    sources: List[SourceDescriptor] = []
    if text:
        sources.append(LiteralSource(text))
    sources.extend(RemoteSource(url) for url in split_targets(urls))
    sources.extend(LocalSource(path) for path in split_targets(paths))
    return sources
