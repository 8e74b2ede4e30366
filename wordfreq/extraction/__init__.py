"""Source descriptors and the extractors that turn them into raw text."""

from wordfreq.extraction.extractors import (
    ExtractorFactory,
    FileTextExtractor,
    LiteralTextExtractor,
    TextExtractor,
    URLTextExtractor,
    create_extractor,
)
from wordfreq.extraction.sources import (
    LiteralSource,
    LocalSource,
    RemoteSource,
    SourceDescriptor,
    build_sources,
)

__all__ = [
    "ExtractorFactory",
    "FileTextExtractor",
    "LiteralSource",
    "LiteralTextExtractor",
    "LocalSource",
    "RemoteSource",
    "SourceDescriptor",
    "TextExtractor",
    "URLTextExtractor",
    "build_sources",
    "create_extractor",
]
