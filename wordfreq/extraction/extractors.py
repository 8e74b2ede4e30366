"""
Text extractors.

Each extractor turns one source descriptor into raw text. Failures of any
kind (network, filesystem, decoding) surface as ExtractionFailure so that the
aggregator can treat them uniformly.
"""

from abc import ABC, abstractmethod
from typing import Optional

import requests
import structlog
from bs4 import BeautifulSoup
from pyrate_limiter import (
    BucketFullException,
    Duration,
    Limiter,
    LimiterDelayException,
    Rate,
)

from wordfreq.core.config import AppSettings, FileSettings, HTTPSettings
from wordfreq.core.errors import ExtractionFailure
from wordfreq.core.simple_error_handler import retry_on_failure
from wordfreq.extraction.sources import (
    LiteralSource,
    LocalSource,
    RemoteSource,
    SourceDescriptor,
)

logger = structlog.get_logger(__name__)

# Transient HTTP errors worth another attempt. Status errors are not retried.
RETRYABLE_HTTP_EXCEPTIONS = (
    requests.ConnectionError,
    requests.Timeout,
)

# Raised by the shared limiter when a request would wait longer than allowed.
RATE_LIMIT_EXCEPTIONS = (BucketFullException, LimiterDelayException)

# Tags whose contents are never visible text.
NON_TEXT_TAGS = ("script", "style", "noscript", "template")


class TextExtractor(ABC):
    """Interface for turning a source into raw text."""

    source: SourceDescriptor

    @abstractmethod
    def extract(self) -> str:
        """Return the raw text of the source or raise ExtractionFailure."""
        pass


class LiteralTextExtractor(TextExtractor):
    """Returns text supplied inline."""

    def __init__(self, source: LiteralSource):
        self.source = source

    def extract(self) -> str:
        return self.source.text


class FileTextExtractor(TextExtractor):
    """Reads text from a local file."""

    def __init__(self, source: LocalSource, files: Optional[FileSettings] = None):
        self.source = source
        self.files = files or FileSettings()

    def extract(self) -> str:
        try:
            with open(self.source.path, "r", encoding=self.files.encoding) as f:
                return f.read()
        except (OSError, UnicodeDecodeError) as e:
            raise ExtractionFailure(self.source.label, str(e)) from e


def html_to_text(html: str) -> str:
    """Returns only the text between tags, one space between text nodes."""
    soup = BeautifulSoup(html, "html.parser")
    for tag in soup(NON_TEXT_TAGS):
        tag.decompose()
    return soup.get_text(" ")


class URLTextExtractor(TextExtractor):
    """
    Fetches a web page and returns the text between its tags.

    Args:
        source: The remote source to fetch.
        session: The HTTP session used for the request.
        http: Timeout, retry and user agent settings.
        limiter: Optional rate limiter shared by every URL extractor of a run.
    """

    def __init__(
        self,
        source: RemoteSource,
        session: requests.Session,
        http: Optional[HTTPSettings] = None,
        limiter: Optional[Limiter] = None,
    ):
        self.source = source
        self.session = session
        self.http = http or HTTPSettings()
        self.limiter = limiter

    def extract(self) -> str:
        fetch = retry_on_failure(
            max_retries=self.http.max_retries,
            delay=self.http.retry_delay_seconds,
            retryable_exceptions=RETRYABLE_HTTP_EXCEPTIONS,
        )(self._fetch)
        try:
            html = fetch()
        except requests.RequestException as e:
            raise ExtractionFailure(self.source.label, str(e)) from e
        except RATE_LIMIT_EXCEPTIONS as e:
            raise ExtractionFailure(
                self.source.label, "rate limit exceeded, request not sent"
            ) from e
        return html_to_text(html)

    def _fetch(self) -> str:
        if self.limiter is not None:
            self.limiter.try_acquire("http")
        logger.debug(f"Fetching {self.source.url}")
        response = self.session.get(
            self.source.url,
            timeout=self.http.timeout_seconds,
            headers={"User-Agent": self.http.user_agent},
        )
        response.raise_for_status()
        return response.text


def create_extractor(
    source: SourceDescriptor,
    settings: AppSettings,
    session: Optional[requests.Session] = None,
    limiter: Optional[Limiter] = None,
) -> TextExtractor:
    """
    Maps a source descriptor to its extractor.

    URL sources without a session get one of their own; without a limiter
    they are not rate limited.
    """
    if isinstance(source, LiteralSource):
        return LiteralTextExtractor(source)
    if isinstance(source, RemoteSource):
        return URLTextExtractor(
            source, session or requests.Session(), settings.http, limiter
        )
    if isinstance(source, LocalSource):
        return FileTextExtractor(source, settings.files)
    raise TypeError(f"Unsupported source descriptor: {source!r}")


class ExtractorFactory:
    """
    Creates extractors for source descriptors.

    URL extractors created by one factory share a single HTTP session and a
    single rate limiter. Call close() once the extractors are no longer used.
    """

    def __init__(
        self,
        settings: AppSettings,
        session: Optional[requests.Session] = None,
        limiter: Optional[Limiter] = None,
    ):
        self.settings = settings
        self.session = session or requests.Session()
        self.limiter = limiter or Limiter(
            Rate(settings.http.requests_per_minute, Duration.MINUTE),
            max_delay=Duration.MINUTE.value * 2,
        )

    def create(self, source: SourceDescriptor) -> TextExtractor:
        return create_extractor(source, self.settings, self.session, self.limiter)

    def close(self) -> None:
        self.session.close()
