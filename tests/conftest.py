import os
from unittest.mock import MagicMock

import pytest

from wordfreq.core.config import (
    AggregationSettings,
    AppSettings,
    FileSettings,
    HTTPSettings,
    PathSettings,
    get_settings,
)
from wordfreq.core.errors import ExtractionFailure
from wordfreq.extraction.extractors import LiteralTextExtractor, TextExtractor
from wordfreq.extraction.sources import LiteralSource, RemoteSource

WORDFREQ_ENV_VARS = [
    "WORDFREQ_MAX_WORKERS",
    "WORDFREQ_DEADLINE_SECONDS",
    "WORDFREQ_HTTP_TIMEOUT",
    "WORDFREQ_HTTP_RETRIES",
    "WORDFREQ_HTTP_RETRY_DELAY",
    "WORDFREQ_REQUESTS_PER_MINUTE",
    "WORDFREQ_USER_AGENT",
    "WORDFREQ_FILE_ENCODING",
    "LOG_LEVEL",
]


@pytest.fixture(scope="function", autouse=True)
def set_test_environment(monkeypatch, tmp_path):
    """
    Sets up a consistent environment for every test.
    Settings overrides from the developer's shell or .env never leak in.
    """
    for name in WORDFREQ_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("LOG_DIR", str(tmp_path / "logs"))
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture(scope="function")
def app_settings(tmp_path):
    """Create application settings with fast retries and a temp log dir."""
    paths = PathSettings()
    paths.log_dir = str(tmp_path / "logs")
    paths.log_file = os.path.join(paths.log_dir, "wordfreq.log")
    return AppSettings(
        aggregation=AggregationSettings(max_workers=4, deadline_seconds=0),
        http=HTTPSettings(
            timeout_seconds=5, max_retries=1, retry_delay_seconds=0
        ),
        files=FileSettings(),
        paths=paths,
    )


class FailingExtractor(TextExtractor):
    """Extractor that always fails, like an unreachable URL."""

    def __init__(self, url: str = "http://unreachable.invalid/"):
        self.source = RemoteSource(url)

    def extract(self) -> str:
        raise ExtractionFailure(self.source.label, "connection refused")


@pytest.fixture(scope="function")
def failing_extractor():
    return FailingExtractor()


@pytest.fixture(scope="function")
def make_literals():
    """Factory for literal extractors from plain strings."""

    def _make(*texts):
        return [LiteralTextExtractor(LiteralSource(text)) for text in texts]

    return _make


@pytest.fixture(scope="function")
def mock_session():
    """Create a mock requests session returning a small HTML page."""
    session = MagicMock()
    response = MagicMock()
    response.text = "<html><body><p>hello world</p></body></html>"
    response.raise_for_status.return_value = None
    session.get.return_value = response
    return session
