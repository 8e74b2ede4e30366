"""
Configuration loader that loads settings from environment variables.
"""

import os
from functools import lru_cache

from dotenv import load_dotenv

from .models import (
    AggregationSettings,
    AppSettings,
    FileSettings,
    HTTPSettings,
    PathSettings,
)


def _get_int(name: str, default: str) -> int:
    value = os.getenv(name, default)
    try:
        return int(value)
    except ValueError:
        raise RuntimeError(
            f"Environment variable '{name}' must be an integer, got {value!r}."
        ) from None


def _get_float(name: str, default: str) -> float:
    value = os.getenv(name, default)
    try:
        return float(value)
    except ValueError:
        raise RuntimeError(
            f"Environment variable '{name}' must be a number, got {value!r}."
        ) from None


@lru_cache(maxsize=None)
def get_settings() -> AppSettings:
    """
    Loads the application settings from environment variables.
    Uses a cache to ensure settings are loaded only once.
    """
    load_dotenv()

    # --- Aggregation Settings ---
    aggregation_settings = AggregationSettings(
        max_workers=_get_int("WORDFREQ_MAX_WORKERS", "8"),
        deadline_seconds=_get_float("WORDFREQ_DEADLINE_SECONDS", "0"),
    )

    # --- HTTP Settings ---
    http_settings = HTTPSettings(
        timeout_seconds=_get_float("WORDFREQ_HTTP_TIMEOUT", "30"),
        max_retries=_get_int("WORDFREQ_HTTP_RETRIES", "2"),
        retry_delay_seconds=_get_float("WORDFREQ_HTTP_RETRY_DELAY", "1"),
        requests_per_minute=_get_int("WORDFREQ_REQUESTS_PER_MINUTE", "120"),
        user_agent=os.getenv("WORDFREQ_USER_AGENT", "wordfreq/0.1"),
    )

    # --- File Settings ---
    file_settings = FileSettings(
        encoding=os.getenv("WORDFREQ_FILE_ENCODING", "utf-8"),
    )

    # --- Path Settings ---
    path_settings = PathSettings()

    # --- Validate Configuration ---
    from .validator import validate_configuration

    validate_configuration(aggregation_settings, http_settings, file_settings)

    # --- App Settings ---
    return AppSettings(
        aggregation=aggregation_settings,
        http=http_settings,
        files=file_settings,
        paths=path_settings,
        console_log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
    )
