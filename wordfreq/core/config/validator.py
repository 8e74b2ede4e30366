"""
Configuration validator that validates settings values.
"""

import codecs
import logging

from .models import AggregationSettings, FileSettings, HTTPSettings


def validate_configuration(
    aggregation: AggregationSettings,
    http: HTTPSettings,
    files: FileSettings,
) -> None:
    """Validate configuration values and provide helpful warnings."""

    # Validate worker pool bound
    if aggregation.max_workers < 1:
        raise ValueError(
            f"max_workers must be at least 1, got {aggregation.max_workers}"
        )
    if aggregation.max_workers > 64:
        logger = logging.getLogger(__name__)
        logger.warning(
            f"WORDFREQ_MAX_WORKERS ({aggregation.max_workers}) is unusually high. "
            f"Large pools mostly add contention when sources are local files."
        )

    if aggregation.deadline_seconds < 0:
        raise ValueError(
            f"deadline_seconds must be >= 0, got {aggregation.deadline_seconds}"
        )

    # Validate HTTP settings
    if http.timeout_seconds <= 0:
        raise ValueError(f"timeout_seconds must be > 0, got {http.timeout_seconds}")
    if http.max_retries < 0:
        raise ValueError(f"max_retries must be >= 0, got {http.max_retries}")
    if http.requests_per_minute < 1:
        raise ValueError(
            f"requests_per_minute must be at least 1, got {http.requests_per_minute}"
        )

    if (
        aggregation.deadline_seconds
        and aggregation.deadline_seconds < http.timeout_seconds
    ):
        logger = logging.getLogger(__name__)
        logger.warning(
            f"WORDFREQ_DEADLINE_SECONDS ({aggregation.deadline_seconds}) is shorter than "
            f"WORDFREQ_HTTP_TIMEOUT ({http.timeout_seconds}). Slow URLs will be reported "
            f"as timed out instead of failed."
        )

    # Validate file encoding
    try:
        codecs.lookup(files.encoding)
    except LookupError:
        raise ValueError(f"Unknown file encoding: {files.encoding!r}") from None
