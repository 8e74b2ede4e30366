"""
Exception taxonomy for the aggregator.

- ExtractionFailure: a single source could not be turned into text. Recovered
  per source; the rest of the run continues.
- UsageError: the caller asked for something impossible (e.g. no sources).
  Raised before any concurrent work starts.
- ProtocolViolation: an internal synchronization invariant was broken. This is
  a bug and must never be caught and ignored.
"""


class WordFreqError(Exception):
    """Base class for all wordfreq errors."""


class ExtractionFailure(WordFreqError):
    """Raised when a source cannot be turned into raw text."""

    def __init__(self, source_label: str, reason: str):
        self.source_label = source_label
        self.reason = reason
        super().__init__(f"{source_label}: {reason}")


class UsageError(WordFreqError):
    """Raised when the caller supplies an invalid request."""


class ProtocolViolation(WordFreqError):
    """Raised when the merge stream or completion barrier is misused."""
