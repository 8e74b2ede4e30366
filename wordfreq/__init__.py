"""Concurrent multi-source word-frequency aggregator."""

__version__ = "0.1.0"
