import threading
import time
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

import structlog

logger = structlog.get_logger(__name__)


@dataclass
class Metrics:
    """Simple metrics collection for tracking aggregation performance.

    Workers record from their own threads, so every mutation takes the lock.
    """

    # Processing counts
    sources_processed: int = 0
    sources_failed: int = 0
    tokens_counted: int = 0
    pairs_merged: int = 0

    # Timing
    start_time: float = field(default_factory=time.time)

    # Errors
    error_counts: Dict[str, int] = field(default_factory=lambda: defaultdict(int))

    _lock: threading.Lock = field(
        default_factory=threading.Lock, repr=False, compare=False
    )

    def record_source(self, tokens: int = 0):
        """Record a source that was counted successfully."""
        with self._lock:
            self.sources_processed += 1
            self.tokens_counted += tokens

    def record_failure(self, error_type: str):
        """Record a source that could not be counted."""
        with self._lock:
            self.sources_failed += 1
            self.error_counts[error_type] += 1

    def record_pairs(self, count: int = 1):
        """Record merged (word, count) pairs."""
        with self._lock:
            self.pairs_merged += count

    def get_processing_rate(self, interval: Optional[float] = None) -> Dict[str, float]:
        """Get processing rates per second."""
        if interval is None:
            interval = time.time() - self.start_time

        return {
            "sources_per_second": self.sources_processed / interval
            if interval > 0
            else 0,
            "tokens_per_second": self.tokens_counted / interval if interval > 0 else 0,
        }

    def report(self) -> Dict[str, Any]:
        """Generate a metrics report."""
        with self._lock:
            return {
                "timestamp": time.time(),
                "elapsed_seconds": time.time() - self.start_time,
                "sources_processed": self.sources_processed,
                "sources_failed": self.sources_failed,
                "tokens_counted": self.tokens_counted,
                "pairs_merged": self.pairs_merged,
                "processing_rates": self.get_processing_rate(),
                "error_counts": dict(self.error_counts),
            }

    def log_summary(self):
        """Log a summary of metrics."""
        report = self.report()
        rates = report["processing_rates"]

        logger.info(
            f"Metrics Summary: "
            f"Sources: {report['sources_processed']} ok / {report['sources_failed']} failed, "
            f"Tokens: {report['tokens_counted']}, "
            f"Pairs merged: {report['pairs_merged']}, "
            f"Rate: {rates['tokens_per_second']:.1f} tokens/sec"
        )

        # Log errors if any
        for error_type, count in report["error_counts"].items():
            logger.warning(f"Error '{error_type}': {count} occurrences")
