"""
Concurrent word-count aggregation.

Fans every source out to a bounded thread pool, funnels the per-source
(word, count) pairs through a single MergeStream, and sums them on the
calling thread. The stream is closed by a tracker thread only after all
workers have signaled the CompletionBarrier, so the drain loop cannot miss a
pair and no worker ever writes to a closed stream.

A source that fails to extract contributes nothing; its failure is logged and
reported in the result while the remaining sources are still merged.
"""

import queue
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence

import structlog

from wordfreq.core.config import AggregationSettings, AppSettings
from wordfreq.core.errors import ExtractionFailure, ProtocolViolation, UsageError
from wordfreq.core.metrics import Metrics
from wordfreq.counting.counter import count_source, iter_word_counts
from wordfreq.counting.merge_stream import (
    CompletionBarrier,
    MergeStream,
    close_when_complete,
)
from wordfreq.extraction.extractors import ExtractorFactory, TextExtractor
from wordfreq.extraction.sources import SourceDescriptor

logger = structlog.get_logger(__name__)

WORKER_THREAD_PREFIX = "wordfreq-worker"


@dataclass
class SourceOutcome:
    """What happened to one source during a run."""

    position: int
    source: SourceDescriptor
    ok: bool = False
    distinct_words: int = 0
    tokens: int = 0
    error: Optional[str] = None
    timed_out: bool = False


@dataclass
class AggregationResult:
    """Aggregate counts plus a per-source account of the run."""

    counts: Dict[str, int]
    outcomes: List[SourceOutcome] = field(default_factory=list)
    timed_out: bool = False
    elapsed_seconds: float = 0.0

    @property
    def failures(self) -> List[SourceOutcome]:
        return [outcome for outcome in self.outcomes if not outcome.ok]

    @property
    def complete(self) -> bool:
        return not self.timed_out and not self.failures


class WordCountAggregator:
    """
    Runs one counting task per extractor and merges the results.

    Args:
        max_workers: Upper bound on concurrently running tasks.
        deadline_seconds: Overall deadline for a run; None or 0 disables it.
        metrics: Optional metrics collector shared with the caller.
    """

    def __init__(
        self,
        max_workers: int = 8,
        deadline_seconds: Optional[float] = None,
        metrics: Optional[Metrics] = None,
    ):
        if max_workers < 1:
            raise ValueError(f"max_workers must be at least 1, got {max_workers}")
        self.max_workers = max_workers
        self.deadline_seconds = deadline_seconds or None
        self.metrics = metrics or Metrics()

    @classmethod
    def from_settings(
        cls, settings: AggregationSettings, metrics: Optional[Metrics] = None
    ) -> "WordCountAggregator":
        return cls(
            max_workers=settings.max_workers,
            deadline_seconds=settings.deadline_seconds,
            metrics=metrics,
        )

    def aggregate(self, extractors: Sequence[TextExtractor]) -> AggregationResult:
        """
        Counts every source concurrently and returns the merged table.

        Raises:
            UsageError: if no extractors are given. Nothing is started.
            ProtocolViolation: if the stream/barrier protocol is broken.
        """
        extractors = list(extractors)
        if not extractors:
            raise UsageError("At least one source is required.")

        total = len(extractors)
        workers = min(self.max_workers, total)
        stream = MergeStream()
        barrier: CompletionBarrier[SourceOutcome] = CompletionBarrier(total)
        cancelled = threading.Event()
        counts: Dict[str, int] = {}
        started = time.monotonic()
        finished = False

        logger.info(f"Aggregating {total} sources with {workers} workers")

        executor = ThreadPoolExecutor(
            max_workers=workers, thread_name_prefix=WORKER_THREAD_PREFIX
        )
        try:
            futures = [
                executor.submit(
                    self._count_into_stream,
                    position,
                    extractor,
                    stream,
                    barrier,
                    cancelled,
                )
                for position, extractor in enumerate(extractors)
            ]
            tracker = threading.Thread(
                target=close_when_complete,
                args=(barrier, stream, self.deadline_seconds),
                name="wordfreq-completion-tracker",
                daemon=True,
            )
            tracker.start()

            merged = self._drain(stream, counts, started)
            finished = merged is not None
        finally:
            if finished:
                executor.shutdown(wait=True)
            else:
                cancelled.set()
                executor.shutdown(wait=False, cancel_futures=True)

        if finished:
            # Surfaces a ProtocolViolation raised inside a worker.
            for future in futures:
                future.result()
            self.metrics.record_pairs(merged)
        else:
            logger.warning(
                f"Deadline of {self.deadline_seconds}s exceeded; "
                f"{barrier.completed}/{total} sources completed"
            )

        result = AggregationResult(
            counts=counts,
            outcomes=self._collect_outcomes(extractors, barrier),
            timed_out=not finished,
            elapsed_seconds=time.monotonic() - started,
        )
        logger.info(
            f"Aggregated {len(counts)} distinct words from "
            f"{total - len(result.failures)}/{total} sources "
            f"in {result.elapsed_seconds:.2f}s"
        )
        return result

    def _drain(
        self, stream: MergeStream, counts: Dict[str, int], started: float
    ) -> Optional[int]:
        """
        Adds every pair from the stream into counts.

        Returns the number of pairs merged, or None if the deadline expired
        before the stream was closed.
        """
        merged = 0
        while True:
            timeout = None
            if self.deadline_seconds is not None:
                timeout = self.deadline_seconds - (time.monotonic() - started)
                if timeout <= 0:
                    return None
            try:
                pair = stream.get(timeout=timeout)
            except queue.Empty:
                return None
            if pair is None:
                return merged
            counts[pair.word] = counts.get(pair.word, 0) + pair.count
            merged += 1

    def _count_into_stream(
        self,
        position: int,
        extractor: TextExtractor,
        stream: MergeStream,
        barrier: CompletionBarrier,
        cancelled: threading.Event,
    ) -> None:
        """Worker body. Always signals the barrier exactly once."""
        outcome = SourceOutcome(position=position, source=extractor.source)
        label = extractor.source.label
        try:
            table = count_source(extractor)
            if cancelled.is_set():
                outcome.timed_out = True
                outcome.error = "cancelled after deadline"
                return
            for pair in iter_word_counts(table):
                stream.put(pair)
            outcome.ok = True
            outcome.distinct_words = len(table)
            outcome.tokens = sum(table.values())
            self.metrics.record_source(outcome.tokens)
            logger.debug(f"Counted {outcome.distinct_words} distinct words in {label}")
        except ExtractionFailure as e:
            outcome.error = e.reason
            self.metrics.record_failure(type(e).__name__)
            logger.warning(f"Skipping source {label}: {e.reason}")
        except ProtocolViolation:
            raise
        except Exception as e:
            # Extractors are opaque; anything they raise only voids this source.
            outcome.error = f"{type(e).__name__}: {e}"
            self.metrics.record_failure(type(e).__name__)
            logger.error(f"Unexpected error counting {label}: {e}", exc_info=True)
        finally:
            barrier.signal(outcome)

    @staticmethod
    def _collect_outcomes(
        extractors: List[TextExtractor], barrier: CompletionBarrier
    ) -> List[SourceOutcome]:
        by_position = {outcome.position: outcome for outcome in barrier.outcomes}
        outcomes = []
        for position, extractor in enumerate(extractors):
            outcome = by_position.get(position)
            if outcome is None:
                outcome = SourceOutcome(
                    position=position,
                    source=extractor.source,
                    error="deadline exceeded before completion",
                    timed_out=True,
                )
            outcomes.append(outcome)
        return outcomes


def aggregate_sources(
    sources: Sequence[SourceDescriptor],
    settings: AppSettings,
    factory: Optional[ExtractorFactory] = None,
    metrics: Optional[Metrics] = None,
) -> AggregationResult:
    """
    Builds extractors for the given descriptors and aggregates them.

    Raises:
        UsageError: if sources is empty. No extractor or thread is created.
    """
    if not sources:
        raise UsageError("At least one source is required.")

    factory = factory or ExtractorFactory(settings)
    try:
        extractors = [factory.create(source) for source in sources]
        aggregator = WordCountAggregator.from_settings(settings.aggregation, metrics)
        return aggregator.aggregate(extractors)
    finally:
        factory.close()


def get_aggregate_word_count(
    extractors: Sequence[TextExtractor],
    max_workers: int = 8,
    deadline_seconds: Optional[float] = None,
) -> Dict[str, int]:
    """Returns only the merged word counts for ready-made extractors."""
    aggregator = WordCountAggregator(max_workers, deadline_seconds)
    return aggregator.aggregate(extractors).counts


def stalled_workers() -> List[threading.Thread]:
    """Worker threads still running, typically abandoned after a deadline."""
    return [
        thread
        for thread in threading.enumerate()
        if thread.name.startswith(WORKER_THREAD_PREFIX) and thread.is_alive()
    ]
