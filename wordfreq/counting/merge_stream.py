"""
Synchronization primitives shared by the aggregator and its workers.

MergeStream is the many-producers/one-consumer channel that carries
(word, count) pairs. CompletionBarrier counts finished workers; once it has
seen every expected signal it is safe to close the stream, because no worker
writes after signaling.
"""

import queue
import threading
from typing import Generic, Iterator, List, Optional, TypeVar

from wordfreq.core.errors import ProtocolViolation
from wordfreq.counting.counter import WordCountPair

T = TypeVar("T")

# Marks the end of the stream inside the queue.
_CLOSED = object()


class MergeStream:
    """
    Unbounded FIFO of WordCountPair with an explicit close.

    put() never blocks. Writing after close() raises ProtocolViolation.
    """

    def __init__(self):
        self._queue: "queue.Queue" = queue.Queue()
        self._lock = threading.Lock()
        self._closed = False
        self._exhausted = False

    @property
    def closed(self) -> bool:
        return self._closed

    def put(self, pair: WordCountPair) -> None:
        with self._lock:
            if self._closed:
                raise ProtocolViolation(f"write to closed merge stream: {pair!r}")
            self._queue.put(pair)

    def close(self) -> None:
        with self._lock:
            if self._closed:
                raise ProtocolViolation("merge stream closed twice")
            self._closed = True
            self._queue.put(_CLOSED)

    def get(self, timeout: Optional[float] = None) -> Optional[WordCountPair]:
        """
        Returns the next pair, or None once the stream is closed and drained.

        Raises:
            queue.Empty: if timeout elapses before anything arrives.
        """
        if self._exhausted:
            return None
        item = self._queue.get(timeout=timeout)
        if item is _CLOSED:
            self._exhausted = True
            return None
        return item

    def __iter__(self) -> Iterator[WordCountPair]:
        while True:
            pair = self.get()
            if pair is None:
                return
            yield pair


class CompletionBarrier(Generic[T]):
    """
    Collects exactly `expected` completion signals.

    Each signal carries the worker's outcome. A signal beyond `expected`
    raises ProtocolViolation.
    """

    def __init__(self, expected: int):
        if expected < 0:
            raise ValueError(f"expected must be >= 0, got {expected}")
        self.expected = expected
        self._outcomes: List[T] = []
        self._condition = threading.Condition()

    @property
    def completed(self) -> int:
        with self._condition:
            return len(self._outcomes)

    @property
    def outcomes(self) -> List[T]:
        """Outcomes received so far, in arrival order."""
        with self._condition:
            return list(self._outcomes)

    def signal(self, outcome: T) -> None:
        with self._condition:
            if len(self._outcomes) >= self.expected:
                raise ProtocolViolation(
                    f"completion signaled {len(self._outcomes) + 1} times, "
                    f"expected {self.expected}"
                )
            self._outcomes.append(outcome)
            if len(self._outcomes) == self.expected:
                self._condition.notify_all()

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Blocks until every expected signal arrived. False on timeout."""
        with self._condition:
            return self._condition.wait_for(
                lambda: len(self._outcomes) >= self.expected, timeout
            )


def close_when_complete(
    barrier: CompletionBarrier,
    stream: MergeStream,
    timeout: Optional[float] = None,
) -> bool:
    """
    Closes the stream once the barrier is complete.

    Intended to run on its own thread. Returns False, leaving the stream
    open, if the barrier did not complete within timeout.
    """
    if not barrier.wait(timeout):
        return False
    stream.close()
    return True
