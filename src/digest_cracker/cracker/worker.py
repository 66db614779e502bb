"""
Search workers: the enumerate -> digest -> compare loop.
"""
from __future__ import annotations
import itertools
import logging
from typing import TYPE_CHECKING, Iterator, Protocol

from digest_cracker.config import CANCEL_CHECK_INTERVAL, LOG_PROGRESS_INTERVAL, NODE_SERVER_LOGGER
from digest_cracker.cracker.digest import DigestMatcher
from digest_cracker.formatters import FormatStrategy
from digest_cracker.models.models import SearchRange, WorkerOutcome

if TYPE_CHECKING:
    from digest_cracker.cracker.coordinator import SearchCoordinator

logger = logging.getLogger(NODE_SERVER_LOGGER)


class Assignment(Protocol):
    def chunks(self) -> Iterator[SearchRange]:
        """Ranges to search, in order; the worker stops when exhausted."""


class StaticAssignment:
    """One range fixed before the search starts."""

    def __init__(self, search_range: SearchRange) -> None:
        self.range = search_range

    def chunks(self) -> Iterator[SearchRange]:
        if self.range.size > 0:
            yield self.range

    def __str__(self) -> str:
        return f"static {self.range}"


class ChunkCursor:
    """
    Shared cursor over one range; workers claim `chunk_size` indices at a time.

    A claim is `next()` on an `itertools.count`, which is atomic in CPython,
    so claiming never takes a lock.
    """

    def __init__(self, search_range: SearchRange, chunk_size: int) -> None:
        if chunk_size < 1:
            raise ValueError(f"chunk_size must be >= 1, got {chunk_size}")
        self.range = search_range
        self.chunk_size = chunk_size
        self._counter = itertools.count(search_range.start, chunk_size)

    def claim(self) -> SearchRange | None:
        start = next(self._counter)
        if start >= self.range.end:
            return None
        return SearchRange(start=start, end=min(start + self.chunk_size, self.range.end))

    def chunks(self) -> Iterator[SearchRange]:
        while (chunk := self.claim()) is not None:
            yield chunk

    def __str__(self) -> str:
        return f"dynamic {self.range} chunk={self.chunk_size}"


class SearchWorker:
    """
    Checks every candidate its assignment hands out until a match, exhaustion
    or cancellation. Runs on whatever thread calls `run()`.
    """

    def __init__(self,
                 worker_id: int,
                 assignment: Assignment,
                 keyspace: FormatStrategy,
                 length: int,
                 matcher: DigestMatcher,
                 coordinator: SearchCoordinator,
                 poll_interval: int = CANCEL_CHECK_INTERVAL) -> None:
        if poll_interval < 1:
            raise ValueError(f"poll_interval must be >= 1, got {poll_interval}")
        self.worker_id = worker_id
        self.assignment = assignment
        self.keyspace = keyspace
        self.length = length
        self.matcher = matcher
        self.coordinator = coordinator
        self.poll_interval = poll_interval
        self.checked = 0
        self.outcome: WorkerOutcome | None = None

    def run(self) -> WorkerOutcome:
        """Search and return how the worker terminated. Never raises."""
        events = self.coordinator.events
        events.emit("worker_start", worker=self.worker_id, assignment=self.assignment)
        try:
            self.outcome = self._search()
        except Exception as e:
            logger.exception(f"Worker {self.worker_id} failed ({self.assignment})")
            events.emit("worker_fault", worker=self.worker_id, error=repr(e))
            self.outcome = WorkerOutcome.FAULT
        events.emit("worker_stop", worker=self.worker_id,
                    outcome=self.outcome.value, checked=self.checked)
        return self.outcome

    def _search(self) -> WorkerOutcome:
        coordinator = self.coordinator
        encode_into = self.keyspace.encode_into
        check = self.matcher.check
        poll = self.poll_interval
        buf = bytearray(self.length)
        checked = 0

        for chunk in self.assignment.chunks():
            since_poll = poll
            for index in range(chunk.start, chunk.end):
                if since_poll >= poll:
                    since_poll = 0
                    if coordinator.cancelled:
                        self.checked = checked
                        return WorkerOutcome.CANCELLED
                since_poll += 1

                encode_into(index, buf)
                checked += 1
                if check(buf):
                    self.checked = checked
                    return self._report(buf.decode("ascii"))

                if checked % LOG_PROGRESS_INTERVAL == 0:
                    logger.debug(f"Worker {self.worker_id} progress: checked={checked} at index {index}")

        self.checked = checked
        return WorkerOutcome.EXHAUSTED

    def _report(self, candidate: str) -> WorkerOutcome:
        if self.coordinator.cancelled and not self.coordinator.found:
            # stopped from outside; a stopped worker reports nothing
            return WorkerOutcome.CANCELLED
        if self.coordinator.report_found(candidate, self.worker_id):
            return WorkerOutcome.FOUND
        logger.debug(f"Worker {self.worker_id} matched {candidate!r} after the race was won")
        return WorkerOutcome.LOST_RACE
