"""
Per-node search coordinator: owns the workers and the first-match-wins state.
"""
from __future__ import annotations
import logging
import threading
import time
from concurrent.futures import ThreadPoolExecutor, wait
from typing import Optional

from digest_cracker.config import CANCEL_CHECK_INTERVAL, DEFAULT_CHUNK_SIZE, NODE_SERVER_LOGGER
from digest_cracker.cracker.digest import DigestMatcher
from digest_cracker.cracker.worker import Assignment, ChunkCursor, SearchWorker, StaticAssignment
from digest_cracker.events import EventSink
from digest_cracker.formatters import get_formatter
from digest_cracker.models.models import SearchConfig, SearchRange, SearchResult, WorkPolicy, WorkerOutcome
from digest_cracker.utils.partition import node_range, split_range

logger = logging.getLogger(NODE_SERVER_LOGGER)


class SearchCoordinator:
    """
    Runs one search on one node.

    The found flag, the winning candidate and the winning worker form a single
    unit: they are written under `_lock` and the flag is set last, so a reader
    that sees `found` also sees the winner.
    """

    def __init__(self,
                 node_id: str,
                 policy: WorkPolicy = WorkPolicy.STATIC,
                 chunk_size: int = DEFAULT_CHUNK_SIZE,
                 poll_interval: int = CANCEL_CHECK_INTERVAL,
                 events: EventSink | None = None) -> None:
        self.node_id = node_id
        self.policy = WorkPolicy(policy)
        self.chunk_size = chunk_size
        self.poll_interval = poll_interval
        self.events = events or EventSink()

        self._lock = threading.Lock()
        self._cancel = threading.Event()
        self._found = False
        self._candidate: Optional[str] = None
        self._worker_id: Optional[int] = None
        self._active_workers = 0
        self.outcomes: dict[int, WorkerOutcome] = {}

    # -- session state -------------------------------------------------------

    @property
    def found(self) -> bool:
        return self._found

    @property
    def cancelled(self) -> bool:
        return self._cancel.is_set()

    @property
    def active_workers(self) -> int:
        return self._active_workers

    def winner(self) -> tuple[str, int] | None:
        """(candidate, worker_id) of the winning report, if any."""
        with self._lock:
            if not self._found:
                return None
            return self._candidate, self._worker_id

    def report_found(self, candidate: str, worker_id: int) -> bool:
        """Record a match. Only the first report of a session wins."""
        with self._lock:
            if self._found:
                return False
            self._candidate = candidate
            self._worker_id = worker_id
            self._found = True
        self.events.emit("password_found", node=self.node_id,
                         worker=worker_id, candidate=candidate)
        self.stop_all()
        return True

    def stop_all(self) -> None:
        """Ask every worker to stop; returns without waiting for them."""
        if not self._cancel.is_set():
            logger.info(f"[{self.node_id}] Stopping all workers")
        self._cancel.set()

    def reset(self) -> None:
        """Clear the session state. Only valid while no worker is running."""
        with self._lock:
            if self._active_workers:
                raise RuntimeError(
                    f"cannot reset while {self._active_workers} workers are running")
            self._found = False
            self._candidate = None
            self._worker_id = None
            self._cancel.clear()
            self.outcomes = {}

    # -- search ---------------------------------------------------------------

    def _assignments(self, search_range: SearchRange, workers: int) -> list[Assignment]:
        if self.policy is WorkPolicy.DYNAMIC:
            cursor = ChunkCursor(search_range, self.chunk_size)
            return [cursor] * workers
        return [StaticAssignment(r)
                for r in split_range(search_range.size, workers, start=search_range.start)]

    def _run_worker(self, worker: SearchWorker) -> WorkerOutcome:
        try:
            return worker.run()
        finally:
            with self._lock:
                self._active_workers -= 1

    def execute_search(self, config: SearchConfig) -> SearchResult:
        """Search this node's share of the keyspace and wait for every worker."""
        started = time.perf_counter()
        keyspace = get_formatter(config.charset)
        total = keyspace.size(config.password_length)
        my_range = node_range(total, config.total_nodes, config.this_node_index)

        self.events.emit("search_start", node=self.node_id, config=config,
                         policy=self.policy.value)
        self.events.emit("node_range", node=self.node_id, range=my_range, keyspace=total)

        if my_range.size == 0:
            logger.info(f"[{self.node_id}] No work assigned to this node")
            return SearchResult.not_found(self.node_id, 0)

        workers = []
        for worker_id, assignment in enumerate(
                self._assignments(my_range, config.workers_per_node)):
            self.events.emit("worker_range", node=self.node_id,
                             worker=worker_id, assignment=assignment)
            workers.append(SearchWorker(
                worker_id=worker_id,
                assignment=assignment,
                keyspace=keyspace,
                length=config.password_length,
                # one matcher per worker: hash objects are not thread-safe
                matcher=DigestMatcher.from_hex(config.target_digest_hex, config.algorithm),
                coordinator=self,
                poll_interval=self.poll_interval,
            ))

        with self._lock:
            self._active_workers += len(workers)
        with ThreadPoolExecutor(max_workers=len(workers),
                                thread_name_prefix=f"{self.node_id}-worker") as pool:
            futures = {pool.submit(self._run_worker, w): w.worker_id for w in workers}
            wait(futures)
        self.outcomes = {worker_id: future.result() for future, worker_id in futures.items()}

        elapsed = int((time.perf_counter() - started) * 1000)
        winner = self.winner()
        if winner is not None:
            candidate, worker_id = winner
            result = SearchResult(found=True, candidate=candidate, node_id=self.node_id,
                                  worker_id=worker_id, elapsed_millis=elapsed)
        else:
            result = SearchResult.not_found(self.node_id, elapsed)
        self.events.emit("search_complete", node=self.node_id, result=result)
        return result
