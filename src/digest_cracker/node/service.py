"""
Remote Search Service implementation for one node.
"""
from __future__ import annotations
import logging
import threading
from typing import Optional

from digest_cracker.config import CANCEL_CHECK_INTERVAL, DEFAULT_CHUNK_SIZE, NODE_SERVER_LOGGER
from digest_cracker.cracker.coordinator import SearchCoordinator
from digest_cracker.events import EventSink
from digest_cracker.models.models import SearchConfig, SearchResult, WorkPolicy

logger = logging.getLogger(NODE_SERVER_LOGGER)


class NodeService:
    """
    Runs at most one search at a time.

    A new `start_search` stops the active search and waits for it to wind
    down. Requests that are overtaken while waiting return "not found", and
    so do requests that were still waiting when `stop_search` came in.
    """

    def __init__(self,
                 node_name: str,
                 policy: WorkPolicy = WorkPolicy.STATIC,
                 chunk_size: int = DEFAULT_CHUNK_SIZE,
                 poll_interval: int = CANCEL_CHECK_INTERVAL,
                 events: EventSink | None = None) -> None:
        self.node_name = node_name
        self.policy = WorkPolicy(policy)
        self.chunk_size = chunk_size
        self.poll_interval = poll_interval
        self.events = events or EventSink()

        self._state_lock = threading.Lock()
        self._run_lock = threading.Lock()
        self._generation = 0
        self._stopped_generation = 0
        self._waiting = 0
        self._coordinator: Optional[SearchCoordinator] = None

    @property
    def is_searching(self) -> bool:
        return self._coordinator is not None

    @property
    def waiting(self) -> int:
        """Requests accepted but not yet running."""
        return self._waiting

    def start_search(self, config: SearchConfig) -> SearchResult:
        """Blocks until this node's share is exhausted, matched or stopped."""
        with self._state_lock:
            self._generation += 1
            self._waiting += 1
            generation = self._generation
            if self._coordinator is not None:
                logger.warning(f"[{self.node_name}] Search already in progress, stopping previous search")
                self._coordinator.stop_all()

        with self._run_lock:
            with self._state_lock:
                self._waiting -= 1
                if generation != self._generation:
                    logger.info(f"[{self.node_name}] Search request superseded before it started")
                    return SearchResult.not_found(self.node_name, 0)
                if generation <= self._stopped_generation:
                    logger.info(f"[{self.node_name}] Search request stopped before it started")
                    return SearchResult.not_found(self.node_name, 0)
                coordinator = SearchCoordinator(
                    node_id=self.node_name,
                    policy=self.policy,
                    chunk_size=self.chunk_size,
                    poll_interval=self.poll_interval,
                    events=self.events,
                )
                self._coordinator = coordinator

            logger.info(f"[{self.node_name}] Received search request: {config}")
            try:
                result = coordinator.execute_search(config)
            finally:
                with self._state_lock:
                    if self._coordinator is coordinator:
                        self._coordinator = None
            logger.info(f"[{self.node_name}] Search completed: {result}")
            return result

    def stop_search(self) -> bool:
        """
        Request cancellation of the active search and of any request still
        waiting to run. Returns False when there was nothing to stop; an
        idle node does not carry the stop over to later searches.
        """
        with self._state_lock:
            coordinator = self._coordinator
            queued = self._waiting > 0
            if queued:
                self._stopped_generation = self._generation
        logger.info(f"[{self.node_name}] Stop search requested")
        if coordinator is not None:
            coordinator.stop_all()
        return coordinator is not None or queued

    def is_alive(self) -> bool:
        return True

    def get_node_name(self) -> str:
        return self.node_name
