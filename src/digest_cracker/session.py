"""
Distributed session coordinator.

Splits a keyspace across nodes, starts one remote search per node and returns
the first positive result, cancelling the nodes that are still searching.
"""
from __future__ import annotations
import asyncio
import logging
import time
from typing import Callable, Optional

from pydantic import ValidationError

from digest_cracker.config import DEFAULT_ALGORITHM, DEFAULT_CHARSET, MASTER_SERVER_LOGGER, MAX_NODES
from digest_cracker.errors import InputValidationError, NodeConnectionError, SessionBusyError
from digest_cracker.formatters import get_formatter
from digest_cracker.models.models import SearchConfig, SearchResult, SessionState
from digest_cracker.node.client import NodeClient
from digest_cracker.utils.partition import split_range

logger = logging.getLogger(MASTER_SERVER_LOGGER)

SESSION_NODE_ID = "session"


def build_configs(target_digest: str, length: int, total_nodes: int, workers_per_node: int,
                  charset: str = DEFAULT_CHARSET,
                  algorithm: str = DEFAULT_ALGORITHM) -> list[SearchConfig]:
    """One validated SearchConfig per node; raises InputValidationError."""
    if not 1 <= total_nodes <= MAX_NODES:
        raise InputValidationError(f"number of nodes must be between 1 and {MAX_NODES}, got {total_nodes}")
    try:
        return [
            SearchConfig(
                target_digest_hex=target_digest,
                password_length=length,
                total_nodes=total_nodes,
                this_node_index=index,
                workers_per_node=workers_per_node,
                charset=charset,
                algorithm=algorithm,
            )
            for index in range(total_nodes)
        ]
    except ValidationError as e:
        messages = "; ".join(err["msg"] for err in e.errors())
        raise InputValidationError(messages) from e


class SessionCoordinator:
    """
    Runs one distributed session at a time.

    state follows IDLE -> DISPATCHING -> AWAITING_RESULTS -> terminal -> IDLE;
    the terminal state of the last session is kept in last_state.
    """

    def __init__(self, client_factory: Callable[[str], NodeClient] = NodeClient) -> None:
        self.client_factory = client_factory
        self.state = SessionState.IDLE
        self.last_state: Optional[SessionState] = None
        self.last_result: Optional[SearchResult] = None
        self.last_elapsed_millis: Optional[int] = None

    @property
    def busy(self) -> bool:
        return self.state is not SessionState.IDLE

    async def connect(self, clients: list[NodeClient]) -> list[str]:
        """Probe every node; returns their names or raises NodeConnectionError."""
        async def probe(client: NodeClient) -> str:
            if not await client.is_alive():
                raise NodeConnectionError(client.address, "node is not responding")
            name = await client.get_node_name()
            logger.info(f"Connected to {client.address} ({name})")
            return name

        results = await asyncio.gather(*(probe(c) for c in clients), return_exceptions=True)
        for result in results:
            if isinstance(result, BaseException):
                raise result
        return results

    async def run_session(self,
                          target_digest: str,
                          length: int,
                          node_addresses: list[str],
                          workers_per_node: int,
                          charset: str = DEFAULT_CHARSET,
                          algorithm: str = DEFAULT_ALGORITHM) -> SearchResult:
        """Search the whole keyspace of `length` across `node_addresses`."""
        if not node_addresses:
            raise InputValidationError("at least one node address is required")
        # a node runs one search at a time; a second share would stop the first
        normalized = [address.rstrip("/") for address in node_addresses]
        duplicates = sorted({a for a in normalized if normalized.count(a) > 1})
        if duplicates:
            raise InputValidationError(f"duplicate node addresses: {', '.join(duplicates)}")
        configs = build_configs(target_digest, length, len(node_addresses),
                                workers_per_node, charset, algorithm)
        if self.busy:
            raise SessionBusyError(f"a session is already {self.state.value}")

        self.state = SessionState.DISPATCHING
        started = time.perf_counter()
        clients = [self.client_factory(address) for address in node_addresses]
        try:
            await self.connect(clients)
            result = await self._dispatch(clients, configs, started)
        except NodeConnectionError as e:
            logger.error(f"Session failed: {e}")
            self.last_state = SessionState.CONNECTION_FAILED
            raise
        finally:
            self.last_elapsed_millis = int((time.perf_counter() - started) * 1000)
            self.state = SessionState.IDLE

        self.last_state = SessionState.FOUND if result.found else SessionState.EXHAUSTED
        self.last_result = result
        logger.info(f"Session finished in {self.last_elapsed_millis}ms: {result}")
        return result

    async def _dispatch(self, clients: list[NodeClient], configs: list[SearchConfig],
                        started: float) -> SearchResult:
        keyspace = get_formatter(configs[0].charset).size(configs[0].password_length)
        for client, node_slice in zip(clients, split_range(keyspace, len(clients))):
            logger.info(f"Assigned range {node_slice} to {client.address}")

        pending: dict[asyncio.Task, NodeClient] = {
            asyncio.create_task(client.start_search(config)): client
            for client, config in zip(clients, configs)
        }
        self.state = SessionState.AWAITING_RESULTS
        try:
            while pending:
                done, _ = await asyncio.wait(pending, return_when=asyncio.FIRST_COMPLETED)
                for task in done:
                    client = pending.pop(task)
                    error = task.exception()
                    if error is not None:
                        self.state = SessionState.CONNECTION_FAILED
                        await self._stop_nodes(pending.values())
                        raise error
                    result = task.result()
                    logger.info(f"Result from {client.address}: {result}")
                    if result.found:
                        self.state = SessionState.FOUND
                        await self._stop_nodes(pending.values())
                        return result
        finally:
            for task in pending:
                task.cancel()

        self.state = SessionState.EXHAUSTED
        elapsed = int((time.perf_counter() - started) * 1000)
        return SearchResult.not_found(SESSION_NODE_ID, elapsed)

    async def _stop_nodes(self, clients) -> None:
        clients = list(clients)
        results = await asyncio.gather(*(c.stop_search() for c in clients), return_exceptions=True)
        for client, result in zip(clients, results):
            if isinstance(result, BaseException):
                logger.warning(f"Failed to stop {client.address}: {result}")
            else:
                logger.info(f"Sent stop to {client.address}")
