"""
Node server for the digest cracker.

Exposes the Remote Search Service over HTTP:

    POST /search   start a search (blocks until the node is done)
    POST /stop     cancel the active search
    GET  /alive    liveness probe
    GET  /name     node name for result attribution
"""

from contextlib import asynccontextmanager
from logging import getLogger
from typing import AsyncIterator

import uvicorn
from fastapi import FastAPI
from fastapi.responses import RedirectResponse

from digest_cracker.config import NODE_SERVER_LOGGER, parse_args, setup_logger
from digest_cracker.models.models import SearchConfig, SearchResult, WorkPolicy
from digest_cracker.models.schemas.response import (AliveResponse, HealthResponse,
                                                    NodeNameResponse, StopResponse)
from digest_cracker.node.service import NodeService

logger = getLogger(NODE_SERVER_LOGGER)


def create_app(service: NodeService) -> FastAPI:
    """Build the HTTP app around a node service."""

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        logger.info(f"Node {service.node_name} is starting")
        yield
        service.stop_search()
        logger.info(f"Shutting down node {service.node_name}")

    app = FastAPI(title=f"Digest Cracker Node {service.node_name}", lifespan=lifespan)
    app.state.service = service

    @app.get("/")
    async def root() -> RedirectResponse:
        """Redirect to the docs."""
        return RedirectResponse(url="/docs")

    # Sync handlers run in the threadpool, so /stop is served while /search blocks.
    @app.post("/search", response_model=SearchResult)
    def start_search(config: SearchConfig) -> SearchResult:
        """Search this node's share of the keyspace."""
        return service.start_search(config)

    @app.post("/stop", response_model=StopResponse)
    def stop_search() -> StopResponse:
        """Cancel the active search, if any."""
        stopping = service.stop_search()
        return StopResponse(status="stopping" if stopping else "idle")

    @app.get("/alive", response_model=AliveResponse)
    async def is_alive() -> AliveResponse:
        return AliveResponse(alive=service.is_alive())

    @app.get("/name", response_model=NodeNameResponse)
    async def get_node_name() -> NodeNameResponse:
        return NodeNameResponse(node_name=service.get_node_name())

    @app.get("/health", response_model=HealthResponse)
    async def health() -> HealthResponse:
        """Health check."""
        return HealthResponse(status="searching" if service.is_searching else "active")

    return app


def main() -> None:
    args = parse_args("Digest Cracker Node Server")
    setup_logger(NODE_SERVER_LOGGER, log_level=args.log_level, port=args.port)

    service = NodeService(
        node_name=args.name or f"node-{args.port}",
        policy=WorkPolicy(args.policy),
        chunk_size=args.chunk_size,
    )
    uvicorn.run(create_app(service), host=args.host, port=args.port,
                log_level=args.log_level)


if __name__ == "__main__":
    main()
