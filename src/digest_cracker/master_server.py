"""
Master server for the digest cracker.
"""

from logging import getLogger

import uvicorn
from fastapi import FastAPI, HTTPException
from fastapi.responses import RedirectResponse

from digest_cracker.config import MASTER_SERVER_LOGGER, parse_args, setup_logger
from digest_cracker.errors import InputValidationError, NodeConnectionError, SessionBusyError
from digest_cracker.models.models import SearchResult
from digest_cracker.models.schemas.request import CrackRequest
from digest_cracker.models.schemas.response import SessionStatusResponse
from digest_cracker.session import SessionCoordinator

logger = getLogger(MASTER_SERVER_LOGGER)


def create_app(coordinator: SessionCoordinator | None = None) -> FastAPI:
    """Build the master app around a session coordinator."""
    coordinator = coordinator or SessionCoordinator()

    app = FastAPI(title="Digest Cracker Master Server")
    app.state.coordinator = coordinator

    @app.get("/")
    async def root() -> RedirectResponse:
        return RedirectResponse(url="/docs")

    @app.post("/crack", response_model=SearchResult)
    async def crack(req: CrackRequest) -> SearchResult:
        """Crack a digest using the given nodes."""
        logger.info(f"Received crack request for hash {req.hash} "
                    f"(length={req.length}, nodes={len(req.nodes)})")
        try:
            return await coordinator.run_session(
                target_digest=req.hash,
                length=req.length,
                node_addresses=req.nodes,
                workers_per_node=req.workers_per_node,
                charset=req.charset,
                algorithm=req.algorithm,
            )
        except InputValidationError as e:
            raise HTTPException(status_code=400, detail=str(e))
        except SessionBusyError as e:
            raise HTTPException(status_code=409, detail=str(e))
        except NodeConnectionError as e:
            raise HTTPException(status_code=502, detail=str(e))

    @app.get("/status", response_model=SessionStatusResponse)
    async def get_status() -> SessionStatusResponse:
        """Current session state and the last result."""
        state = coordinator.state
        if not coordinator.busy and coordinator.last_state is not None:
            state = coordinator.last_state
        return SessionStatusResponse(
            state=state,
            last_result=coordinator.last_result,
            last_elapsed_millis=coordinator.last_elapsed_millis,
        )

    return app


def main() -> None:
    args = parse_args("Digest Cracker Master Server")
    setup_logger(MASTER_SERVER_LOGGER, log_level=args.log_level)
    uvicorn.run(create_app(), host=args.host, port=args.port,
                log_level=args.log_level)


if __name__ == "__main__":
    main()
