"""Schemas for API responses."""

from typing import Literal, Optional
from pydantic import BaseModel

from digest_cracker.models.models import SearchResult, SessionState


class AliveResponse(BaseModel):
    """Liveness probe response."""
    alive: bool


class NodeNameResponse(BaseModel):
    """Node name response.

    node_name: Stable identifier used in result attribution.
    """
    node_name: str


class StopResponse(BaseModel):
    """Stop search response.

    status: "stopping" if a search was running, "idle" otherwise.
    """
    status: Literal["stopping", "idle"]


class HealthResponse(BaseModel):
    status: Literal["active", "searching"]


class SessionStatusResponse(BaseModel):
    """Master status response.

    state:               Current (or last terminal) session state.
    last_result:         Result of the last completed session.
    last_elapsed_millis: Wall-clock time of the last session.
    """
    state: SessionState
    last_result: Optional[SearchResult] = None
    last_elapsed_millis: Optional[int] = None
