"""
Models shared by the nodes and the master.
"""
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from digest_cracker.config import (DEFAULT_ALGORITHM, DEFAULT_CHARSET, MAX_NODES,
                                   MAX_PASSWORD_LENGTH, MAX_WORKERS_PER_NODE)
from digest_cracker.cracker.digest import digest_size_of
from digest_cracker.formatters import FORMATTERS

HEX_DIGITS = frozenset("0123456789abcdef")


class WorkPolicy(str, Enum):
    """How a node hands its sub-range to its workers.

    STATIC:  Each worker gets one fixed slice up front.
    DYNAMIC: Workers claim fixed-size chunks from a shared cursor.
    """
    STATIC = "static"
    DYNAMIC = "dynamic"


class WorkerOutcome(str, Enum):
    """How a worker terminated."""
    FOUND = "found"
    EXHAUSTED = "exhausted"
    CANCELLED = "cancelled"
    LOST_RACE = "lost_race"
    FAULT = "fault"


class SessionState(str, Enum):
    """State of a distributed session.

    IDLE -> DISPATCHING -> AWAITING_RESULTS -> {FOUND, EXHAUSTED, CONNECTION_FAILED} -> IDLE
    """
    IDLE = "idle"
    DISPATCHING = "dispatching"
    AWAITING_RESULTS = "awaiting_results"
    FOUND = "found"
    EXHAUSTED = "exhausted"
    CONNECTION_FAILED = "connection_failed"


class SearchRange(BaseModel):
    """Half-open interval [start, end) of keyspace indices."""
    model_config = ConfigDict(frozen=True)

    start: int = Field(..., ge=0)
    end: int = Field(..., ge=0)

    @model_validator(mode="after")
    def check_order(self) -> "SearchRange":
        if self.start > self.end:
            raise ValueError(f"start {self.start} must be <= end {self.end}")
        return self

    @property
    def size(self) -> int:
        return self.end - self.start

    def __str__(self) -> str:
        return f"[{self.start}, {self.end}) (size {self.size})"


class SearchConfig(BaseModel):
    """Search parameters for one node.

    target_digest_hex: Hex digest to crack, lower-cased on input.
    password_length:   Number of symbols in every candidate.
    total_nodes:       Number of nodes sharing the keyspace.
    this_node_index:   0-based index of the receiving node.
    workers_per_node:  Worker threads the node starts.
    charset:           Name of the registered alphabet.
    algorithm:         hashlib name of the digest function.
    """
    target_digest_hex: str
    password_length: int = Field(..., ge=1, le=MAX_PASSWORD_LENGTH)
    total_nodes: int = Field(..., ge=1, le=MAX_NODES)
    this_node_index: int = Field(..., ge=0)
    workers_per_node: int = Field(..., ge=1, le=MAX_WORKERS_PER_NODE)
    charset: str = DEFAULT_CHARSET
    algorithm: str = DEFAULT_ALGORITHM

    @field_validator("target_digest_hex")
    @classmethod
    def check_hex(cls, value: str) -> str:
        value = value.strip().lower()
        if not value or not set(value) <= HEX_DIGITS:
            raise ValueError("target digest must be a hexadecimal string")
        return value

    @field_validator("charset")
    @classmethod
    def check_charset(cls, value: str) -> str:
        if value not in FORMATTERS:
            raise ValueError(
                f"unknown charset {value!r}, expected one of {sorted(FORMATTERS)}")
        return value

    @model_validator(mode="after")
    def check_consistency(self) -> "SearchConfig":
        if self.this_node_index >= self.total_nodes:
            raise ValueError(
                f"this_node_index {self.this_node_index} must be < total_nodes {self.total_nodes}")
        expected = 2 * digest_size_of(self.algorithm)
        if len(self.target_digest_hex) != expected:
            raise ValueError(
                f"{self.algorithm} digest must be {expected} hex characters, "
                f"got {len(self.target_digest_hex)}")
        return self

    def __str__(self) -> str:
        return (f"SearchConfig[hash={self.target_digest_hex[:8]}..., length={self.password_length}, "
                f"nodes={self.total_nodes}, node_index={self.this_node_index}, "
                f"workers={self.workers_per_node}, charset={self.charset}]")


class SearchResult(BaseModel):
    """Outcome of a search.

    found:          Whether a candidate matched.
    candidate:      The matching candidate (only when found).
    node_id:        Name of the node that produced the result.
    worker_id:      Worker that found the candidate (only when found).
    elapsed_millis: Search time in milliseconds.
    """
    found: bool
    candidate: Optional[str] = None
    node_id: str
    worker_id: Optional[int] = None
    elapsed_millis: int = Field(..., ge=0)

    @model_validator(mode="after")
    def check_found_fields(self) -> "SearchResult":
        if self.found and (self.candidate is None or self.worker_id is None):
            raise ValueError("a found result needs candidate and worker_id")
        if not self.found and (self.candidate is not None or self.worker_id is not None):
            raise ValueError("a not-found result carries no candidate or worker_id")
        return self

    @classmethod
    def not_found(cls, node_id: str, elapsed_millis: int) -> "SearchResult":
        return cls(found=False, node_id=node_id, elapsed_millis=elapsed_millis)

    def __str__(self) -> str:
        if self.found:
            return (f"SearchResult[FOUND: {self.candidate!r} by {self.node_id} "
                    f"worker-{self.worker_id} in {self.elapsed_millis}ms]")
        return f"SearchResult[NOT FOUND by {self.node_id} in {self.elapsed_millis}ms]"
