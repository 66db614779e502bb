"""Schemas for API requests."""

from typing import List
from pydantic import BaseModel, Field

from digest_cracker.config import DEFAULT_ALGORITHM, DEFAULT_CHARSET


class CrackRequest(BaseModel):
    """Crack request sent to the master.

    hash:             Hex digest to crack.
    length:           Password length to search.
    nodes:            Base URLs of the nodes taking part.
    workers_per_node: Worker threads per node.
    charset:          Name of the candidate alphabet.
    algorithm:        hashlib name of the digest function.
    """
    hash: str = Field(..., examples=["d077f244def8a70e5ea758bd8352fcd8"])
    length: int
    nodes: List[str] = Field(..., examples=[["http://localhost:8001", "http://localhost:8002"]])
    workers_per_node: int = 4
    charset: str = DEFAULT_CHARSET
    algorithm: str = DEFAULT_ALGORITHM
