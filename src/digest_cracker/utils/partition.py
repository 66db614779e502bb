"""
Keyspace partitioning shared by the master and the nodes.
"""

from digest_cracker.errors import InputValidationError
from digest_cracker.models.models import SearchRange


def split_range(total: int, parts: int, start: int = 0) -> list[SearchRange]:
    """
    Divide [start, start + total) into `parts` contiguous slices.
    Handles remainders so that early slices get one extra item when needed.
    Always returns exactly `parts` slices; trailing ones may be empty.
    """
    if parts < 1:
        raise InputValidationError(f"parts must be >= 1, got {parts}")
    if total < 0:
        raise InputValidationError(f"total must be >= 0, got {total}")
    if start < 0:
        raise InputValidationError(f"start must be >= 0, got {start}")

    base, rem = divmod(total, parts)

    slices = []
    current = start
    for i in range(parts):
        # give the first `rem` slices an extra element
        inc = base + (1 if i < rem else 0)
        slices.append(SearchRange(start=current, end=current + inc))
        current += inc

    return slices


def node_range(total: int, total_nodes: int, node_index: int) -> SearchRange:
    """The slice of [0, total) owned by node `node_index`."""
    if not 0 <= node_index < total_nodes:
        raise InputValidationError(
            f"node index {node_index} outside [0, {total_nodes})")
    return split_range(total, total_nodes)[node_index]
