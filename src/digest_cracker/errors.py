"""
Errors raised by the digest cracker.
"""


class CrackerError(Exception):
    """Base class for all cracker errors."""


class InputValidationError(CrackerError, ValueError):
    """Malformed digest, unknown charset/algorithm or out-of-range counts.

    Raised before any worker starts, so no session state is created.
    """


class NodeConnectionError(CrackerError, ConnectionError):
    """A node is unreachable, not registered or timed out.

    address: The base URL of the node that failed.
    """

    def __init__(self, address: str, reason: str) -> None:
        super().__init__(f"node {address}: {reason}")
        self.address = address
        self.reason = reason


class SessionBusyError(CrackerError):
    """A distributed session is already running on this coordinator."""
