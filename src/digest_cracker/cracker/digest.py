from __future__ import annotations
import hashlib

from digest_cracker.errors import InputValidationError


def _new_hash(algorithm: str) -> "hashlib._Hash":
    try:
        return hashlib.new(algorithm, usedforsecurity=False)
    except (ValueError, TypeError) as e:
        raise InputValidationError(f"unsupported digest algorithm {algorithm!r}") from e


def digest_size_of(algorithm: str) -> int:
    """Digest size in bytes of a fixed-size hashlib algorithm."""
    size = _new_hash(algorithm).digest_size
    if size <= 0:
        raise InputValidationError(
            f"{algorithm!r} has no fixed digest size")
    return size


def hex_digest(data: bytes | str, algorithm: str = "md5") -> str:
    """Hex digest of ``data``; used to build targets."""
    if isinstance(data, str):
        data = data.encode()
    h = _new_hash(algorithm)
    h.update(data)
    return h.hexdigest()


class DigestMatcher:
    """
    Digests candidates and compares them against one target.

    Every call copies a hash object that was initialised once, so the hot
    loop never goes through the constructor lookup again. One matcher per
    worker; hash objects are not shared across threads.
    """

    def __init__(self, target_digest: bytes, algorithm: str = "md5") -> None:
        self._prototype = _new_hash(algorithm)
        if self._prototype.digest_size <= 0:
            raise InputValidationError(f"{algorithm!r} has no fixed digest size")
        if len(target_digest) != self._prototype.digest_size:
            raise InputValidationError(
                f"{algorithm} target must be {self._prototype.digest_size} bytes, "
                f"got {len(target_digest)}")
        self.algorithm = algorithm
        self.target = bytes(target_digest)

    @classmethod
    def from_hex(cls, target_hex: str, algorithm: str = "md5") -> DigestMatcher:
        try:
            target = bytes.fromhex(target_hex)
        except ValueError as e:
            raise InputValidationError(f"malformed hex digest {target_hex!r}") from e
        return cls(target, algorithm)

    @property
    def digest_size(self) -> int:
        return self._prototype.digest_size

    def digest(self, data: bytes | bytearray) -> bytes:
        h = self._prototype.copy()
        h.update(data)
        return h.digest()

    @staticmethod
    def matches(candidate_digest: bytes, target_digest: bytes) -> bool:
        return candidate_digest == target_digest

    def check(self, candidate: bytes | bytearray) -> bool:
        """True when ``candidate`` digests to the target."""
        return self.matches(self.digest(candidate), self.target)
