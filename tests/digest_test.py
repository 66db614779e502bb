import hashlib

import pytest

from digest_cracker.cracker.digest import DigestMatcher, digest_size_of, hex_digest
from digest_cracker.errors import InputValidationError


def test_md5_vectors():
    assert hex_digest("") == "d41d8cd98f00b204e9800998ecf8427e"
    assert hex_digest("abc") == "900150983cd24fb0d6963f7d28e17f72"


def test_matcher_checks_candidates():
    matcher = DigestMatcher.from_hex(hex_digest("cat"))
    assert matcher.check(b"cat")
    assert matcher.check(bytearray(b"cat"))
    assert not matcher.check(b"cau")


def test_matcher_is_reusable_across_calls():
    matcher = DigestMatcher.from_hex(hex_digest("abc"))
    buf = bytearray(b"aaa")
    for _ in range(3):
        assert not matcher.check(buf)
    buf[:] = b"abc"
    assert matcher.check(buf)
    assert matcher.digest(buf) == hashlib.md5(b"abc").digest()


def test_matches_is_bytewise_equality():
    a = hashlib.md5(b"x").digest()
    assert DigestMatcher.matches(a, bytes(a))
    assert not DigestMatcher.matches(a, hashlib.md5(b"y").digest())


def test_check_goes_through_digest_and_matches():
    class CountingMatcher(DigestMatcher):
        def __init__(self, *args, **kwargs):
            super().__init__(*args, **kwargs)
            self.digested = []

        def digest(self, data):
            self.digested.append(bytes(data))
            return super().digest(data)

    matcher = CountingMatcher.from_hex(hex_digest("cat"))
    assert not matcher.check(b"cau")
    assert matcher.check(b"cat")
    assert matcher.digested == [b"cau", b"cat"]


def test_other_algorithms():
    assert digest_size_of("sha256") == 32
    matcher = DigestMatcher.from_hex(hex_digest("cat", "sha256"), "sha256")
    assert matcher.digest_size == 32
    assert matcher.check(b"cat")


def test_invalid_targets():
    with pytest.raises(InputValidationError):
        DigestMatcher.from_hex("not hex at all")
    with pytest.raises(InputValidationError):
        DigestMatcher(b"\x00" * 15)
    with pytest.raises(InputValidationError):
        DigestMatcher(b"\x00" * 16, algorithm="no-such-hash")
