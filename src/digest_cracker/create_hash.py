"""Create digests for test passwords."""
from __future__ import annotations
import argparse
from pathlib import Path

from digest_cracker.config import DEFAULT_ALGORITHM
from digest_cracker.cracker.digest import hex_digest

DEFAULT_WORDS: list[str] = [
    "!",
    "AB",
    "abc",
    "cat",
    "Test",
    "Hello",
    "Pass!@",
]


def write_hashes(words: list[str], algorithm: str, output: Path | None = None) -> list[str]:
    """Print `word -> digest` for every word and optionally write the digests to a file."""
    digests = []
    for word in words:
        digest = hex_digest(word, algorithm)
        print(f"{word:<10} -> {digest}")
        digests.append(digest)

    if output is not None:
        output.write_text("".join(f"{d}\n" for d in digests), encoding="utf-8")
    return digests


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Create digests for test passwords")
    parser.add_argument("words", nargs="*", default=DEFAULT_WORDS,
                        help="Passwords to hash")
    parser.add_argument("--algorithm", default=DEFAULT_ALGORITHM,
                        help="hashlib algorithm name")
    parser.add_argument("--output", type=Path,
                        help="File to write the digests to, one per line")
    args = parser.parse_args(argv)
    write_hashes(args.words, args.algorithm, args.output)


if __name__ == "__main__":
    main()
