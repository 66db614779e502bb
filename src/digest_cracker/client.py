"""
Command-line client: runs one distributed session and prints the outcome.

    digest-cracker d077f244def8a70e5ea758bd8352fcd8 --length 3 \
        --charset alnum_lower --node http://localhost:8001 --node http://localhost:8002
"""
from __future__ import annotations
import asyncio
import sys
from logging import getLogger

from digest_cracker.config import CLIENT_LOGGER, MASTER_SERVER_LOGGER, parse_args, setup_logger
from digest_cracker.errors import InputValidationError, NodeConnectionError
from digest_cracker.formatters import get_formatter
from digest_cracker.models.models import SearchResult
from digest_cracker.session import SessionCoordinator

logger = getLogger(CLIENT_LOGGER)

EXIT_FOUND = 0
EXIT_NOT_FOUND = 1
EXIT_ERROR = 2


def format_result(result: SearchResult) -> str:
    if result.found:
        return (f"PASSWORD FOUND: {result.candidate}\n"
                f"  Found by:   {result.node_id}, worker-{result.worker_id}\n"
                f"  Time taken: {result.elapsed_millis:,} ms")
    return (f"PASSWORD NOT FOUND\n"
            f"  Time taken: {result.elapsed_millis:,} ms\n"
            f"  Note: the password may not be in the search space")


def main(argv: list[str] | None = None) -> int:
    args = parse_args("Digest Cracker Client", argv)
    setup_logger(CLIENT_LOGGER, log_level=args.log_level)
    setup_logger(MASTER_SERVER_LOGGER, log_level=args.log_level)

    coordinator = SessionCoordinator()
    try:
        space = get_formatter(args.charset).size(args.length)
        logger.info(f"Search space: {space:,} candidates over {len(args.nodes)} node(s) "
                    f"x {args.workers} worker(s)")
        result = asyncio.run(coordinator.run_session(
            target_digest=args.hash,
            length=args.length,
            node_addresses=args.nodes,
            workers_per_node=args.workers,
            charset=args.charset,
            algorithm=args.algorithm,
        ))
    except InputValidationError as e:
        print(f"[ERROR] invalid input: {e}", file=sys.stderr)
        return EXIT_ERROR
    except NodeConnectionError as e:
        print(f"[ERROR] connection failed: {e}", file=sys.stderr)
        print("Make sure the node servers are running and reachable, then retry.",
              file=sys.stderr)
        return EXIT_ERROR

    print(format_result(result))
    return EXIT_FOUND if result.found else EXIT_NOT_FOUND


if __name__ == "__main__":
    sys.exit(main())
