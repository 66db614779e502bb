"""
Configuration for the digest cracker.
"""

import argparse
from pathlib import Path
import sys
import logging

# Master server configuration
MASTER_SERVER_HOST = "localhost"
MASTER_SERVER_PORT = 8000

# Node server configuration
NODE_SERVER_HOST = "localhost"
NODE_SERVER_PORT = 8001

# Logger names
MASTER_SERVER_LOGGER = "master_server"
NODE_SERVER_LOGGER = "node_server"
CLIENT_LOGGER = "client"

# Remote calls
REQUEST_TIMEOUT = 10.0         # probes and stop requests
CONNECT_TIMEOUT = 5.0
SEARCH_REQUEST_TIMEOUT = None  # start_search blocks until the node is done

# Search configuration
DEFAULT_CHARSET = "printable"
DEFAULT_ALGORITHM = "md5"
MAX_PASSWORD_LENGTH = 6
MAX_WORKERS_PER_NODE = 16
MAX_NODES = 16
DEFAULT_CHUNK_SIZE = 10_000       # dynamic policy claim size
CANCEL_CHECK_INTERVAL = 1_000     # for checking if a worker should stop
LOG_PROGRESS_INTERVAL = 1_000_000  # for cracking progress

LOG_DIR = Path("logs")


def file_name(name: str, port: int | None = None) -> str:
    if "node" in name and port is not None:
        return f"node_{port}.log"
    return f"{name}.log"


def setup_logger(name: str, log_level: int = logging.INFO, port: int | None = None) -> logging.Logger:
    """
    Set up a logger with consistent formatting and handlers.

    Args:
        name: The name of the logger
        log_level: The logging level (default: INFO)
        port: Port of the node, used to keep one log file per node

    Returns:
        logging.Logger: Configured logger instance
    """
    logger = logging.getLogger(name)
    logger.setLevel(log_level)

    formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)

    LOG_DIR.mkdir(exist_ok=True)
    file_handler = logging.FileHandler(
        LOG_DIR / file_name(name, port),
        encoding='utf-8'
    )
    file_handler.setFormatter(formatter)

    logger.addHandler(console_handler)
    logger.addHandler(file_handler)

    return logger


def parse_args(description: str, argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(description=description)
    parser.add_argument('--log-level', type=str, default='info',
                        choices=['debug', 'info',
                                 'warning', 'error', 'critical'],
                        help='Log level to use')

    lowered = description.lower()
    if "node" in lowered:
        parser.add_argument("--host", type=str, default=NODE_SERVER_HOST,
                            help='Host to run the server on')
        parser.add_argument("--port", type=int, required=True,
                            help='Port to run the server on')
        parser.add_argument("--name", type=str,
                            help='Node name used for result attribution')
        parser.add_argument("--policy", type=str, default="static",
                            choices=["static", "dynamic"],
                            help='How the node hands work to its workers')
        parser.add_argument("--chunk-size", type=int, default=DEFAULT_CHUNK_SIZE,
                            help='Indices claimed per step with the dynamic policy')
    elif "master" in lowered:
        parser.add_argument("--host", type=str, default=MASTER_SERVER_HOST,
                            help='Host to run the server on')
        parser.add_argument("--port", type=int, default=MASTER_SERVER_PORT,
                            help='Port to run the server on')
    elif "client" in lowered:
        parser.add_argument("hash", type=str,
                            help='Hex digest to crack')
        parser.add_argument("--length", type=int, required=True,
                            help=f'Password length (1-{MAX_PASSWORD_LENGTH})')
        parser.add_argument("--node", dest="nodes", action="append", required=True,
                            help='Node base URL, e.g. http://localhost:8001 (repeatable)')
        parser.add_argument("--workers", type=int, default=4,
                            help=f'Workers per node (1-{MAX_WORKERS_PER_NODE})')
        parser.add_argument("--charset", type=str, default=DEFAULT_CHARSET,
                            help='Name of the candidate alphabet')
        parser.add_argument("--algorithm", type=str, default=DEFAULT_ALGORITHM,
                            help='hashlib algorithm of the target digest')

    args = parser.parse_args(argv)
    args.log_level = getattr(logging, args.log_level.upper())

    return args
