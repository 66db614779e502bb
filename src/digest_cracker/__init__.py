"""
Distributed digest cracker: keyspace search split across nodes and worker threads.
"""

__version__ = "0.1.0"
