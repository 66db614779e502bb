"""Per-node search: digests, workers and the local coordinator."""
