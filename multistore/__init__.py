"""Building blocks for a versioned multi-store: an in-memory database, memory and prefix stores, pruning, metrics, commit metadata and store registration."""

__version__ = "0.1.0"

__all__ = [
    "memdb",
    "mem",
    "metadata",
    "metrics",
    "paths",
    "prefix",
    "pruning_manager",
    "pruning_options",
    "registry",
]