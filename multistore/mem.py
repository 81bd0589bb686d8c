"""An in-memory store whose entries persist across commits but are never hashed."""

from __future__ import annotations

import enum
from dataclasses import dataclass

from multistore.memdb import MemDB, MemIterator
from multistore.pruning_options import (
    PruningOptions,
    PruningStrategy,
    new_pruning_options,
)


class StoreType(enum.Enum):
    """The kinds of stores a multi-store can mount."""

    MULTI = enum.auto()
    DB = enum.auto()
    IAVL = enum.auto()
    TRANSIENT = enum.auto()
    MEMORY = enum.auto()
    SMT = enum.auto()
    PERSISTENT = enum.auto()


@dataclass(frozen=True)
class CommitID:
    """A committed version together with its hash."""

    version: int = 0
    hash: bytes | None = None

    def is_zero(self) -> bool:
        """Whether this is the empty commit id."""
        return self.version == 0 and not self.hash


class MemoryStore:
    """A key-value store kept only in memory.

    Entries survive commits, but the store is not part of committed app state.
    """

    def __init__(self, db: MemDB | None = None) -> None:
        self.db = db if db is not None else MemDB()

    def get_store_type(self) -> StoreType:
        """This store's type."""
        return StoreType.MEMORY

    def get(self, key: bytes) -> bytes | None:
        """Return the value under key, or None."""
        return self.db.get(key)

    def has(self, key: bytes) -> bool:
        """Whether key is present."""
        return self.db.has(key)

    def set(self, key: bytes, value: bytes) -> None:
        """Store value under key."""
        if key is None:
            raise ValueError("key is nil")
        if value is None:
            raise ValueError("value is nil")
        self.db.set(key, value)

    def delete(self, key: bytes) -> None:
        """Remove key."""
        self.db.delete(key)

    def iterator(self, start: bytes | None = None, end: bytes | None = None) -> MemIterator:
        """Iterate ascending over [start, end)."""
        return self.db.iterator(start, end)

    def reverse_iterator(
        self, start: bytes | None = None, end: bytes | None = None
    ) -> MemIterator:
        """Iterate descending over [start, end)."""
        return self.db.reverse_iterator(start, end)

    def commit(self) -> CommitID:
        """Do nothing: entries already persist between commits."""
        return CommitID()

    def set_pruning(self, options: PruningOptions) -> None:
        """Accept pruning options without applying them; they belong to the root multi-store."""
        if not isinstance(options, PruningOptions):
            raise TypeError(f"expected PruningOptions, got {type(options).__name__}")

    def get_pruning(self) -> PruningOptions:
        """Pruning options cannot be set on this store."""
        return new_pruning_options(PruningStrategy.UNDEFINED)

    def last_commit_id(self) -> CommitID:
        """Always the empty commit id."""
        return CommitID()

    def working_hash(self) -> bytes | None:
        """This store contributes no hash: that of its empty commit id."""
        return self.last_commit_id().hash