"""Decides which heights may be pruned, keeping heights needed by snapshots."""

from __future__ import annotations

import logging
import struct
import threading
from typing import Any, Protocol

from multistore.pruning_options import (
    PruningOptions,
    PruningStrategy,
    new_pruning_options,
)

PRUNE_SNAPSHOT_HEIGHTS_KEY = b"s/prunesnapshotheights"

_HEIGHT = struct.Struct(">q")


class _Getter(Protocol):
    def get(self, key: bytes) -> bytes | None: ...


class NegativeHeightsError(ValueError):
    """A negative height was found among the stored snapshot heights."""

    def __init__(self, height: int) -> None:
        super().__init__(f"failed to get pruned heights: {height}")
        self.height = height

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, NegativeHeightsError):
            return NotImplemented
        return self.height == other.height

    def __hash__(self) -> int:
        return hash(self.height)


def int64_list_to_bytes(heights: list[int]) -> bytes:
    """Encode heights as consecutive big-endian 64-bit integers."""
    return b"".join(_HEIGHT.pack(height) for height in heights)


def load_pruning_snapshot_heights(db: _Getter) -> list[int]:
    """Read the persisted snapshot heights from db; raise on negative heights."""
    try:
        data = db.get(PRUNE_SNAPSHOT_HEIGHTS_KEY)
    except Exception as err:
        raise RuntimeError(f"failed to get post-snapshot pruned heights: {err}") from err
    if not data:
        return []
    if len(data) % _HEIGHT.size:
        raise ValueError(
            f"snapshot heights record has length {len(data)}, not a multiple of {_HEIGHT.size}"
        )
    heights = []
    for (height,) in _HEIGHT.iter_unpack(data):
        if height < 0:
            raise NegativeHeightsError(height)
        heights.append(height)
    return heights


class PruningManager:
    """Tracks the pruning strategy and the snapshot heights that must be kept.

    A new manager keeps every height; assign ``options`` to change that.
    """

    def __init__(self, db: Any, logger: logging.Logger | None = None) -> None:
        self.db = db
        self.logger = logger if logger is not None else logging.getLogger(__name__)
        self.options: PruningOptions = new_pruning_options(PruningStrategy.NOTHING)
        self.snapshot_interval = 0
        # Snapshots complete on another thread, so guard the heights list.
        self._lock = threading.Lock()
        self._prune_snapshot_heights: list[int] = [0]

    @property
    def prune_snapshot_heights(self) -> list[int]:
        """A copy of the snapshot heights currently held back from pruning."""
        with self._lock:
            return list(self._prune_snapshot_heights)

    def handle_snapshot_height(self, height: int) -> None:
        """Record a completed snapshot height and persist the list at once.

        Does nothing when nothing is pruned or when height is not positive.
        Errors from the database propagate.
        """
        if self.options.strategy == PruningStrategy.NOTHING or height <= 0:
            return

        with self._lock:
            self.logger.debug("HandleSnapshotHeight height=%d", height)
            heights = sorted([*self._prune_snapshot_heights, height])
            k = 1
            while k < len(heights) and heights[k] == heights[k - 1] + self.snapshot_interval:
                k += 1
            self._prune_snapshot_heights = heights[k - 1 :]
            self.db.set_sync(
                PRUNE_SNAPSHOT_HEIGHTS_KEY, int64_list_to_bytes(self._prune_snapshot_heights)
            )

    def get_pruning_height(self, height: int) -> int:
        """Return the height up to which pruning may go at this height, or 0."""
        opts = self.options
        if opts.strategy == PruningStrategy.NOTHING or opts.interval <= 0:
            return 0
        if height % opts.interval != 0 or height <= opts.keep_recent:
            return 0

        # Always keep the current height.
        prune_height = height - 1 - opts.keep_recent

        with self._lock:
            if self.snapshot_interval <= 0:
                return prune_height
            if not self._prune_snapshot_heights:
                return 0
            # The first recorded snapshot is done, so everything before the next one may go.
            snapshot_height = self._prune_snapshot_heights[0] + self.snapshot_interval - 1
            return min(snapshot_height, prune_height)

    def load_snapshot_heights(self, db: _Getter) -> None:
        """Restore the snapshot heights persisted in db after a crash."""
        if self.options.strategy == PruningStrategy.NOTHING:
            return
        loaded = load_pruning_snapshot_heights(db)
        if loaded:
            with self._lock:
                self._prune_snapshot_heights = loaded