"""Mounting of sub-stores by key, with listening, tracing and pruning settings."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping

from multistore.mem import StoreType
from multistore.metrics import NoOpMetrics, StoreMetrics
from multistore.pruning_manager import PruningManager
from multistore.pruning_options import PruningOptions


@dataclass(eq=False, frozen=True)
class StoreKey:
    """Identifies a mounted store; two keys are equal only if they are the same object."""

    name: str

    def __str__(self) -> str:
        return self.name


@dataclass
class _StoreParams:
    key: StoreKey
    db: Any
    store_type: StoreType
    initial_version: int = 0


@dataclass(frozen=True)
class _StoreKVPair:
    store_key: str
    key: bytes
    value: bytes | None
    delete: bool


@dataclass
class _MemoryListener:
    state_cache: list[_StoreKVPair] = field(default_factory=list)

    def on_write(self, store_key: StoreKey, key: bytes, value: bytes | None, delete: bool) -> None:
        self.state_cache.append(_StoreKVPair(store_key.name, key, value, delete))

    def pop_state_cache(self) -> list[_StoreKVPair]:
        cache, self.state_cache = self.state_cache, []
        return cache


class StoreRegistry:
    """Keeps the mounted store keys of a root multi-store and its shared settings.

    A new registry keeps every height until other pruning options are set.
    """

    def __init__(
        self,
        db: Any,
        logger: logging.Logger | None = None,
        metrics: StoreMetrics | None = None,
    ) -> None:
        self.db = db
        self.logger = logger if logger is not None else logging.getLogger(__name__)
        self.metrics: StoreMetrics = metrics if metrics is not None else NoOpMetrics()
        self.pruning_manager = PruningManager(db, self.logger)
        self._params: dict[StoreKey, _StoreParams] = {}
        self._keys_by_name: dict[str, StoreKey] = {}
        self._listeners: dict[StoreKey, _MemoryListener] = {}
        self._trace_writer: Any = None
        self._trace_context: dict[str, Any] | None = None
        self._trace_lock = threading.Lock()

    def mount_store(self, key: StoreKey | None, store_type: StoreType, db: Any = None) -> None:
        """Mount a store under key; keys and their names must be unique."""
        if key is None:
            raise ValueError("mount_store() key cannot be None")
        if key in self._params:
            raise ValueError(f"store duplicate store key {key}")
        if key.name in self._keys_by_name:
            raise ValueError(f"store duplicate store key name {key}")
        self._params[key] = _StoreParams(key, db, store_type)
        self._keys_by_name[key.name] = key

    def store_keys_by_name(self) -> dict[str, StoreKey]:
        """The mounted keys, indexed by name."""
        return dict(self._keys_by_name)

    def store_type_of(self, key: StoreKey) -> StoreType:
        """The type a key was mounted with."""
        try:
            return self._params[key].store_type
        except KeyError:
            raise KeyError(f"store does not exist for key: {key.name}") from None

    def add_listeners(self, keys: Iterable[StoreKey]) -> None:
        """Start listening to writes on the stores of the given keys."""
        for key in keys:
            self._listeners.setdefault(key, _MemoryListener())

    def listening_enabled(self, key: StoreKey) -> bool:
        """Whether writes to the store of key are listened to."""
        return self._listeners.get(key) is not None

    def set_tracer(self, writer: Any) -> StoreRegistry:
        """Set the writer that traced operations go to."""
        self._trace_writer = writer
        return self

    def set_tracing_context(self, context: Mapping[str, Any] | None) -> StoreRegistry:
        """Merge context into the tracing context; existing keys are overwritten."""
        with self._trace_lock:
            if context is not None:
                merged = dict(self._trace_context or {})
                merged.update(context)
                self._trace_context = merged
            elif self._trace_context is None:
                self._trace_context = None
        return self

    def tracing_enabled(self) -> bool:
        """Whether a trace writer is set."""
        return self._trace_writer is not None

    def get_tracing_context(self) -> dict[str, Any] | None:
        """A copy of the tracing context, or None if none was ever set."""
        with self._trace_lock:
            if self._trace_context is None:
                return None
            return dict(self._trace_context)

    def set_pruning(self, options: PruningOptions) -> None:
        """Set the pruning strategy."""
        self.pruning_manager.options = options

    def get_pruning(self) -> PruningOptions:
        """The pruning strategy in use."""
        return self.pruning_manager.options

    def set_snapshot_interval(self, interval: int) -> None:
        """Set the interval at which snapshots are taken."""
        self.pruning_manager.snapshot_interval = interval

    def prune_snapshot_height(self, height: int) -> None:
        """Hold a snapshot height until the pruning strategy may remove it."""
        self.pruning_manager.handle_snapshot_height(height)