"""Timing metrics emitted by the store, with optional global labels."""

from __future__ import annotations

import threading
import time
from dataclasses import dataclass, field
from typing import Iterable, Protocol, Sequence, runtime_checkable


@runtime_checkable
class StoreMetrics(Protocol):
    """Anything that can record how long an operation took."""

    def measure_since(self, *args: str) -> None:
        """Record a timing under the given key parts."""


def _key_parts(args: Iterable[str]) -> tuple[str, ...]:
    parts = tuple(args)
    for part in parts:
        if not isinstance(part, str):
            raise TypeError(f"metric key parts must be strings, got {part!r}")
    return parts


@dataclass(frozen=True)
class Label:
    """A name/value pair attached to every sample."""

    name: str
    value: str


@dataclass(frozen=True)
class Sample:
    """One recorded measurement, in milliseconds."""

    keys: tuple[str, ...]
    value: float
    labels: tuple[Label, ...]


class InMemorySink:
    """Collects samples in memory; safe to share between threads."""

    def __init__(self) -> None:
        self._samples: list[Sample] = []
        self._lock = threading.Lock()

    def add_sample(self, keys: Iterable[str], value: float, labels: Iterable[Label]) -> None:
        """Store one measurement."""
        sample = Sample(tuple(keys), float(value), tuple(labels))
        with self._lock:
            self._samples.append(sample)

    @property
    def samples(self) -> list[Sample]:
        """A copy of the samples collected so far."""
        with self._lock:
            return list(self._samples)


@dataclass
class Metrics:
    """Emits time measures to a sink, tagged with the operator's labels."""

    labels: tuple[Label, ...] = ()
    sink: InMemorySink = field(default_factory=InMemorySink)

    def measure_since(self, *args: str) -> None:
        """Emit a time measure under the key parts given as arguments."""
        keys = _key_parts(args)
        start = time.monotonic()
        elapsed_ms = (time.monotonic() - start) * 1000.0
        self.sink.add_sample(keys, elapsed_ms, self.labels)


class NoOpMetrics:
    """A metrics gatherer that records nothing."""

    def measure_since(self, *args: str) -> None:
        """Check the key parts and record nothing, without reading the clock."""
        _key_parts(args)


def new_metrics(
    labels: Sequence[Sequence[str]] = (), sink: InMemorySink | None = None
) -> Metrics:
    """Build a Metrics from ``[name, value]`` pairs set by the node operator."""
    parsed = []
    for pair in labels:
        if len(pair) < 2:
            raise ValueError(f"label needs a name and a value: {list(pair)!r}")
        parsed.append(Label(pair[0], pair[1]))
    return Metrics(tuple(parsed), sink if sink is not None else InMemorySink())