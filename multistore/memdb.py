"""A sorted in-memory key-value database with ordered iteration and batches."""

from __future__ import annotations

import bisect
import threading
from typing import Iterator as TypingIterator


def _check_key(key: bytes | None) -> bytes:
    if key is None:
        raise ValueError("key cannot be nil")
    if len(key) == 0:
        raise ValueError("key cannot be empty")
    return bytes(key)


def _check_value(value: bytes | None) -> bytes:
    if value is None:
        raise ValueError("value cannot be nil")
    return bytes(value)


def _check_bound(bound: bytes | None) -> bytes | None:
    if bound is None:
        return None
    if len(bound) == 0:
        raise ValueError("key cannot be empty")
    return bytes(bound)


class MemIterator:
    """Iterates over a fixed view of key/value pairs taken when it was created."""

    def __init__(
        self,
        items: list[tuple[bytes, bytes]],
        start: bytes | None,
        end: bytes | None,
    ) -> None:
        self._start = start
        self._end = end
        self._source = iter(items)
        self._current = next(self._source, None)
        self._error: Exception | None = None

    def domain(self) -> tuple[bytes | None, bytes | None]:
        """The start and end bounds this iterator was created with."""
        return self._start, self._end

    def valid(self) -> bool:
        """Whether the iterator points at an item."""
        return self._current is not None

    def _require_valid(self, action: str) -> tuple[bytes, bytes]:
        if self._current is None:
            self._error = RuntimeError(f"iterator is invalid, cannot call {action}")
            raise self._error
        return self._current

    def next(self) -> None:
        """Move to the following item."""
        self._require_valid("next()")
        self._current = next(self._source, None)

    def key(self) -> bytes:
        """The key of the current item."""
        return self._require_valid("key()")[0]

    def value(self) -> bytes:
        """The value of the current item."""
        return self._require_valid("value()")[1]

    def close(self) -> None:
        """Release the iterator; it becomes invalid."""
        self._current = None
        self._source = iter(())

    def error(self) -> Exception | None:
        """The last misuse met while iterating, if any."""
        return self._error

    def __iter__(self) -> TypingIterator[tuple[bytes, bytes]]:
        while self.valid():
            item = self._require_valid("key()")
            yield item
            self.next()

    def __enter__(self) -> MemIterator:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()


class Batch:
    """A group of writes applied to a MemDB at once."""

    def __init__(self, db: MemDB) -> None:
        self._db = db
        self._ops: list[tuple[bytes, bytes | None]] = []
        self._closed = False

    def _require_open(self) -> None:
        if self._closed:
            raise RuntimeError("batch has been written or closed")

    def set(self, key: bytes, value: bytes) -> None:
        """Queue a write."""
        key = _check_key(key)
        value = _check_value(value)
        self._require_open()
        self._ops.append((key, value))

    def delete(self, key: bytes) -> None:
        """Queue a deletion."""
        key = _check_key(key)
        self._require_open()
        self._ops.append((key, None))

    def write(self) -> None:
        """Apply the queued operations and close the batch."""
        self._require_open()
        self._db._apply(self._ops)
        self.close()

    def write_sync(self) -> None:
        """Apply the queued operations; memory needs no flush."""
        self.write()

    def close(self) -> None:
        """Discard queued operations; closing twice is harmless."""
        self._ops = []
        self._closed = True

    def __enter__(self) -> Batch:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()


class MemDB:
    """An ordered, thread-safe in-memory key-value database."""

    def __init__(self) -> None:
        self._keys: list[bytes] = []
        self._data: dict[bytes, bytes] = {}
        self._lock = threading.RLock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._keys)

    def get(self, key: bytes) -> bytes | None:
        """Return the value stored under key, or None."""
        key = _check_key(key)
        with self._lock:
            return self._data.get(key)

    def has(self, key: bytes) -> bool:
        """Whether a value is stored under key."""
        key = _check_key(key)
        with self._lock:
            return key in self._data

    def _set_unlocked(self, key: bytes, value: bytes) -> None:
        if key not in self._data:
            bisect.insort(self._keys, key)
        self._data[key] = value

    def _delete_unlocked(self, key: bytes) -> None:
        if key in self._data:
            del self._data[key]
            del self._keys[bisect.bisect_left(self._keys, key)]

    def set(self, key: bytes, value: bytes) -> None:
        """Store value under key."""
        key = _check_key(key)
        value = _check_value(value)
        with self._lock:
            self._set_unlocked(key, value)

    def set_sync(self, key: bytes, value: bytes) -> None:
        """Store value under key; memory needs no flush."""
        self.set(key, value)

    def delete(self, key: bytes) -> None:
        """Remove key if present."""
        key = _check_key(key)
        with self._lock:
            self._delete_unlocked(key)

    def delete_sync(self, key: bytes) -> None:
        """Remove key if present; memory needs no flush."""
        self.delete(key)

    def _apply(self, ops: list[tuple[bytes, bytes | None]]) -> None:
        with self._lock:
            for key, value in ops:
                if value is None:
                    self._delete_unlocked(key)
                else:
                    self._set_unlocked(key, value)

    def _range(self, start: bytes | None, end: bytes | None) -> list[tuple[bytes, bytes]]:
        with self._lock:
            lo = 0 if start is None else bisect.bisect_left(self._keys, start)
            hi = len(self._keys) if end is None else bisect.bisect_left(self._keys, end)
            return [(k, self._data[k]) for k in self._keys[lo:hi]]

    def iterator(self, start: bytes | None = None, end: bytes | None = None) -> MemIterator:
        """Iterate ascending over keys in [start, end); None means unbounded."""
        start, end = _check_bound(start), _check_bound(end)
        return MemIterator(self._range(start, end), start, end)

    def reverse_iterator(
        self, start: bytes | None = None, end: bytes | None = None
    ) -> MemIterator:
        """Iterate descending over keys in [start, end); None means unbounded."""
        start, end = _check_bound(start), _check_bound(end)
        items = self._range(start, end)
        items.reverse()
        return MemIterator(items, start, end)

    def new_batch(self) -> Batch:
        """Start a batch of writes."""
        return Batch(self)