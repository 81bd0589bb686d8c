"""A view of a key-value store limited to the keys under one prefix."""

from __future__ import annotations

from typing import Any, Iterator as TypingIterator


def clone_append(bz: bytes | None, tail: bytes | None) -> bytes:
    """Return a new byte string holding bz followed by tail."""
    return bytes(bz or b"") + bytes(tail or b"")


def prefix_end_bytes(prefix: bytes | None) -> bytes | None:
    """Return the smallest key greater than every key starting with prefix.

    None means there is no such bound (empty prefix or all 0xFF bytes).
    """
    if not prefix:
        return None
    end = bytearray(prefix)
    while end:
        if end[-1] != 0xFF:
            end[-1] += 1
            return bytes(end)
        end.pop()
    return None


def strip_prefix(key: bytes, prefix: bytes) -> bytes:
    """Remove prefix from key; the key must start with it."""
    if not bytes(key).startswith(bytes(prefix)):
        raise ValueError(f"key {bytes(key)!r} does not start with prefix {bytes(prefix)!r}")
    return bytes(key[len(prefix) :])


class PrefixIterator:
    """Wraps a parent iterator and hides the prefix from its keys."""

    def __init__(
        self, prefix: bytes, start: bytes | None, end: bytes | None, parent: Any
    ) -> None:
        self._prefix = prefix
        self._start = start
        self._end = end
        self._iter = parent
        self._valid = parent.valid() and parent.key().startswith(prefix)

    def domain(self) -> tuple[bytes | None, bytes | None]:
        """The start and end given when the iterator was made, without the prefix."""
        return self._start, self._end

    def valid(self) -> bool:
        """Whether the iterator points at an item under the prefix."""
        return self._valid and self._iter.valid()

    def _require_valid(self, action: str) -> None:
        if not self._valid:
            raise RuntimeError(f"prefixIterator invalid, cannot call {action}")

    def next(self) -> None:
        """Move to the following item."""
        self._require_valid("Next()")
        self._iter.next()
        if not self._iter.valid() or not self._iter.key().startswith(self._prefix):
            self._valid = False

    def key(self) -> bytes:
        """The current key with the prefix removed."""
        self._require_valid("Key()")
        return strip_prefix(self._iter.key(), self._prefix)

    def value(self) -> bytes:
        """The current value."""
        self._require_valid("Value()")
        return self._iter.value()

    def close(self) -> None:
        """Close the parent iterator."""
        self._iter.close()

    def error(self) -> Exception | None:
        """An error if the iterator is no longer valid, else None."""
        if not self.valid():
            return RuntimeError("invalid prefixIterator")
        return None

    def __iter__(self) -> TypingIterator[tuple[bytes, bytes]]:
        while self.valid():
            yield self.key(), self.value()
            self.next()

    def __enter__(self) -> PrefixIterator:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()


class PrefixStore:
    """Gives access only to the keys of a parent store that start with a prefix."""

    def __init__(self, parent: Any, prefix: bytes) -> None:
        self.parent = parent
        self.prefix = bytes(prefix)

    def _key(self, key: bytes | None) -> bytes:
        if key is None:
            raise ValueError("nil key on Store")
        return clone_append(self.prefix, key)

    def _bounds(self, start: bytes | None, end: bytes | None) -> tuple[bytes, bytes | None]:
        new_start = clone_append(self.prefix, start)
        new_end = prefix_end_bytes(self.prefix) if end is None else clone_append(self.prefix, end)
        return new_start, new_end

    def get_store_type(self) -> Any:
        """The parent's store type."""
        return self.parent.get_store_type()

    def get(self, key: bytes) -> bytes | None:
        """Return the value under key, or None."""
        return self.parent.get(self._key(key))

    def has(self, key: bytes) -> bool:
        """Whether key is present."""
        return self.parent.has(self._key(key))

    def set(self, key: bytes, value: bytes) -> None:
        """Store value under key; neither may be None."""
        if key is None:
            raise ValueError("key is nil")
        if value is None:
            raise ValueError("value is nil")
        self.parent.set(self._key(key), value)

    def delete(self, key: bytes) -> None:
        """Remove key."""
        self.parent.delete(self._key(key))

    def iterator(self, start: bytes | None = None, end: bytes | None = None) -> PrefixIterator:
        """Iterate ascending over [start, end) within the prefix."""
        new_start, new_end = self._bounds(start, end)
        return PrefixIterator(self.prefix, start, end, self.parent.iterator(new_start, new_end))

    def reverse_iterator(
        self, start: bytes | None = None, end: bytes | None = None
    ) -> PrefixIterator:
        """Iterate descending over [start, end) within the prefix."""
        new_start, new_end = self._bounds(start, end)
        return PrefixIterator(
            self.prefix, start, end, self.parent.reverse_iterator(new_start, new_end)
        )