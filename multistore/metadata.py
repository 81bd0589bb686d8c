"""Root multi-store metadata records and a commit store that wraps a plain database."""

from __future__ import annotations

from typing import Any, Protocol

from multistore.mem import CommitID, StoreType
from multistore.pruning_options import (
    PruningOptions,
    PruningStrategy,
    new_pruning_options,
)

LATEST_VERSION_KEY = b"s/latest"
COMMIT_INFO_KEY_FMT = "s/%d"

_FAKE_COMMIT_HASH = b"FAKE_HASH"

_INT64_MIN = -(1 << 63)
_INT64_MAX = (1 << 63) - 1
_UINT64_MASK = (1 << 64) - 1

_WIRE_VARINT = 0
_WIRE_FIXED64 = 1
_WIRE_BYTES = 2
_WIRE_FIXED32 = 5


class _Getter(Protocol):
    def get(self, key: bytes) -> bytes | None: ...


class _Setter(Protocol):
    def set(self, key: bytes, value: bytes) -> None: ...


def commit_info_key(version: int) -> bytes:
    """The database key under which the commit info of a version is kept."""
    return (COMMIT_INFO_KEY_FMT % version).encode()


def _encode_varint(value: int) -> bytes:
    out = bytearray()
    while True:
        low = value & 0x7F
        value >>= 7
        if value:
            out.append(low | 0x80)
        else:
            out.append(low)
            return bytes(out)


def _decode_varint(data: bytes, pos: int) -> tuple[int, int]:
    result = 0
    shift = 0
    while True:
        if pos >= len(data):
            raise ValueError("truncated varint")
        if shift >= 70:
            raise ValueError("varint is too long")
        byte = data[pos]
        pos += 1
        result |= (byte & 0x7F) << shift
        shift += 7
        if not byte & 0x80:
            return result & _UINT64_MASK, pos


def encode_int64_value(value: int) -> bytes:
    """Encode value as a protobuf Int64Value message (field 1, varint)."""
    if not _INT64_MIN <= value <= _INT64_MAX:
        raise ValueError(f"value {value} does not fit in a signed 64-bit integer")
    if value == 0:
        return b""
    return b"\x08" + _encode_varint(value & _UINT64_MASK)


def decode_int64_value(data: bytes) -> int:
    """Decode a protobuf Int64Value message; unknown fields are skipped."""
    data = bytes(data)
    result = 0
    pos = 0
    while pos < len(data):
        tag, pos = _decode_varint(data, pos)
        field_number, wire_type = tag >> 3, tag & 0x7
        if field_number == 0:
            raise ValueError("invalid field number 0")
        if wire_type == _WIRE_VARINT:
            raw, pos = _decode_varint(data, pos)
            if field_number == 1:
                result = raw - (1 << 64) if raw > _INT64_MAX else raw
        elif wire_type == _WIRE_FIXED64:
            pos += 8
        elif wire_type == _WIRE_FIXED32:
            pos += 4
        elif wire_type == _WIRE_BYTES:
            length, pos = _decode_varint(data, pos)
            pos += length
        else:
            raise ValueError(f"unsupported wire type {wire_type}")
        if pos > len(data):
            raise ValueError("truncated field")
    return result


def get_latest_version(db: _Getter) -> int:
    """The latest committed version recorded in db, or 0 if none was recorded."""
    data = db.get(LATEST_VERSION_KEY)
    if data is None:
        return 0
    return decode_int64_value(data)


def flush_latest_version(batch: _Setter, version: int) -> None:
    """Queue the latest-version record into a batch."""
    batch.set(LATEST_VERSION_KEY, encode_int64_value(version))


class CommitDBStoreAdapter:
    """A committable store over a plain database, for simulation and debugging.

    It computes no real commit hash and cannot load older state.
    """

    def __init__(self, db: Any) -> None:
        self.db = db

    def get_store_type(self) -> StoreType:
        """This store's type."""
        return StoreType.DB

    def get(self, key: bytes) -> bytes | None:
        """Return the value under key, or None."""
        return self.db.get(key)

    def has(self, key: bytes) -> bool:
        """Whether key is present."""
        return self.db.has(key)

    def set(self, key: bytes, value: bytes) -> None:
        """Store value under key; neither may be None."""
        if key is None:
            raise ValueError("key is nil")
        if value is None:
            raise ValueError("value is nil")
        self.db.set(key, value)

    def delete(self, key: bytes) -> None:
        """Remove key."""
        self.db.delete(key)

    def iterator(self, start: bytes | None = None, end: bytes | None = None) -> Any:
        """Iterate ascending over [start, end)."""
        return self.db.iterator(start, end)

    def reverse_iterator(self, start: bytes | None = None, end: bytes | None = None) -> Any:
        """Iterate descending over [start, end)."""
        return self.db.reverse_iterator(start, end)

    def commit(self) -> CommitID:
        """Return a fixed placeholder commit id."""
        return CommitID(-1, _FAKE_COMMIT_HASH)

    def last_commit_id(self) -> CommitID:
        """Return the same fixed placeholder commit id."""
        return CommitID(-1, _FAKE_COMMIT_HASH)

    def working_hash(self) -> bytes:
        """Return the fixed placeholder hash."""
        return _FAKE_COMMIT_HASH

    def set_pruning(self, options: PruningOptions) -> None:
        """Ignore pruning options; they belong to the root multi-store."""

    def get_pruning(self) -> PruningOptions:
        """Pruning options cannot be set on this store."""
        return new_pruning_options(PruningStrategy.UNDEFINED)