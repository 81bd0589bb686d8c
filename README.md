# multistore

Building blocks for a versioned, multi-store key/value database.

## Modules

- `multistore.memdb`: `MemDB`, an ordered, thread-safe in-memory database.
  It offers `get`, `has`, `set`, `set_sync`, `delete`, forward and reverse
  iterators over `[start, end)` (`MemIterator`), and write batches (`Batch`)
  from `new_batch()`. Keys must be non-empty and values must not be `None`.
- `multistore.mem`: `MemoryStore`, a store whose entries live only in memory
  and persist across commits. `commit()` and `last_commit_id()` return the
  empty `CommitID`. The module also defines `StoreType` and `CommitID`.
- `multistore.prefix`: `PrefixStore`, a view of a parent store limited to
  the keys under a prefix, with `PrefixIterator` hiding the prefix from
  keys. The helpers are `clone_append`, `prefix_end_bytes` and `strip_prefix`.
- `multistore.pruning_options`: `PruningStrategy`, `PruningOptions` and the
  constructors `new_pruning_options`, `new_custom_pruning_options` and
  `pruning_options_from_string`. Unknown strategy names give the default
  options. `PruningOptions.validate()` raises a `PruningOptionsError`
  subclass: `PruningIntervalZeroError`, `PruningIntervalTooSmallError` or
  `PruningKeepRecentTooSmallError`.
- `multistore.pruning_manager`: `PruningManager`, which works out the height
  up to which pruning may go and holds back snapshot heights. It persists
  those heights to its database and restores them with
  `load_snapshot_heights`. `load_pruning_snapshot_heights` and
  `int64_list_to_bytes` read and write that record. Negative stored heights
  raise `NegativeHeightsError`.
- `multistore.metrics`: `Metrics` sends timing `Sample`s, tagged with global
  `Label`s, to an `InMemorySink`. `NoOpMetrics` records nothing.
  `new_metrics` builds a `Metrics` from `[name, value]` pairs.
- `multistore.paths`: `parse_path` splits `/<store>[/<subpath>]`, and
  `require_proof` tells whether a subpath carries a proof. Only `/key` does.
- `multistore.metadata`: the latest-version record (`get_latest_version`,
  `flush_latest_version`), commit-info keys (`commit_info_key`), the
  protobuf `Int64Value` encoding (`encode_int64_value`,
  `decode_int64_value`), and `CommitDBStoreAdapter`. That adapter is a
  committable store over a plain database and always reports the fixed
  commit id `(-1, b"FAKE_HASH")`.
- `multistore.registry`: `StoreKey` and `StoreRegistry`. The registry covers
  mounting stores by unique key and name, write listeners, the trace writer
  and a merged tracing context, and pruning and snapshot-interval settings.
  Two `StoreKey`s are equal only if they are the same object.

## Installation

```
pip install .
```

## Examples

```python
from multistore.mem import MemoryStore, StoreType

store = MemoryStore()
store.set(b"key", b"value")
assert store.get(b"key") == b"value"
assert store.get_store_type() is StoreType.MEMORY
assert store.commit().is_zero()
```

```python
from multistore.memdb import MemDB
from multistore.prefix import PrefixStore

db = MemDB()
db.set(b"key1", b"value1")
db.set(b"key2", b"value2")
view = PrefixStore(db, b"key")
with view.iterator(None, None) as it:
    for key, value in it:
        print(key, value)   # b"1" b"value1", then b"2" b"value2"
```

```python
from multistore.memdb import MemDB
from multistore.pruning_manager import PruningManager
from multistore.pruning_options import PruningStrategy, new_pruning_options

manager = PruningManager(MemDB())
manager.options = new_pruning_options(PruningStrategy.EVERYTHING)
print(manager.get_pruning_height(10))   # 7
```

```python
from multistore.paths import parse_path

print(parse_path("/fizz/bang/baz"))   # ("fizz", "/bang/baz")
```

```python
from multistore.memdb import MemDB
from multistore.metadata import flush_latest_version, get_latest_version

db = MemDB()
with db.new_batch() as batch:
    flush_latest_version(batch, 5)
    batch.write_sync()
print(get_latest_version(db))   # 5
```

## What this package does not do

The package provides parts of a versioned multi-store, not the whole of one.
It has no root store that commits all mounted stores together or computes an
app hash. It cannot load or roll back to earlier versions, and it cannot
answer queries with proofs or take and restore snapshots. There are no
persistent versioned (tree-backed) stores and no cache-wrapping stores. All
data lives in memory; nothing is written to disk. `StoreRegistry` records
mounts and settings but does not create or open the stores themselves.

## Running the tests

```
pip install ".[test]"
pytest
```