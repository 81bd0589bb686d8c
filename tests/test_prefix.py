import os

import pytest

from multistore.mem import MemoryStore, StoreType
from multistore.prefix import (
    PrefixStore,
    clone_append,
    prefix_end_bytes,
    strip_prefix,
)


def _random_pairs():
    return [(os.urandom(32), os.urandom(32)) for _ in range(20)]


def _set_random_pairs(store):
    pairs = _random_pairs()
    for key, value in pairs:
        store.set(key, value)
    return pairs


def _check_item(itr, key, value):
    assert itr.key() == key
    assert itr.value() == value


def _check_next(itr, expected):
    itr.next()
    assert itr.valid() is expected


def _check_invalid(itr):
    assert itr.valid() is False
    with pytest.raises(RuntimeError):
        itr.key()
    with pytest.raises(RuntimeError):
        itr.value()
    with pytest.raises(RuntimeError):
        itr.next()


def _mock_store_with_stuff():
    store = MemoryStore()
    for key, value in [
        (b"key", b"value"),
        (b"key1", b"value1"),
        (b"key2", b"value2"),
        (b"key3", b"value3"),
        (b"something", b"else"),
        (b"k", b"val"),
        (b"ke", b"valu"),
        (b"kee", b"valuu"),
    ]:
        store.set(key, value)
    return store


def test_prefix_store_nested():
    base = MemoryStore()
    prefix = b"test"
    prefix_store = PrefixStore(base, prefix)
    prefix_prefix_store = PrefixStore(prefix_store, b"prefix")

    with pytest.raises(ValueError):
        prefix_store.get(None)
    with pytest.raises(ValueError):
        prefix_store.set(None, b"")

    pairs = _set_random_pairs(prefix_prefix_store)
    for key, value in pairs:
        assert prefix_prefix_store.has(key)
        assert prefix_prefix_store.get(key) == value
        assert prefix_store.has(b"prefix" + key)
        assert prefix_store.get(b"prefix" + key) == value
        assert base.has(prefix + b"prefix" + key)
        assert base.get(prefix + b"prefix" + key) == value

        prefix_prefix_store.delete(key)
        assert not prefix_prefix_store.has(key)
        assert prefix_prefix_store.get(key) is None
        assert not prefix_store.has(b"prefix" + key)
        assert prefix_store.get(b"prefix" + key) is None
        assert not base.has(prefix + b"prefix" + key)
        assert base.get(prefix + b"prefix" + key) is None


def test_store_type_comes_from_parent():
    assert PrefixStore(MemoryStore(), b"p").get_store_type() == StoreType.MEMORY


def test_set_nil_value_rejected():
    store = PrefixStore(MemoryStore(), b"p")
    with pytest.raises(ValueError, match="value is nil"):
        store.set(b"key", None)


def test_prefix_store_iterate_matches_base():
    base = MemoryStore()
    prefix = b"test"
    prefix_store = PrefixStore(base, prefix)
    _set_random_pairs(prefix_store)

    base_items = list(base.iterator(prefix, prefix_end_bytes(prefix)))
    prefix_items = list(prefix_store.iterator(None, None))

    assert len(prefix_items) == 20
    assert base_items == [(prefix + k, v) for k, v in prefix_items]


def test_clone_append():
    for key, value in _random_pairs():
        key = bytearray(key)
        value = bytearray(value)
        bz = clone_append(key, value)
        assert bz == bytes(key) + bytes(value)

        bz = clone_append(key, value)
        key[0] = (key[0] + 1) % 256
        assert bz != bytes(key) + bytes(value)

        bz = clone_append(key, value)
        value[0] = (value[0] + 1) % 256
        assert bz != bytes(key) + bytes(value)


def test_clone_append_with_none_tail():
    assert clone_append(b"ab", None) == b"ab"


def test_prefix_end_bytes():
    assert prefix_end_bytes(b"\xaa\xff\xff") == b"\xab"
    assert prefix_end_bytes(b"key") == b"kez"
    assert prefix_end_bytes(b"\xff\xff") is None
    assert prefix_end_bytes(b"") is None


def test_strip_prefix():
    assert strip_prefix(b"key1", b"key") == b"1"
    with pytest.raises(ValueError):
        strip_prefix(b"ke", b"key")


def test_iterator_edge_case_overflow():
    base = MemoryStore()
    prefix_store = PrefixStore(base, b"\xaa\xff\xff")
    for key in [
        b"\xaa\xff\xfe",
        b"\xaa\xff\xfe\x00",
        b"\xaa\xff\xff",
        b"\xaa\xff\xff\x00",
        b"\xab",
        b"\xab\x00",
        b"\xab\x00\x00",
    ]:
        base.set(key, b"")

    itr = prefix_store.iterator(None, None)
    assert itr.domain() == (None, None)
    _check_item(itr, b"", b"")
    _check_next(itr, True)
    _check_item(itr, b"\x00", b"")
    _check_next(itr, False)
    _check_invalid(itr)
    itr.close()


def test_reverse_iterator_edge_cases():
    base = MemoryStore()
    prefix_store = PrefixStore(base, b"\xaa\xff\xff")
    for key in [
        b"\xab\x00\x00",
        b"\xab\x00",
        b"\xab",
        b"\xaa\xff\xff\x00",
        b"\xaa\xff\xff",
        b"\xaa\xff\xfe\x00",
        b"\xaa\xff\xfe",
    ]:
        base.set(key, b"")

    itr = prefix_store.reverse_iterator(None, None)
    assert itr.domain() == (None, None)
    _check_item(itr, b"\x00", b"")
    _check_next(itr, True)
    _check_item(itr, b"", b"")
    _check_next(itr, False)
    _check_invalid(itr)
    itr.close()

    base = MemoryStore()
    prefix_store = PrefixStore(base, b"\xaa\x00\x00")
    for key in [
        b"\xab\x00\x01\x00\x00",
        b"\xab\x00\x01\x00",
        b"\xab\x00\x01",
        b"\xaa\x00\x00\x00",
        b"\xaa\x00\x00",
        b"\xa9\xff\xff\x00",
        b"\xa9\xff\xff",
    ]:
        base.set(key, b"")

    itr = prefix_store.reverse_iterator(None, None)
    assert itr.domain() == (None, None)
    _check_item(itr, b"\x00", b"")
    _check_next(itr, True)
    _check_item(itr, b"", b"")
    _check_next(itr, False)
    _check_invalid(itr)
    itr.close()


def test_prefix_db_simple():
    pstore = PrefixStore(_mock_store_with_stuff(), b"key")
    expectations = [
        (b"key", None),
        (b"", b"value"),
        (b"key1", None),
        (b"1", b"value1"),
        (b"key2", None),
        (b"2", b"value2"),
        (b"key3", None),
        (b"3", b"value3"),
        (b"something", None),
        (b"k", None),
        (b"ke", None),
        (b"kee", None),
    ]
    for key, expected in expectations:
        assert pstore.get(key) == expected


@pytest.mark.parametrize("start", [None, b""])
def test_prefix_db_iterator_full(start):
    pstore = PrefixStore(_mock_store_with_stuff(), b"key")
    itr = pstore.iterator(start, None)
    assert itr.domain() == (start, None)
    _check_item(itr, b"", b"value")
    _check_next(itr, True)
    _check_item(itr, b"1", b"value1")
    _check_next(itr, True)
    _check_item(itr, b"2", b"value2")
    _check_next(itr, True)
    _check_item(itr, b"3", b"value3")
    _check_next(itr, False)
    _check_invalid(itr)
    itr.close()


@pytest.mark.parametrize("start", [None, b""])
def test_prefix_db_iterator_empty_end(start):
    pstore = PrefixStore(_mock_store_with_stuff(), b"key")
    itr = pstore.iterator(start, b"")
    assert itr.domain() == (start, b"")
    _check_invalid(itr)
    itr.close()


@pytest.mark.parametrize("start", [None, b""])
def test_prefix_db_reverse_iterator_full(start):
    pstore = PrefixStore(_mock_store_with_stuff(), b"key")
    itr = pstore.reverse_iterator(start, None)
    assert itr.domain() == (start, None)
    _check_item(itr, b"3", b"value3")
    _check_next(itr, True)
    _check_item(itr, b"2", b"value2")
    _check_next(itr, True)
    _check_item(itr, b"1", b"value1")
    _check_next(itr, True)
    _check_item(itr, b"", b"value")
    _check_next(itr, False)
    _check_invalid(itr)
    itr.close()


def test_prefix_db_reverse_iterator_empty_end():
    pstore = PrefixStore(_mock_store_with_stuff(), b"key")
    itr = pstore.reverse_iterator(None, b"")
    assert itr.domain() == (None, b"")
    _check_invalid(itr)
    itr.close()


def test_prefix_db_reverse_iterator_empty_range():
    pstore = PrefixStore(_mock_store_with_stuff(), b"key")
    itr = pstore.reverse_iterator(b"", b"")
    _check_invalid(itr)
    itr.close()


def test_iterator_error_reports_invalid():
    pstore = PrefixStore(_mock_store_with_stuff(), b"key")
    itr = pstore.iterator(None, None)
    assert itr.error() is None
    for _ in range(4):
        itr.next()
    assert isinstance(itr.error(), RuntimeError)


def test_iterator_as_python_iterable():
    pstore = PrefixStore(_mock_store_with_stuff(), b"key")
    with pstore.iterator(None, None) as itr:
        items = list(itr)
    assert items == [
        (b"", b"value"),
        (b"1", b"value1"),
        (b"2", b"value2"),
        (b"3", b"value3"),
    ]