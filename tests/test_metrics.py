import pytest

from multistore.metrics import (
    InMemorySink,
    Label,
    Metrics,
    NoOpMetrics,
    StoreMetrics,
    new_metrics,
)


def test_new_metrics_parses_labels():
    metrics = new_metrics([["chain", "local"], ["node", "alpha"]])
    assert metrics.labels == (Label("chain", "local"), Label("node", "alpha"))


def test_new_metrics_without_labels():
    metrics = new_metrics([])
    assert metrics.labels == ()


def test_new_metrics_rejects_short_label():
    with pytest.raises(ValueError):
        new_metrics([["only-name"]])


def test_measure_since_records_sample():
    sink = InMemorySink()
    metrics = new_metrics([["chain", "local"]], sink)
    metrics.measure_since("store", "iavl", "get")
    samples = sink.samples
    assert len(samples) == 1
    assert samples[0].keys == ("store", "iavl", "get")
    assert samples[0].labels == (Label("chain", "local"),)
    assert samples[0].value >= 0.0


def test_samples_accumulate_in_order():
    sink = InMemorySink()
    metrics = Metrics(sink=sink)
    metrics.measure_since("a")
    metrics.measure_since("b")
    assert [s.keys for s in sink.samples] == [("a",), ("b",)]


def test_add_sample_direct():
    sink = InMemorySink()
    sink.add_sample(["x", "y"], 2.5, [Label("n", "v")])
    assert sink.samples[0].value == 2.5
    assert sink.samples[0].keys == ("x", "y")


def test_samples_returns_copy():
    sink = InMemorySink()
    sink.add_sample(["x"], 1, [])
    snapshot = sink.samples
    snapshot.clear()
    assert len(sink.samples) == 1


def test_noop_metrics_records_nothing_and_satisfies_protocol():
    noop = NoOpMetrics()
    assert noop.measure_since("store", "get") is None
    assert isinstance(noop, StoreMetrics)
    assert isinstance(new_metrics([]), StoreMetrics)