import threading

from metriccatcher.ingest.decoder import MetricUpdate
from metriccatcher.metrics.kinds import Counter, Gauge, Histogram
from metriccatcher.metrics.registry import MetricName, MetricRegistry
from metriccatcher.metrics.types import MetricKind


def test_name_decomposition_three_or_more_segments() -> None:
    assert MetricName.from_dotted("app.web.requests") == MetricName("app", "web", "requests")
    assert MetricName.from_dotted("app.web.requests.2xx.total") == MetricName(
        "app", "web", "requests.2xx.total"
    )


def test_name_decomposition_short_names() -> None:
    assert MetricName.from_dotted("singleword") == MetricName("singleword", "", "")
    assert MetricName.from_dotted("two.parts") == MetricName("two.parts", "", "")


def test_counter_sequence_through_registry(registry) -> None:
    values = []
    for value in (5, -2, 0):
        registry.update("app.web.requests", "counter", value)
        values.append(registry.get("app.web.requests").count)

    assert values == [5, 3, 0]
    assert registry.metric_name("app.web.requests") == MetricName("app", "web", "requests")


def test_single_word_gauge(registry) -> None:
    registry.update("singleword", "gauge", 42)

    [snapshot] = registry.export()
    assert (snapshot.group, snapshot.category, snapshot.short_name) == ("singleword", "", "")
    assert snapshot.kind is MetricKind.GAUGE
    assert snapshot.values == {"value": 42}


def test_kind_is_authoritative_only_at_creation(registry) -> None:
    registry.update("app.web.load", "gauge", 10)
    registry.update("app.web.load", "counter", 3)

    metric = registry.get("app.web.load")
    assert isinstance(metric, Gauge)
    assert metric.value == 3


def test_biased_flag_fixed_for_entry_lifetime(registry) -> None:
    registry.update("svc.a.latency", "histogram", 10, biased=True)
    registry.update("svc.b.latency", "histogram", 10)
    for value in (0, 5, 1_000_000):
        registry.update("svc.a.latency", "histogram", value, biased=False)
        registry.update("svc.b.latency", "histogram", value, biased=True)

    biased = registry.get("svc.a.latency")
    unbiased = registry.get("svc.b.latency")
    assert isinstance(biased, Histogram) and biased.biased is True
    assert isinstance(unbiased, Histogram) and unbiased.biased is False
    assert biased.count == 4 and unbiased.count == 4


def test_unknown_kind_is_a_noop(registry) -> None:
    assert registry.get_or_create("app.web.odd", "sparkline") is None
    assert registry.update("app.web.odd", "sparkline", 1) is False
    assert "app.web.odd" not in registry
    assert len(registry) == 0


def test_lru_eviction_removes_least_recently_used(clock) -> None:
    registry = MetricRegistry(max_metrics=3, clock=clock)
    registry.update("a.x.one", "counter", 1)
    registry.update("b.x.two", "counter", 1)
    registry.update("c.x.three", "counter", 1)
    registry.update("a.x.one", "counter", 1)

    registry.update("d.x.four", "counter", 1)

    names = {snapshot.name for snapshot in registry.export()}
    assert names == {"a.x.one", "c.x.three", "d.x.four"}
    assert registry.evictions == 1


def test_evicted_name_is_recreated_fresh(clock) -> None:
    registry = MetricRegistry(max_metrics=1, clock=clock)
    registry.update("first", "counter", 7)
    registry.update("second", "counter", 1)
    registry.update("first", "gauge", 2)

    assert isinstance(registry.get("first"), Gauge)
    assert "second" not in registry


def test_apply_counts_only_effective_updates(registry) -> None:
    applied = registry.apply(
        [
            MetricUpdate(name="app.web.requests", kind="counter", value=1),
            MetricUpdate(name="app.web.odd", kind="sparkline", value=1),
            MetricUpdate(name="app.web.requests", kind="counter", value=2),
        ]
    )
    assert applied == 2
    assert isinstance(registry.get("app.web.requests"), Counter)
    assert registry.get("app.web.requests").count == 3


def test_export_while_ingesting_from_another_thread(clock) -> None:
    registry = MetricRegistry(max_metrics=20, clock=clock)
    errors: list[Exception] = []
    done = threading.Event()

    def _reporter() -> None:
        try:
            while not done.is_set():
                for snapshot in registry.export():
                    assert snapshot.values is not None
        except Exception as exc:  # pragma: no cover - reported below
            errors.append(exc)

    reader = threading.Thread(target=_reporter)
    reader.start()
    for i in range(3000):
        registry.update(f"app.load.m{i % 40}", "histogram", i)
    done.set()
    reader.join()

    assert errors == []
    assert len(registry) == 20
