import pytest
from prometheus_client import CollectorRegistry
from shared.metrics import export_textfile, get_counter, get_histogram


@pytest.fixture
def registry():
    return CollectorRegistry()


class TestMetricHelpers:
    def test_counter_is_prefixed_with_service(self, registry):
        counter = get_counter("rows_total", "Rows", "sessions", registry=registry)
        counter.inc(2)

        assert registry.get_sample_value("sessions_rows_total") == 2

    def test_existing_prefix_is_not_doubled(self, registry):
        get_counter("sessions_runs_total", "Runs", "sessions", registry=registry).inc()

        assert registry.get_sample_value("sessions_runs_total") == 1

    def test_labelled_counter(self, registry):
        counter = get_counter(
            "dropped_total", "Dropped", "sessions", labelnames=("reason",), registry=registry
        )
        counter.labels(reason="missing_key").inc()

        assert (
            registry.get_sample_value("sessions_dropped_total", {"reason": "missing_key"})
            == 1
        )

    def test_invalid_name(self, registry):
        with pytest.raises(ValueError):
            get_counter("Bad-Name", "Bad", registry=registry)

    def test_histogram_buckets(self, registry):
        histogram = get_histogram(
            "duration_seconds", "Duration", "sessions", buckets=[1, 10], registry=registry
        )
        histogram.observe(5)

        assert (
            registry.get_sample_value("sessions_duration_seconds_bucket", {"le": "10.0"})
            == 1
        )


def test_export_textfile(registry, tmp_path):
    get_counter("rows_total", "Rows", "sessions", registry=registry).inc()
    path = tmp_path / "sessions.prom"

    export_textfile(str(path), registry)

    assert "sessions_rows_total 1.0" in path.read_text()
