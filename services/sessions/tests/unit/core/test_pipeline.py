import pytest
from src.core.pipeline import SessionMetricsPipeline
from src.jobs.metric_aggregator import MetricAggregator
from src.jobs.sessions_per_user import SessionsPerUser


@pytest.fixture
def pipeline(serial_executor):
    return SessionMetricsPipeline.with_default_jobs(MetricAggregator(serial_executor))


class TestSessionMetricsPipeline:
    """Test the three-metric pipeline over sessionized partitions."""

    def test_metrics_in_fixed_order(self, pipeline):
        results = pipeline.run([{"abc": [(1000, 1500), (4000,), (39000,)]}])

        assert [name for name, _ in results] == [
            "SessionsPerUser",
            "PageviewsPerSession",
            "SessionLength",
        ]

    def test_reference_scenario(self, pipeline):
        results = dict(pipeline.run([{"abc": [(1000, 1500), (4000,), (39000,)]}]))

        sessions_per_user = results["SessionsPerUser"]
        assert (sessions_per_user.count, sessions_per_user.min, sessions_per_user.max) == (1, 3, 3)

        pageviews = results["PageviewsPerSession"]
        assert (pageviews.count, pageviews.min, pageviews.max) == (3, 1, 2)

        length = results["SessionLength"]
        assert (length.count, length.min, length.max) == (1, 500, 500)
        assert length.bounds_for(0.5) == (500.0, 501.0)

    def test_metric_without_observations_is_not_available(self, pipeline):
        results = dict(pipeline.run([{"a": [(5,)]}, {"b": [(7,), (9000,)]}]))

        assert results["SessionLength"] is None
        assert results["SessionsPerUser"].count == 2
        assert results["PageviewsPerSession"].count == 3

    def test_duplicate_registration_is_rejected(self, pipeline):
        with pytest.raises(ValueError):
            pipeline.register_job(SessionsPerUser())
