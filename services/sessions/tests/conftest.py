import pytest
from src.core.executor import SerialExecutor
from src.core.schemas.report import MetricReport, ReportWindow


@pytest.fixture
def serial_executor():
    """Executor running partitions inline, with one retry allowed."""
    return SerialExecutor(retries=2, retry_delay=0)


@pytest.fixture
def report_window():
    """Thirty day window starting 2015-6-1."""
    return ReportWindow(year=2015, month=6, day=1, period_days=30)


@pytest.fixture
def sample_report():
    return MetricReport(
        count=1259304,
        min=1,
        max=15,
        quantile_bounds={
            0.1: (1.0, 2.0),
            0.5: (1.0, 2.0),
            0.9: (2.0, 3.0),
            0.99: (5.0, 6.0),
        },
    )


@pytest.fixture
def abc_events():
    """Events of subject "abc" spread over two partitions, out of order."""
    return [
        [("abc", 39000, True), ("abc", 1000, True)],
        [("abc", 4000, True), ("abc", 1500, True)],
    ]
