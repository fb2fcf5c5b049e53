from datetime import date

from src.connectors.event_source import (
    InMemoryEventSource,
    TsvEventSource,
    TsvFilePartition,
    parse_line,
)
from src.core.schemas.event_source import EventRecord
from src.core.schemas.report import ReportWindow


def _write_day(base, day, name, lines):
    directory = base / f"year={day.year}" / f"month={day.month}" / f"day={day.day}"
    directory.mkdir(parents=True, exist_ok=True)
    (directory / name).write_text("".join(line + "\n" for line in lines))
    return directory / name


class TestParseLine:
    """Test parsing of TSV event lines."""

    def test_qualifying_line(self):
        assert parse_line("abc\t1000\ttrue\n") == EventRecord("abc", "1000", True)

    def test_flag_variants(self):
        assert parse_line("abc\t1\t1").is_qualifying
        assert parse_line("abc\t1\tTRUE").is_qualifying
        assert not parse_line("abc\t1\tfalse").is_qualifying

    def test_missing_fields_do_not_qualify(self):
        assert parse_line("abc\t1000") == EventRecord("abc", "1000", False)
        assert parse_line("abc") == EventRecord("abc", None, False)

    def test_empty_key_becomes_none(self):
        assert parse_line("\t1000\ttrue").key is None


class TestTsvEventSource:
    """Test day-partitioned file discovery."""

    def test_one_partition_per_file_within_window(self, tmp_path):
        _write_day(tmp_path, date(2015, 6, 1), "part-0.tsv", ["a\t1\ttrue"])
        _write_day(tmp_path, date(2015, 6, 1), "part-1.tsv", ["b\t2\ttrue"])
        _write_day(tmp_path, date(2015, 6, 2), "part-0.tsv", ["c\t3\ttrue"])
        _write_day(tmp_path, date(2015, 6, 3), "part-0.tsv", ["outside\t4\ttrue"])
        window = ReportWindow(year=2015, month=6, day=1, period_days=2)

        partitions = TsvEventSource(tmp_path).partitions(window)

        assert [list(p) for p in partitions] == [
            [EventRecord("a", "1", True)],
            [EventRecord("b", "2", True)],
            [EventRecord("c", "3", True)],
        ]

    def test_missing_days_are_skipped(self, tmp_path):
        _write_day(tmp_path, date(2015, 6, 2), "part-0.tsv", ["a\t1\ttrue"])
        window = ReportWindow(year=2015, month=6, day=1, period_days=3)

        partitions = TsvEventSource(tmp_path).partitions(window)

        assert len(partitions) == 1

    def test_day_path_layout(self, tmp_path):
        path = TsvEventSource(tmp_path).day_path(date(2015, 3, 30))

        assert path == tmp_path / "year=2015" / "month=3" / "day=30"

    def test_file_partition_is_reiterable(self, tmp_path):
        path = _write_day(tmp_path, date(2015, 6, 1), "p.tsv", ["a\t1\ttrue", "", "b\t2\tfalse"])
        partition = TsvFilePartition(path)

        assert list(partition) == list(partition)
        assert len(list(partition)) == 2


class TestInMemoryEventSource:
    def test_returns_records(self, report_window):
        source = InMemoryEventSource([[("a", 1, True)], [("b", "x", False)]])

        assert source.partitions(report_window) == [
            [EventRecord("a", 1, True)],
            [EventRecord("b", "x", False)],
        ]
