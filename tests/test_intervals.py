from datetime import UTC, datetime

from gitlab_app.analytics.intervals import IntervalIndex, intervals_from_records
from gitlab_app.core.models import Interval


def _sample_records():
    return [
        {"id": "gid://gitlab/Iteration/1", "title": "S1", "startDate": "2024-01-01", "dueDate": "2024-01-14"},
        {"id": "gid://gitlab/Iteration/2", "title": None, "startDate": "2024-01-10", "dueDate": "2024-01-24"},
        {"id": "gid://gitlab/Iteration/3", "title": "Open", "startDate": "2024-02-01", "dueDate": None},
    ]


def test_labels_fall_back_to_start_date():
    intervals = intervals_from_records(_sample_records())
    assert [i.label for i in intervals] == ["S1", "2024-01-10", "Open"]


def test_windows_containing_returns_all_overlaps_in_order():
    index = IntervalIndex.build(intervals_from_records(_sample_records()))
    ts = datetime(2024, 1, 12, tzinfo=UTC)
    assert [i.label for i in index.windows_containing(ts)] == ["S1", "2024-01-10"]
    assert index.first_window_containing(ts).label == "S1"


def test_bounds_are_inclusive():
    index = IntervalIndex.build(intervals_from_records(_sample_records()))
    assert [i.label for i in index.windows_containing(datetime(2024, 1, 1, tzinfo=UTC))] == ["S1"]
    assert [i.label for i in index.windows_containing(datetime(2024, 1, 14, tzinfo=UTC))] == ["S1", "2024-01-10"]
    assert index.windows_containing(datetime(2023, 12, 31, 23, 59, tzinfo=UTC)) == []


def test_unbounded_interval_never_matches():
    index = IntervalIndex.build(intervals_from_records(_sample_records()))
    assert index.windows_containing(datetime(2024, 2, 5, tzinfo=UTC)) == []
    assert index.first_window_containing(datetime(2024, 2, 5, tzinfo=UTC)) is None


def test_exclude_ids_and_lookup():
    index = IntervalIndex.build(
        intervals_from_records(_sample_records()),
        exclude_ids={"gid://gitlab/Iteration/2"},
    )
    assert index.labels() == ["S1", "Open"]
    assert index.label_for("gid://gitlab/Iteration/1") == "S1"
    assert index.label_for("gid://gitlab/Iteration/2") is None
    assert index.label_for(None) is None


def test_sorted_by_start_puts_unbounded_last():
    index = IntervalIndex(
        [
            Interval("c", "C"),
            Interval("b", "B", datetime(2024, 3, 1, tzinfo=UTC), datetime(2024, 3, 14, tzinfo=UTC)),
            Interval("a", "A", datetime(2024, 1, 1, tzinfo=UTC), datetime(2024, 1, 14, tzinfo=UTC)),
        ]
    )
    assert [i.label for i in index.sorted_by_start()] == ["A", "B", "C"]
