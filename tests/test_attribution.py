import math
import warnings
from datetime import UTC, datetime

import pytest

from gitlab_app.analytics.attribution import attribute_time, member_totals, sprint_workload
from gitlab_app.analytics.intervals import IntervalIndex, intervals_from_records
from gitlab_app.core.errors import EmptyIntervalSetWarning
from gitlab_app.core.models import Issue, IterationRef, TimeLogEntry


def _ts(day, month=1):
    return datetime(2024, month, day, tzinfo=UTC)


def _index():
    return IntervalIndex.build(
        intervals_from_records(
            [
                {"id": "it-1", "title": "S1", "startDate": "2024-01-01", "dueDate": "2024-01-14"},
                {"id": "it-2", "title": "S2", "startDate": "2024-01-10", "dueDate": "2024-01-24"},
            ]
        )
    )


def _log(seconds, day, owner="carol"):
    return TimeLogEntry(seconds=seconds, logged_at=_ts(day), owner_username=owner)


def test_two_assignees_split_evenly():
    index = IntervalIndex.build(
        intervals_from_records([{"id": "it-1", "title": "S1", "startDate": "2024-01-01", "dueDate": "2024-01-14"}])
    )
    issue = Issue(id="i1", title="Feature", assignees=("alice", "bob"), time_logs=[_log(7200, 5)])
    out = attribute_time([issue], index)
    assert out.per_member["alice"]["S1"] == 3600
    assert out.per_member["bob"]["S1"] == 3600
    assert out.per_interval["S1"] == 7200
    assert out.total_seconds == 7200
    assert out.issues_with_logs_count == 1


def test_three_way_split_sums_back():
    issue = Issue(id="i1", title="x", assignees=("a", "b", "c"), time_logs=[_log(1000, 3)])
    out = attribute_time([issue], _index())
    shares = [out.per_member[m]["S1"] for m in ("a", "b", "c")]
    assert all(share == 1000 / 3 for share in shares)
    assert math.isclose(sum(shares), 1000)


def test_unassigned_issue_credits_log_owner():
    issue = Issue(id="i1", title="x", time_logs=[_log(600, 3, owner="dave"), _log(300, 4, owner="erin")])
    out = attribute_time([issue], _index())
    assert out.per_member == {"dave": {"S1": 600}, "erin": {"S1": 300}}


def test_overlapping_windows_count_once_per_window():
    issue = Issue(id="i1", title="x", assignees=("alice",), time_logs=[_log(1800, 12), _log(900, 2)])
    out = attribute_time([issue], _index())
    assert out.per_interval == {"S1": 2700, "S2": 1800}
    assert out.per_member["alice"] == {"S1": 2700, "S2": 1800}
    # multiplicity preserved: per-interval sum = seconds x matched windows
    assert sum(out.per_interval.values()) == 1800 * 2 + 900
    assert out.total_seconds == 2700


def test_entry_outside_all_windows_only_counts_in_total():
    issues = [
        Issue(id="i1", title="x", assignees=("alice",), time_logs=[_log(100, 5), _log(50, 28)]),
        Issue(id="i2", title="no logs"),
    ]
    out = attribute_time(issues, _index())
    assert out.total_seconds == 150
    assert out.per_interval == {"S1": 100}
    assert out.issues_with_logs_count == 1


def test_no_matching_window_warns_and_returns_empty_maps():
    issue = Issue(id="i1", title="x", time_logs=[_log(100, 28)])
    with pytest.warns(EmptyIntervalSetWarning):
        out = attribute_time([issue], _index())
    assert out.per_interval == {}
    assert out.per_member == {}
    assert out.total_seconds == 100


def test_no_logs_does_not_warn():
    with warnings.catch_warnings():
        warnings.simplefilter("error")
        out = attribute_time([Issue(id="i1", title="x")], _index())
    assert out.total_seconds == 0


def test_member_totals_ignores_windows_and_sorts():
    issues = [
        Issue(id="i1", title="x", assignees=("alice", "bob"), time_logs=[_log(7200, 28)]),
        Issue(id="i2", title="y", time_logs=[_log(10800, 5, owner="carol")]),
    ]
    totals = member_totals(issues)
    assert list(totals) == ["carol", "alice", "bob"]
    assert totals == {"carol": 10800, "alice": 3600, "bob": 3600}


def test_sprint_workload_uses_issue_iteration():
    issues = [
        Issue(id="i1", title="x", weight=3, iteration=IterationRef("it-2"), time_logs=[_log(3600, 28)]),
        Issue(id="i2", title="y", weight=None, iteration=IterationRef("it-2"), time_logs=[_log(1800, 2)]),
        Issue(id="i3", title="z", weight=5, iteration=IterationRef("unknown")),
    ]
    out = sprint_workload(issues, _index())
    assert list(out) == ["S1", "S2"]
    assert out["S1"].total_weight == 0 and out["S1"].total_seconds == 0
    assert out["S2"].total_weight == 3
    assert out["S2"].total_seconds == 5400


def test_attribution_is_idempotent():
    issues = [Issue(id="i1", title="x", assignees=("a", "b"), time_logs=[_log(500, 12)])]
    index = _index()
    assert attribute_time(issues, index) == attribute_time(issues, index)


def test_sprint_workload_counts_repeated_iteration_once():
    record = {"id": "it-1", "title": "S1", "startDate": "2024-01-01", "dueDate": "2024-01-14"}
    index = IntervalIndex.build(intervals_from_records([record, dict(record)]))
    issues = [Issue(id="i1", title="x", weight=3, iteration=IterationRef("it-1"), time_logs=[_log(3600, 5)])]
    out = sprint_workload(issues, index)
    assert list(out) == ["S1"]
    assert out["S1"].total_weight == 3
    assert out["S1"].total_seconds == 3600
