from datetime import UTC, datetime

import pytest

from gitlab_app.core.errors import MalformedRecordError
from gitlab_app.core.mappers import (
    map_issue,
    map_issues,
    map_iteration,
    map_iterations,
    map_merge_request,
    map_merge_requests,
    parse_timestamp,
)
from gitlab_app.core.models import PipelineStatus


def _raw_issue(**overrides):
    raw = {
        "id": "gid://gitlab/Issue/101",
        "title": "Build pipeline",
        "weight": 3,
        "createdAt": "2024-01-01T09:00:00Z",
        "closedAt": None,
        "iteration": {"id": "gid://gitlab/Iteration/1", "title": "S1", "startDate": "2024-01-01"},
        "assignees": {"nodes": [{"username": "alice"}, {"username": "bob"}, {"username": "alice"}]},
        "timelogs": {
            "nodes": [
                {"timeSpent": 3600, "spentAt": "2024-01-02T10:00:00Z", "user": {"username": "alice"}},
                {"timeSpent": 0, "spentAt": "2024-01-02T10:00:00Z", "user": {"username": "alice"}},
                {"timeSpent": 60, "spentAt": "not a date", "user": {"username": "bob"}},
            ]
        },
        "blockedByIssues": {"nodes": [{"id": "gid://gitlab/Issue/7", "closedAt": "2024-01-03T00:00:00Z"}]},
    }
    raw.update(overrides)
    return raw


def test_parse_timestamp_is_utc_aware():
    assert parse_timestamp("2024-01-05") == datetime(2024, 1, 5, tzinfo=UTC)
    assert parse_timestamp("2024-01-05T12:00:00+02:00") == datetime(2024, 1, 5, 10, tzinfo=UTC)
    assert parse_timestamp("garbage") is None
    assert parse_timestamp(None) is None


def test_map_issue_fields_and_dropped_logs():
    issue, dropped = map_issue(_raw_issue())
    assert issue.assignees == ("alice", "bob")
    assert issue.weight == 3.0
    assert [e.seconds for e in issue.time_logs] == [3600.0]
    assert dropped == 2
    assert issue.blocked_by[0].closed_at == datetime(2024, 1, 3, tzinfo=UTC)
    assert issue.iteration.label == "S1"
    assert issue.is_open


def test_missing_nested_connections_are_empty():
    raw = {"id": "gid://gitlab/Issue/5", "createdAt": "2024-01-01", "title": None, "assignees": None, "timelogs": None}
    issue, dropped = map_issue(raw)
    assert issue.assignees == ()
    assert issue.time_logs == []
    assert issue.blocked_by == []
    assert issue.iteration is None
    assert dropped == 0


def test_map_issues_counts_skips():
    mapped = map_issues([_raw_issue(), {"title": "no id"}, _raw_issue(createdAt="yesterday-ish")])
    assert len(mapped.items) == 1
    assert mapped.skipped == 2
    assert mapped.skipped_entries == 2
    assert mapped.total_skipped == 4
    assert len(mapped.errors) == 2


def test_iteration_requires_id_and_parseable_dates():
    with pytest.raises(MalformedRecordError):
        map_iteration({"title": "S1"})
    with pytest.raises(MalformedRecordError):
        map_iteration({"id": "x", "startDate": "soon"})
    interval = map_iteration({"id": "x", "startDate": None, "dueDate": None})
    assert interval.label == "x"
    assert not interval.bounded
    mapped = map_iterations([{"id": "a", "startDate": "2024-01-01", "dueDate": "2024-01-14"}, "junk"])
    assert len(mapped.items) == 1 and mapped.skipped == 1


def test_merge_request_mapping():
    mr = map_merge_request(
        {
            "title": "Add cache",
            "createdAt": "2024-01-02T00:00:00Z",
            "mergedAt": None,
            "notes": {"count": 7, "nodes": []},
            "approvedBy": {"nodes": [{"username": "a"}]},
            "pipelines": {"nodes": [{"status": "failed"}, {"status": "weird"}]},
        }
    )
    assert mr.note_count == 7
    assert mr.approval_count == 1
    assert mr.pipeline_statuses == (PipelineStatus.FAILED, PipelineStatus.UNKNOWN)
    assert mr.failed_pipelines == 1


def test_merge_request_missing_created_or_merged_before_created_is_skipped():
    mapped = map_merge_requests(
        [
            {"createdAt": None},
            {"createdAt": "2024-01-05", "mergedAt": "2024-01-04"},
            {"createdAt": "2024-01-05", "mergedAt": "2024-01-06"},
        ]
    )
    assert len(mapped.items) == 1
    assert mapped.skipped == 2


def test_issue_without_created_at_is_skipped():
    with pytest.raises(MalformedRecordError, match="createdAt"):
        map_issue(_raw_issue(createdAt=None))
    mapped = map_issues([_raw_issue(), _raw_issue(id="gid://gitlab/Issue/102", createdAt=None)])
    assert [i.id for i in mapped.items] == ["gid://gitlab/Issue/101"]
    assert mapped.skipped == 1
