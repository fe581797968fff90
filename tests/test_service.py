from gitlab_app.core.gitlab_client import GitLabAPI
from gitlab_app.core.mappers import MappedRecords
from gitlab_app.core.service import DashboardService, DataQualityReport
from gitlab_app.features.merges.context import build_merge_context
from gitlab_app.features.overview.context import build_overview_context


class DummyAPI(GitLabAPI):
    def __init__(self):
        self.url = "https://gitlab.example.com/api/graphql"
        self.group = "acme"

    def fetch_iterations(self):
        return [
            {"id": "gid://gitlab/Iteration/1", "title": "S1", "startDate": "2024-01-01", "dueDate": "2024-01-14"},
            {"id": "gid://gitlab/Iteration/60", "title": "Broken", "startDate": "2020-01-01", "dueDate": "2030-01-01"},
        ]

    def fetch_issues(self):
        issue = {
            "id": "gid://gitlab/Issue/1",
            "title": "Test",
            "createdAt": "2024-01-02",
            "assignees": {"nodes": [{"username": "alice"}, {"username": "bob"}]},
            "timelogs": {
                "nodes": [{"timeSpent": 7200, "spentAt": "2024-01-05", "user": {"username": "alice"}}]
            },
        }
        return [issue, dict(issue), {"title": "missing id"}]

    def fetch_merge_requests(self):
        return [
            {
                "title": "MR",
                "createdAt": "2024-01-02",
                "mergedAt": "2024-01-04",
                "notes": {"nodes": [{"id": 1}, {"id": 2}, {"id": 3}]},
                "pipelines": {"nodes": [{"status": "FAILED"}, {"status": "SUCCESS"}]},
            },
            {"title": "broken"},
        ]


def test_load_and_build_overview():
    svc = DashboardService(DummyAPI(), excluded_iteration_ids={"gid://gitlab/Iteration/60"})
    messages = []
    index = svc.load_index(progress=lambda m, c, t: messages.append(m))
    issues = svc.load_issues()
    assert index.labels() == ["S1"]
    assert len(issues) == 1  # duplicate dropped, malformed skipped
    assert svc.quality.skipped["issues"] == 1
    assert messages

    ctx = build_overview_context(issues, index)
    assert ctx.total_hours == 2.0
    assert ctx.total_issues == 1
    assert ctx.issues_logged == 1
    assert ctx.attribution.per_member["alice"]["S1"] == 3600
    assert list(ctx.interval_hours["hours"]) == [2.0]


def test_load_merge_requests_and_context():
    svc = DashboardService(DummyAPI())
    index = svc.load_index()
    mrs = svc.load_merge_requests()
    assert len(mrs) == 1
    assert svc.quality.skipped["merge requests"] == 1
    assert svc.quality.total_skipped == 1

    ctx = build_merge_context(mrs, index)
    row = ctx.per_iteration.set_index("iteration").loc["S1"]
    assert row["avg_comments"] == 3
    assert row["avg_pipeline_failures"] == 1
    assert row["avg_merge_duration_hours"] == 48
    assert len(ctx.requests) == 1


def test_quality_report_reflects_latest_load_only():
    report = DataQualityReport()
    report.record("issues", MappedRecords(items=[], skipped=1, skipped_entries=2, errors=["bad issue"]))
    report.record("merge requests", MappedRecords(items=[], skipped=1, errors=["bad mr"]))
    assert report.total_skipped == 4

    report.record("issues", MappedRecords(items=[]))

    assert report.skipped["issues"] == 0
    assert report.skipped["issues time logs"] == 0
    assert report.errors == ["bad mr"]
    assert report.total_skipped == 1


def test_repeated_loads_do_not_accumulate_errors():
    svc = DashboardService(DummyAPI())
    svc.load_issues()
    svc.load_issues()
    assert svc.quality.skipped["issues"] == 1
    assert len(svc.quality.errors) == 1
