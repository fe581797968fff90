"""Mapping raw GitLab GraphQL JSON into domain model instances."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Generic, TypeVar

import pandas as pd

from .errors import MalformedRecordError
from .models import (
    Interval,
    Issue,
    IssueRef,
    IterationRef,
    MergeRequest,
    PipelineStatus,
    TimeLogEntry,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(slots=True)
class MappedRecords(Generic[T]):
    items: list[T] = field(default_factory=list)
    skipped: int = 0  # whole records rejected
    skipped_entries: int = 0  # nested entries (time logs) rejected inside kept records
    errors: list[str] = field(default_factory=list)

    @property
    def total_skipped(self) -> int:
        return self.skipped + self.skipped_entries


def parse_timestamp(value: Any) -> datetime | None:
    """Parse an ISO-8601 value into a UTC-aware datetime, or None."""
    if value is None or value == "":
        return None
    try:
        ts = pd.to_datetime(value, utc=True, errors="coerce")
    except (TypeError, ValueError):
        return None
    if ts is None or pd.isna(ts):
        return None
    return ts.to_pydatetime()


def _required_timestamp(raw: dict[str, Any], key: str, kind: str) -> datetime:
    ts = parse_timestamp(raw.get(key))
    if ts is None:
        raise MalformedRecordError(kind, key, repr(raw.get(key)))
    return ts


def _optional_timestamp(raw: dict[str, Any], key: str, kind: str) -> datetime | None:
    value = raw.get(key)
    if value is None or value == "":
        return None
    ts = parse_timestamp(value)
    if ts is None:
        raise MalformedRecordError(kind, key, repr(value))
    return ts


def _nodes(value: Any) -> list[Any]:
    """Return the node list of a GraphQL connection (``{"nodes": [...]}``)."""
    if isinstance(value, dict):
        return [n for n in value.get("nodes") or [] if n is not None]
    if isinstance(value, list):
        return [n for n in value if n is not None]
    return []


def _connection_count(value: Any) -> int:
    if isinstance(value, dict) and isinstance(value.get("count"), int):
        return value["count"]
    return len(_nodes(value))


def _required_id(raw: dict[str, Any], kind: str) -> str:
    value = raw.get("id")
    if value is None or str(value).strip() == "":
        raise MalformedRecordError(kind, "id")
    return str(value)


# ------------------ Iterations ------------------
def map_iteration(raw: dict[str, Any]) -> Interval:
    iteration_id = _required_id(raw, "iteration")
    start = _optional_timestamp(raw, "startDate", "iteration")
    end = _optional_timestamp(raw, "dueDate", "iteration")
    title = (raw.get("title") or "").strip()
    label = title or raw.get("startDate") or iteration_id
    return Interval(id=iteration_id, label=str(label), start=start, end=end)


# ------------------ Issues ------------------
def map_time_log(raw: dict[str, Any]) -> TimeLogEntry:
    try:
        seconds = float(raw.get("timeSpent"))
    except (TypeError, ValueError) as exc:
        raise MalformedRecordError("timelog", "timeSpent", repr(raw.get("timeSpent"))) from exc
    if not seconds > 0:
        raise MalformedRecordError("timelog", "timeSpent", f"non-positive value {seconds!r}")
    logged_at = _required_timestamp(raw, "spentAt", "timelog")
    owner = (raw.get("user") or {}).get("username")
    if not owner:
        raise MalformedRecordError("timelog", "user.username")
    return TimeLogEntry(seconds=seconds, logged_at=logged_at, owner_username=str(owner))


def map_time_logs(raw_logs: Iterable[dict[str, Any]]) -> tuple[list[TimeLogEntry], int]:
    entries: list[TimeLogEntry] = []
    skipped = 0
    for raw in raw_logs:
        try:
            entries.append(map_time_log(raw))
        except MalformedRecordError as exc:
            skipped += 1
            logger.debug("Dropping time log entry: %s", exc)
    return entries, skipped


def _map_issue_ref(raw: dict[str, Any]) -> IssueRef:
    return IssueRef(
        id=_required_id(raw, "blocking issue"),
        closed_at=_optional_timestamp(raw, "closedAt", "blocking issue"),
    )


def _map_iteration_ref(raw: Any) -> IterationRef | None:
    if not isinstance(raw, dict) or not raw:
        return None
    return IterationRef(
        id=str(raw["id"]) if raw.get("id") else None,
        title=(raw.get("title") or "").strip() or None,
        start_date=raw.get("startDate") or None,
    )


def _unique_usernames(nodes: Iterable[dict[str, Any]]) -> tuple[str, ...]:
    seen: set[str] = set()
    out: list[str] = []
    for node in nodes:
        name = node.get("username") if isinstance(node, dict) else None
        if not name or name in seen:
            continue
        seen.add(name)
        out.append(name)
    return tuple(out)


def map_issue(raw: dict[str, Any]) -> tuple[Issue, int]:
    """Map one issue node; returns the issue and the number of dropped time logs."""
    issue_id = _required_id(raw, "issue")
    weight = raw.get("weight")
    try:
        weight = float(weight) if weight is not None else None
    except (TypeError, ValueError) as exc:
        raise MalformedRecordError("issue", "weight", repr(weight)) from exc
    time_logs, dropped = map_time_logs(_nodes(raw.get("timelogs")))
    blocked_by = [_map_issue_ref(n) for n in _nodes(raw.get("blockedByIssues"))]
    issue = Issue(
        id=issue_id,
        title=raw.get("title"),
        created_at=_required_timestamp(raw, "createdAt", "issue"),
        closed_at=_optional_timestamp(raw, "closedAt", "issue"),
        weight=weight,
        assignees=_unique_usernames(_nodes(raw.get("assignees"))),
        time_logs=time_logs,
        blocked_by=blocked_by,
        iteration=_map_iteration_ref(raw.get("iteration")),
    )
    return issue, dropped


# ------------------ Merge Requests ------------------
def map_merge_request(raw: dict[str, Any]) -> MergeRequest:
    created_at = _required_timestamp(raw, "createdAt", "merge request")
    merged_at = _optional_timestamp(raw, "mergedAt", "merge request")
    if merged_at is not None and merged_at < created_at:
        raise MalformedRecordError("merge request", "mergedAt", "merged before it was created")
    statuses = tuple(
        PipelineStatus.parse(p.get("status")) for p in _nodes(raw.get("pipelines")) if isinstance(p, dict)
    )
    return MergeRequest(
        created_at=created_at,
        merged_at=merged_at,
        note_count=_connection_count(raw.get("notes")),
        pipeline_statuses=statuses,
        title=raw.get("title"),
        approval_count=_connection_count(raw.get("approvedBy")),
    )


# ------------------ Batch helpers ------------------
def map_records(raw_records: Iterable[dict[str, Any]] | None, mapper: Callable[[dict[str, Any]], T]) -> MappedRecords[T]:
    """Apply ``mapper`` to every record, skipping (and counting) malformed ones."""
    result: MappedRecords[T] = MappedRecords()
    for raw in raw_records or []:
        if not isinstance(raw, dict):
            result.skipped += 1
            result.errors.append(f"unexpected record type {type(raw).__name__}")
            continue
        try:
            result.items.append(mapper(raw))
        except MalformedRecordError as exc:
            result.skipped += 1
            result.errors.append(str(exc))
    if result.skipped:
        logger.warning("Skipped %s malformed record(s)", result.skipped)
    return result


def map_iterations(raw_iterations: Iterable[dict[str, Any]] | None) -> MappedRecords[Interval]:
    return map_records(raw_iterations, map_iteration)


def map_issues(raw_issues: Iterable[dict[str, Any]] | None) -> MappedRecords[Issue]:
    mapped = map_records(raw_issues, map_issue)
    issues = [issue for issue, _ in mapped.items]
    dropped = sum(count for _, count in mapped.items)
    if dropped:
        logger.warning("Dropped %s malformed time log entr%s", dropped, "y" if dropped == 1 else "ies")
    return MappedRecords(items=issues, skipped=mapped.skipped, skipped_entries=dropped, errors=mapped.errors)


def map_merge_requests(raw_mrs: Iterable[dict[str, Any]] | None) -> MappedRecords[MergeRequest]:
    return map_records(raw_mrs, map_merge_request)
