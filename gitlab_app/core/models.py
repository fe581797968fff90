"""Domain data models for iterations, issues, merge requests, and graph output."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum


class PipelineStatus(str, Enum):
    CREATED = "CREATED"
    WAITING_FOR_RESOURCE = "WAITING_FOR_RESOURCE"
    PREPARING = "PREPARING"
    PENDING = "PENDING"
    RUNNING = "RUNNING"
    SUCCESS = "SUCCESS"
    FAILED = "FAILED"
    CANCELED = "CANCELED"
    SKIPPED = "SKIPPED"
    MANUAL = "MANUAL"
    SCHEDULED = "SCHEDULED"
    UNKNOWN = "UNKNOWN"

    @classmethod
    def parse(cls, value: str | None) -> PipelineStatus:
        if not value:
            return cls.UNKNOWN
        try:
            return cls(str(value).strip().upper())
        except ValueError:
            return cls.UNKNOWN


@dataclass(slots=True, frozen=True)
class Interval:
    id: str
    label: str
    start: datetime | None = None
    end: datetime | None = None

    @property
    def bounded(self) -> bool:
        return self.start is not None and self.end is not None

    def contains(self, ts: datetime) -> bool:
        # Open-ended windows never match.
        if not self.bounded:
            return False
        return self.start <= ts <= self.end


@dataclass(slots=True)
class TimeLogEntry:
    seconds: float
    logged_at: datetime
    owner_username: str


@dataclass(slots=True)
class IterationRef:
    id: str | None
    title: str | None = None
    start_date: str | None = None

    @property
    def label(self) -> str | None:
        return self.title or self.start_date


@dataclass(slots=True)
class IssueRef:
    id: str
    closed_at: datetime | None = None


@dataclass(slots=True)
class Issue:
    id: str
    title: str | None
    created_at: datetime | None = None
    closed_at: datetime | None = None
    weight: float | None = None
    assignees: tuple[str, ...] = ()
    time_logs: list[TimeLogEntry] = field(default_factory=list)
    blocked_by: list[IssueRef] = field(default_factory=list)
    iteration: IterationRef | None = None

    @property
    def is_open(self) -> bool:
        return self.closed_at is None


@dataclass(slots=True)
class MergeRequest:
    created_at: datetime
    merged_at: datetime | None = None
    note_count: int = 0
    pipeline_statuses: tuple[PipelineStatus, ...] = ()
    title: str | None = None
    approval_count: int = 0

    @property
    def failed_pipelines(self) -> int:
        return sum(1 for status in self.pipeline_statuses if status is PipelineStatus.FAILED)


@dataclass(slots=True)
class GraphNode:
    id: str
    label: str
    level: int = 0
    x: float = 0.0
    y: float = 0.0


@dataclass(slots=True, frozen=True)
class GraphEdge:
    source: str
    target: str


# -----------------------------------------------------------------------------
# Aggregation results
# -----------------------------------------------------------------------------
@dataclass(slots=True)
class TimeAttribution:
    per_member: dict[str, dict[str, float]] = field(default_factory=dict)
    per_interval: dict[str, float] = field(default_factory=dict)
    total_seconds: float = 0.0
    issues_with_logs_count: int = 0


@dataclass(slots=True)
class MergeIntervalStats:
    count: int
    avg_comments: float
    avg_pipeline_failures: float


@dataclass(slots=True)
class MergeMetrics:
    per_interval: dict[str, MergeIntervalStats] = field(default_factory=dict)
    per_interval_duration: dict[str, float] = field(default_factory=dict)


@dataclass(slots=True)
class SprintCycleStats:
    issues_count: int
    avg_lead_time_hours: float
    avg_cycle_time_hours: float


@dataclass(slots=True)
class SprintWorkload:
    total_weight: float = 0.0
    total_seconds: float = 0.0


@dataclass(slots=True)
class DependencyGraph:
    nodes: list[GraphNode] = field(default_factory=list)
    edges: list[GraphEdge] = field(default_factory=list)
    skipped: int = 0


@dataclass(slots=True)
class LevelAssignment:
    levels: dict[str, int]
    order: list[str]  # dequeue order
    steps: int
    unresolved: list[str] = field(default_factory=list)
