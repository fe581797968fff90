"""Interval index: resolve which iteration windows contain a timestamp."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime
from typing import Any

from gitlab_app.core.mappers import map_iterations
from gitlab_app.core.models import Interval


class IntervalIndex:
    """Ordered lookup over iteration windows.

    Definition order is preserved: it decides the tie-break for consumers that
    only take the first matching window. Windows are matched inclusively on
    both ends and only when both bounds are known.
    """

    __slots__ = ("_intervals", "_by_id")

    def __init__(self, intervals: Iterable[Interval]):
        self._intervals: tuple[Interval, ...] = tuple(intervals)
        self._by_id: dict[str, Interval] = {}
        for interval in self._intervals:
            self._by_id.setdefault(interval.id, interval)

    @classmethod
    def build(cls, intervals: Iterable[Interval], *, exclude_ids: Iterable[str] = ()) -> IntervalIndex:
        excluded = set(exclude_ids)
        return cls(i for i in intervals if i.id not in excluded)

    def __len__(self) -> int:
        return len(self._intervals)

    def __iter__(self):
        return iter(self._intervals)

    @property
    def intervals(self) -> tuple[Interval, ...]:
        return self._intervals

    def windows_containing(self, ts: datetime) -> list[Interval]:
        return [i for i in self._intervals if i.contains(ts)]

    def first_window_containing(self, ts: datetime) -> Interval | None:
        for interval in self._intervals:
            if interval.contains(ts):
                return interval
        return None

    def get(self, interval_id: str | None) -> Interval | None:
        if interval_id is None:
            return None
        return self._by_id.get(interval_id)

    def label_for(self, interval_id: str | None) -> str | None:
        interval = self.get(interval_id)
        return interval.label if interval is not None else None

    def labels(self) -> list[str]:
        return [i.label for i in self._intervals]

    def sorted_by_start(self) -> list[Interval]:
        """Intervals ordered by start date; windows without a start go last."""
        return sorted(
            self._intervals,
            key=lambda i: (i.start is None, i.start or datetime.min),
        )


def intervals_from_records(raw_iterations: Iterable[dict[str, Any]] | None) -> list[Interval]:
    return map_iterations(raw_iterations).items
