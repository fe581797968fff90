"""Pure helpers to build the merge request context (no Streamlit)."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

import pandas as pd

from gitlab_app.analytics.intervals import IntervalIndex
from gitlab_app.analytics.merge_metrics import aggregate_merge_requests, merge_request_rows
from gitlab_app.core.models import MergeMetrics, MergeRequest
from gitlab_app.visual.tables import merge_metrics_frame, merge_request_table


@dataclass(slots=True)
class MergeContext:
    metrics: MergeMetrics
    per_iteration: pd.DataFrame
    requests: pd.DataFrame


def build_merge_context(mrs: Sequence[MergeRequest], index: IntervalIndex) -> MergeContext:
    metrics = aggregate_merge_requests(mrs, index)
    return MergeContext(
        metrics=metrics,
        per_iteration=merge_metrics_frame(metrics),
        requests=merge_request_table(merge_request_rows(mrs)),
    )
