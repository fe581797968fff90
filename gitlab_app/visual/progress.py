"""Progress banner and data-quality notices for Streamlit pages."""

from __future__ import annotations

import streamlit as st

from gitlab_app.core.service import DataQualityReport


class ProgressReporter:
    """Info banner + progress bar driven by DashboardService progress callbacks."""

    def __init__(self, title: str):
        self._container = st.container()
        self._container.info(title)
        self._message = self._container.empty()
        self._bar = self._container.progress(0.0)
        self._total: int | None = None
        self._current = 0
        self._done = False

    def callback(self, message: str, current: int | None = None, total: int | None = None) -> None:
        if self._done:
            return
        if total:
            self._total = total
        if current is not None:
            self._current = max(0, current)
        self._message.write(message)
        if self._total:
            self._bar.progress(min(self._current / self._total, 1.0))

    def complete(self, message: str) -> None:
        if self._done:
            return
        self._bar.progress(1.0)
        self._container.success(message)
        self._done = True

    def error(self, message: str) -> None:
        if self._done:
            return
        self._container.error(message)
        self._done = True


def show_data_quality(report: DataQualityReport) -> None:
    """Degraded-data notice when mapping dropped records."""
    if not report.total_skipped:
        return
    parts = [f"{count} {kind}" for kind, count in report.skipped.items() if count]
    st.warning("Some records were skipped as malformed: " + ", ".join(parts) + ". Totals exclude them.")
    with st.expander("Skipped record details"):
        for line in report.errors[:200]:
            st.text(line)
