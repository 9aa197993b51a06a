"""Progress reporting for Streamlit pages."""

from __future__ import annotations

import streamlit as st


class ProgressReporter:
    """Banner + progress bar; ``callback`` matches VersionService progress hooks."""

    def __init__(self, title: str):
        self._container = st.container()
        self._container.info(title)
        self._message_placeholder = self._container.empty()
        self._progress_placeholder = self._container.progress(0.0)
        self._finalized = False

    def callback(self, message: str, current: int | None = None, total: int | None = None) -> None:
        if self._finalized:
            return
        self._message_placeholder.write(message)
        if total and current is not None:
            self._progress_placeholder.progress(min(max(current / total, 0.0), 1.0))
        else:
            # Unknown total; show indeterminate state by resetting to 0.
            self._progress_placeholder.progress(0.0)

    def complete(self, message: str) -> None:
        if self._finalized:
            return
        self._progress_placeholder.progress(1.0)
        self._container.success(message)
        self._finalized = True

    def error(self, message: str) -> None:
        if self._finalized:
            return
        self._container.error(message)
        self._finalized = True
