"""Throttled relay of session progress and segments to an external sink."""

from __future__ import annotations

from collections.abc import Sequence

from whisper_session.l1_entities.session_state import ProgressState
from whisper_session.l1_entities.transcript import Segment
from whisper_session.l2_use_cases.ports.progress_sink import ProgressSink

PROGRESS_STEP = 10


class ProgressReporter:
    """Forwards engine ticks to *sink*, at most once per PROGRESS_STEP points.

    Announced percents are strictly increasing and never exceed 100; the only
    announcement allowed to be closer than PROGRESS_STEP to the previous one
    is the final 100.
    """

    def __init__(self, sink: ProgressSink | None, state: ProgressState | None = None) -> None:
        self._sink = sink
        self.state = state if state is not None else ProgressState()

    def on_progress(self, percent: int) -> None:
        percent = max(0, min(100, int(percent)))
        last = self.state.last_reported_percent
        if percent >= last + PROGRESS_STEP or (percent == 100 and last < 100):
            self._announce(percent)

    def on_segments(self, segments: Sequence[Segment]) -> None:
        if segments and self._sink is not None:
            self._sink.on_segments(tuple(segments))

    def finish(self) -> None:
        """Announce 100 unless it was already announced."""
        if self.state.last_reported_percent < 100:
            self._announce(100)

    def _announce(self, percent: int) -> None:
        self.state.last_reported_percent = percent
        if self._sink is not None:
            self._sink.on_progress(percent)
