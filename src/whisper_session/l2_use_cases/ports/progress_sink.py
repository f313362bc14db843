"""Port: consumer of push-style session notifications."""

from __future__ import annotations

from typing import Protocol

from whisper_session.l1_entities.transcript import Segment


class ProgressSink(Protocol):
    """Receives notifications synchronously on the thread running the session.

    Implementations must return promptly: the decode does not advance while
    a notification is being handled. Closing the owning ModelHandle from a
    callback raises ProgrammerError.
    """

    def on_progress(self, percent: int) -> None:
        """Percent of the buffer processed, strictly increasing within a session."""
        ...

    def on_segments(self, segments: tuple[Segment, ...]) -> None:
        """Newly finalized segments, in time order."""
        ...
