"""Session lifecycle and result entities."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field

from whisper_session.l1_entities.transcript import Segment


class SessionStatus(enum.Enum):
    CREATED = 'created'
    RUNNING = 'running'
    COMPLETED = 'completed'
    CANCELLED = 'cancelled'
    FAILED = 'failed'

    @property
    def is_terminal(self) -> bool:
        return self in _TERMINAL


_TERMINAL = frozenset({SessionStatus.COMPLETED, SessionStatus.CANCELLED, SessionStatus.FAILED})


@dataclass
class ProgressState:
    """Last percent announced to the sink. Only ProgressReporter writes it."""

    last_reported_percent: int = 0


@dataclass(frozen=True)
class TranscriptionResult:
    """Outcome of a run that did not fail: completed or cancelled with partial output."""

    status: SessionStatus
    segments: tuple[Segment, ...] = field(default_factory=tuple)

    @property
    def count(self) -> int:
        return len(self.segments)

    @property
    def cancelled(self) -> bool:
        return self.status is SessionStatus.CANCELLED

    @property
    def text(self) -> str:
        return ' '.join(seg.text for seg in self.segments)
