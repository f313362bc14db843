"""Decode configuration value object and its accepted ranges."""

from __future__ import annotations

from pydantic import BaseModel

from whisper_session.l1_entities.errors import InvalidConfig

# (minimum, maximum) per field; None = unbounded on that side
DECODE_LIMITS: dict[str, tuple[float | None, float | None]] = {
    'beam_width': (1, 16),
    'best_of': (1, 16),
    'max_segment_length': (1, None),
    'thread_count': (1, 256),
    'offset_ms': (0, None),
    'duration_ms': (0, None),
    'entropy_threshold': (0.0, None),
    'logprob_threshold': (None, 0.0),
}


class DecodeConfig(BaseModel):
    """Per-session decode parameters. Frozen once built.

    Ranges are not enforced at construction; ``check()`` is called by the
    session before any engine work so a bad value is rejected, never clamped.
    """

    model_config = {'frozen': True}

    language: str = 'auto'
    initial_prompt: str = ''
    beam_width: int = 5
    best_of: int = 5
    entropy_threshold: float = 2.40
    logprob_threshold: float = -1.00
    max_segment_length: int = 120
    thread_count: int = 4
    offset_ms: int = 0
    duration_ms: int = 0  # 0 = until the end of the buffer
    translate: bool = False
    no_timestamps: bool = False
    split_on_word: bool = False

    def problems(self) -> list[str]:
        """Every out-of-range field, described. Empty when the config is usable."""
        found: list[str] = []
        for name, (low, high) in DECODE_LIMITS.items():
            value = getattr(self, name)
            if low is not None and value < low:
                found.append(f'{name}={value} is below the minimum {low}')
            if high is not None and value > high:
                found.append(f'{name}={value} is above the maximum {high}')
        if not self.language.strip():
            found.append("language must be a language code or 'auto'")
        return found

    def check(self) -> None:
        """Raise InvalidConfig listing every out-of-range field."""
        found = self.problems()
        if found:
            raise InvalidConfig(found)
