"""Port: speech-recognition inference engine."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Protocol

import numpy as np

from whisper_session.l1_entities.decode_config import DecodeConfig
from whisper_session.l1_entities.transcript import Segment


@dataclass(frozen=True)
class InferenceHooks:
    """Typed callbacks the engine invokes while decoding.

    encoder_begin: called before each encoder sub-step; False aborts.
    should_abort: called before each decoding iteration; True aborts.
    on_progress: raw percent of the buffer processed so far.
    on_new_segments: segments finalized since the previous call, in time order.
    """

    encoder_begin: Callable[[], bool]
    should_abort: Callable[[], bool]
    on_progress: Callable[[int], None]
    on_new_segments: Callable[[list[Segment]], None]


class InferenceEngine(Protocol):
    """Abstract engine. Zero framework types leak through."""

    def load(self, model_path: str) -> Any:
        """Load a model and return an opaque context. Raises ModelLoadError."""
        ...

    def infer(
        self,
        context: Any,
        audio: np.ndarray,
        config: DecodeConfig,
        hooks: InferenceHooks,
    ) -> int:
        """Run one blocking decode pass. Returns the engine status, 0 on success."""
        ...

    def free(self, context: Any) -> None:
        """Release a context returned by load()."""
        ...
