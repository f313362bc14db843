"""Shared test fixtures and protocol-conforming fakes."""

from __future__ import annotations

import struct
from collections.abc import Callable, Iterator
from pathlib import Path

import numpy as np
import pytest

from whisper_session.l1_entities.config import AppConfig
from whisper_session.l1_entities.transcript import Segment
from whisper_session.l2_use_cases.model_handle import ModelHandle
from whisper_session.l2_use_cases.ports.inference_engine import InferenceHooks
from whisper_session.l4_frameworks_and_drivers.infra_config import build_app_config

GGML_HEADER = struct.pack('<I', 0x67676D6C)

# --- Protocol-conforming Fakes ---


class FakeContext:
    """Opaque engine context handed out by FakeEngine."""

    def __init__(self, path: str) -> None:
        self.path = path


class FakeEngine:
    """Fake inference engine for L2 use case tests.

    Each entry of *steps* is one encoder/decoder round: both checkpoints are
    consulted, then the step's segments are emitted and progress advances
    proportionally. *ticks* are raw progress values sent before the steps.
    """

    def __init__(
        self,
        steps: list[list[Segment]] | None = None,
        status: int = 0,
        ticks: list[int] | None = None,
        load_error: Exception | None = None,
        infer_error: Exception | None = None,
        on_step: Callable[[int], None] | None = None,
    ) -> None:
        self._steps = steps if steps is not None else []
        self._status = status
        self._ticks = ticks or []
        self._load_error = load_error
        self._infer_error = infer_error
        self._on_step = on_step
        self.load_calls: list[str] = []
        self.infer_calls: list[tuple[FakeContext, np.ndarray]] = []
        self.freed: list[FakeContext] = []

    def load(self, model_path: str) -> FakeContext:
        if self._load_error is not None:
            raise self._load_error
        self.load_calls.append(model_path)
        return FakeContext(model_path)

    def infer(self, context, audio, config, hooks: InferenceHooks) -> int:
        self.infer_calls.append((context, audio))
        for tick in self._ticks:
            hooks.on_progress(tick)
        total = len(self._steps)
        for i, segments in enumerate(self._steps):
            if not hooks.encoder_begin():
                return -6
            if hooks.should_abort():
                return -6
            if self._on_step is not None:
                self._on_step(i)
            hooks.on_new_segments(list(segments))
            hooks.on_progress((i + 1) * 100 // total)
        if self._infer_error is not None:
            raise self._infer_error
        return self._status

    def free(self, context: FakeContext) -> None:
        self.freed.append(context)


class RecordingSink:
    """ProgressSink that records every notification in arrival order."""

    def __init__(self) -> None:
        self.events: list[tuple[str, object]] = []

    def on_progress(self, percent: int) -> None:
        self.events.append(('progress', percent))

    def on_segments(self, segments: tuple[Segment, ...]) -> None:
        self.events.append(('segments', segments))

    @property
    def percents(self) -> list[int]:
        return [value for kind, value in self.events if kind == 'progress']

    @property
    def segments(self) -> list[Segment]:
        return [seg for kind, value in self.events if kind == 'segments' for seg in value]


def make_segments(*texts: str, start: float = 0.0, length: float = 1.0) -> list[Segment]:
    return [
        Segment(text=text, start=start + i * length, end=start + (i + 1) * length) for i, text in enumerate(texts)
    ]


# --- Standard Fixtures ---


@pytest.fixture
def model_file(tmp_path: Path) -> Path:
    p = tmp_path / 'ggml-tiny.bin'
    p.write_bytes(GGML_HEADER + b'\x00' * 64)
    return p


@pytest.fixture
def silence() -> np.ndarray:
    return np.zeros(16000, dtype=np.float32)


@pytest.fixture
def fake_engine() -> FakeEngine:
    return FakeEngine(steps=[make_segments('hello', 'world'), make_segments('again', start=2.0)])


@pytest.fixture
def handle(model_file: Path, fake_engine: FakeEngine) -> Iterator[ModelHandle]:
    h = ModelHandle.open(model_file, fake_engine)
    yield h
    h.close()


@pytest.fixture
def sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture
def default_config() -> AppConfig:
    return build_app_config({})


@pytest.fixture
def sample_config_yaml(tmp_path: Path) -> Path:
    content = """\
model: "tiny"
engine:
  strategy: "greedy"
decode:
  language: "en"
  thread_count: 2
logging:
  level: "INFO"
"""
    p = tmp_path / 'config.yaml'
    p.write_text(content, encoding='utf-8')
    return p
