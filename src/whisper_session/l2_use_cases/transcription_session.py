"""Use case: one blocking decode pass over an audio buffer."""

from __future__ import annotations

import logging
import uuid
from typing import TYPE_CHECKING

import numpy as np

from whisper_session.l1_entities.cancellation import CancellationToken
from whisper_session.l1_entities.decode_config import DecodeConfig
from whisper_session.l1_entities.errors import InferenceError, InvalidAudio, InvalidSessionState
from whisper_session.l1_entities.session_state import ProgressState, SessionStatus, TranscriptionResult
from whisper_session.l1_entities.transcript import Segment
from whisper_session.l2_use_cases.ports.inference_engine import InferenceHooks
from whisper_session.l2_use_cases.ports.progress_sink import ProgressSink
from whisper_session.l2_use_cases.progress_reporter import ProgressReporter

if TYPE_CHECKING:
    from whisper_session.l2_use_cases.model_handle import ModelHandle

log = logging.getLogger('ws.session')


def _as_mono_float32(audio: np.ndarray) -> np.ndarray:
    try:
        samples = np.asarray(audio, dtype=np.float32)
    except (TypeError, ValueError) as e:
        raise InvalidAudio(f'Audio is not a numeric sample buffer: {e}') from e
    if samples.ndim != 1:
        raise InvalidAudio(f'Expected mono samples (1-D), got shape {samples.shape}')
    if samples.size == 0:
        raise InvalidAudio('Audio buffer is empty')
    return np.ascontiguousarray(samples)


class TranscriptionSession:
    """Single-use decode of one buffer against a borrowed ModelHandle.

    Lifecycle: CREATED -> RUNNING -> COMPLETED | CANCELLED | FAILED.
    Every precondition is checked before the engine is touched, so a rejected
    run emits no notifications. Cancellation is honored only at the engine's
    checkpoints and yields a CANCELLED result carrying the segments finalized
    so far.
    """

    def __init__(self, handle: ModelHandle) -> None:
        self.id = uuid.uuid4().hex[:8]
        self.progress = ProgressState()
        self._handle = handle
        self._status = SessionStatus.CREATED
        self._segments: list[Segment] = []
        self._config: DecodeConfig | None = None
        self._token: CancellationToken | None = None
        self._aborted = False

    @property
    def status(self) -> SessionStatus:
        return self._status

    @property
    def config(self) -> DecodeConfig | None:
        return self._config

    @property
    def segments(self) -> tuple[Segment, ...]:
        return tuple(self._segments)

    def run(
        self,
        audio: np.ndarray,
        config: DecodeConfig | None = None,
        sink: ProgressSink | None = None,
        token: CancellationToken | None = None,
    ) -> TranscriptionResult:
        """Decode *audio* (mono float32, 16 kHz). Blocks until done.

        Raises UseAfterFree, InvalidSessionState, InvalidConfig, InvalidAudio
        or TokenReused before any engine work; InferenceError if the engine
        fails. A cancelled run returns normally.
        """
        self._handle.ensure_open()
        if self._status is not SessionStatus.CREATED:
            raise InvalidSessionState(f'Session {self.id} already {self._status.value}')

        config = config if config is not None else DecodeConfig()
        config.check()
        samples = _as_mono_float32(audio)
        token = token if token is not None else CancellationToken()
        token.bind(self)

        self._config = config
        self._token = token
        reporter = ProgressReporter(sink, self.progress)

        with self._handle.borrow() as (engine, context):
            self._transition(SessionStatus.RUNNING)
            log.info(
                'Session %s started: %d samples, language=%s, threads=%d',
                self.id,
                samples.size,
                config.language,
                config.thread_count,
            )
            try:
                if self._checkpoint('start'):
                    return self._finish_cancelled()

                hooks = InferenceHooks(
                    encoder_begin=lambda: not self._checkpoint('encoder'),
                    should_abort=lambda: self._checkpoint('decoder'),
                    on_progress=reporter.on_progress,
                    on_new_segments=lambda new: self._append(new, reporter),
                )
                status = engine.infer(context, samples, config, hooks)

                if self._aborted:
                    return self._finish_cancelled()
                if status != 0:
                    log.warning('Session %s: engine returned status %d', self.id, status)
                    raise InferenceError(status)

                reporter.finish()
                self._transition(SessionStatus.COMPLETED)
                log.info('Session %s completed: %d segments', self.id, len(self._segments))
                return TranscriptionResult(SessionStatus.COMPLETED, tuple(self._segments))
            except Exception:
                if not self._status.is_terminal:
                    self._transition(SessionStatus.FAILED)
                raise

    def _checkpoint(self, where: str) -> bool:
        """True once cancellation has been observed."""
        if self._aborted:
            return True
        if self._token is not None and self._token.is_requested():
            self._aborted = True
            log.info('Session %s: cancellation honored at %s checkpoint', self.id, where)
        return self._aborted

    def _append(self, new: list[Segment], reporter: ProgressReporter) -> None:
        if not new:
            return
        self._segments.extend(new)
        reporter.on_segments(new)

    def _finish_cancelled(self) -> TranscriptionResult:
        self._transition(SessionStatus.CANCELLED)
        log.info('Session %s cancelled: %d segments kept', self.id, len(self._segments))
        return TranscriptionResult(SessionStatus.CANCELLED, tuple(self._segments))

    def _transition(self, new: SessionStatus) -> None:
        if self._status.is_terminal:
            raise InvalidSessionState(f'Session {self.id} already {self._status.value}')
        self._status = new
