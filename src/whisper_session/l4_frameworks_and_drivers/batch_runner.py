"""Batch runner — headless transcription of one audio file."""

from __future__ import annotations

import contextlib
import logging
import signal
import sys
import threading
from collections.abc import Iterator, Sequence
from pathlib import Path

from whisper_session.l1_entities.audio_constants import SAMPLE_RATE
from whisper_session.l1_entities.cancellation import CancellationToken
from whisper_session.l1_entities.config import AppConfig
from whisper_session.l1_entities.errors import (
    AudioLoadError,
    InferenceError,
    InvalidAudio,
    InvalidConfig,
    ModelLoadError,
)
from whisper_session.l1_entities.session_state import TranscriptionResult
from whisper_session.l1_entities.transcript import Segment, format_timestamp
from whisper_session.l2_use_cases.model_handle import ModelHandle
from whisper_session.l2_use_cases.ports.model_resolver import ModelResolver
from whisper_session.l3_interface_adapters.gateways.audio_file_loader import load_audio_file
from whisper_session.l3_interface_adapters.gateways.file_persistence import FilePersistenceGateway
from whisper_session.l3_interface_adapters.gateways.hf_model_resolver import HfModelResolver
from whisper_session.l3_interface_adapters.gateways.whisper_cpp_engine import WhisperCppEngine

log = logging.getLogger('ws.cli')


def _err(msg: str) -> None:
    print(msg, file=sys.stderr, flush=True)


class ConsoleSink:
    """Prints segments to stdout and progress to stderr; optionally saves lines."""

    def __init__(self, persistence: FilePersistenceGateway | None = None) -> None:
        self._persistence = persistence

    def on_progress(self, percent: int) -> None:
        _err(f'  progress: {percent:3d}%')

    def on_segments(self, segments: Sequence[Segment]) -> None:
        for seg in segments:
            print(f'[{format_timestamp(seg.start)}] {seg.text}', flush=True)
        if self._persistence is not None:
            self._persistence.save_transcript_lines(segments)


@contextlib.contextmanager
def _cancel_on_interrupt(token: CancellationToken) -> Iterator[None]:
    """Turn Ctrl-C into a cancellation request while the block runs."""
    if threading.current_thread() is not threading.main_thread():
        yield
        return

    def _handler(signum, frame):
        _err('Interrupted: finishing the current step, then stopping...')
        token.request()

    previous = signal.signal(signal.SIGINT, _handler)
    try:
        yield
    finally:
        signal.signal(signal.SIGINT, previous)


@contextlib.contextmanager
def _cancel_after(token: CancellationToken, timeout: float | None) -> Iterator[None]:
    """Request cancellation once *timeout* seconds elapse."""
    if timeout is None:
        yield
        return
    timer = threading.Timer(timeout, token.request)
    timer.daemon = True
    timer.start()
    try:
        yield
    finally:
        timer.cancel()


def run_file(
    audio_path: Path,
    config: AppConfig,
    out_dir: Path | None = None,
    timeout: float | None = None,
    token: CancellationToken | None = None,
    resolver: ModelResolver | None = None,
) -> TranscriptionResult:
    """Load *audio_path*, transcribe it in one session. Blocks until done.

    Exits with status 1 on any load, config or inference error.
    """
    token = token if token is not None else CancellationToken()

    # -- Load audio --
    _err(f'Loading audio: {audio_path}')
    try:
        audio = load_audio_file(audio_path)
    except (FileNotFoundError, AudioLoadError) as exc:
        _err(f'Error: {exc}')
        raise SystemExit(1) from exc
    _err(f'Duration: {format_timestamp(len(audio) / SAMPLE_RATE)}  ({len(audio):,} samples @ {SAMPLE_RATE} Hz)')

    # -- Resolve and load whisper model --
    _err(f'Whisper model: {config.model}')

    def _on_download(percent: int) -> None:
        _err(f'  Downloading {config.model}: {percent}%')

    engine = WhisperCppEngine(strategy=config.engine.strategy, window_seconds=config.engine.window_seconds)
    try:
        if resolver is None:
            resolver = HfModelResolver(on_progress=_on_download)
        model_path = resolver.resolve(config.model)
        handle = ModelHandle.open(model_path, engine)
    except ModelLoadError as exc:
        _err(f'Error loading model: {exc}')
        raise SystemExit(1) from exc

    # -- Transcribe --
    persistence = FilePersistenceGateway(out_dir) if out_dir is not None else None
    sink = ConsoleSink(persistence)
    _err('Transcribing...')
    with handle:
        try:
            with _cancel_on_interrupt(token), _cancel_after(token, timeout):
                result = handle.transcribe(audio, config.decode, sink, token)
        except (InvalidConfig, InvalidAudio, InferenceError) as exc:
            _err(f'Error: {exc}')
            raise SystemExit(1) from exc

    log.info('Run finished: status=%s, segments=%d', result.status.value, result.count)
    if result.cancelled:
        _err(f'\nCancelled — kept {result.count} segments.')
    else:
        _err(f'\nTranscription complete — {result.count} segments.')
    if persistence is not None:
        _err(f'Saved transcript: {persistence.transcript_path}')
    return result
