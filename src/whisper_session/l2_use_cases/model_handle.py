"""Owned reference to a loaded model."""

from __future__ import annotations

import contextlib
import logging
import threading
from collections.abc import Iterator
from pathlib import Path
from typing import Any

import numpy as np

from whisper_session.l1_entities.cancellation import CancellationToken
from whisper_session.l1_entities.decode_config import DecodeConfig
from whisper_session.l1_entities.errors import ModelLoadError, ProgrammerError, UseAfterFree
from whisper_session.l1_entities.session_state import TranscriptionResult
from whisper_session.l2_use_cases.ports.inference_engine import InferenceEngine
from whisper_session.l2_use_cases.ports.progress_sink import ProgressSink
from whisper_session.l2_use_cases.transcription_session import TranscriptionSession

log = logging.getLogger('ws.model')


class ModelHandle:
    """Owns one engine context from open() until close().

    Sessions borrow the context through ``borrow()``, which holds the handle
    lock for the duration of a run: the engine is not assumed reentrant, so
    runs against one handle are serialized and close() waits for an active
    run to finish before freeing the context.
    """

    def __init__(self, engine: InferenceEngine, context: Any, path: str) -> None:
        if context is None:
            raise ModelLoadError(f'Engine returned no context for: {path}')
        self._engine = engine
        self._context = context
        self._path = path
        self._lock = threading.Lock()
        self._closed = False
        self._borrower: int | None = None

    @classmethod
    def open(cls, path: str | Path, engine: InferenceEngine) -> ModelHandle:
        """Load the model at *path*. Raises ModelLoadError with the reason."""
        model_path = Path(path)
        if not model_path.exists():
            raise ModelLoadError(f'Model file not found: {model_path}')
        if not model_path.is_file():
            raise ModelLoadError(f'Model path is not a file: {model_path}')

        try:
            context = engine.load(str(model_path))
        except ModelLoadError:
            raise
        except Exception as e:
            raise ModelLoadError(f'Failed to load model {model_path}: {e}') from e
        log.info('Model loaded: %s', model_path)
        return cls(engine, context, str(model_path))

    @property
    def path(self) -> str:
        return self._path

    @property
    def closed(self) -> bool:
        return self._closed

    def ensure_open(self) -> None:
        if self._closed:
            raise UseAfterFree(f'Model handle already closed: {self._path}')

    @contextlib.contextmanager
    def borrow(self) -> Iterator[tuple[InferenceEngine, Any]]:
        """Exclusive access to the engine context for one run."""
        self.ensure_open()
        with self._lock:
            self.ensure_open()  # closed while we waited
            self._borrower = threading.get_ident()
            try:
                yield self._engine, self._context
            finally:
                self._borrower = None

    def session(self) -> TranscriptionSession:
        self.ensure_open()
        return TranscriptionSession(self)

    def transcribe(
        self,
        audio: np.ndarray,
        config: DecodeConfig | None = None,
        sink: ProgressSink | None = None,
        token: CancellationToken | None = None,
    ) -> TranscriptionResult:
        """Run a fresh session over *audio*."""
        return self.session().run(audio, config, sink, token)

    def close(self) -> None:
        """Release the engine context. Safe to call more than once.

        Blocks until an active run finishes. Calling it from inside a run on
        the same thread (e.g. from a sink callback) raises ProgrammerError.
        """
        if self._borrower == threading.get_ident():
            raise ProgrammerError(f'Model handle closed from inside its own run: {self._path}')
        with self._lock:
            if self._closed:
                return
            self._closed = True
            context, self._context = self._context, None
        self._engine.free(context)
        log.info('Model released: %s', self._path)

    def __enter__(self) -> ModelHandle:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
