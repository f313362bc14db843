"""Gateway: whisper.cpp engine — implements InferenceEngine port."""

from __future__ import annotations

import contextlib
import itertools
import logging
import os
import struct
from typing import Any

import numpy as np
from pywhispercpp.model import Model

from whisper_session.l1_entities.audio_constants import CENTISECONDS_PER_SECOND, SAMPLE_RATE
from whisper_session.l1_entities.decode_config import DecodeConfig
from whisper_session.l1_entities.errors import InferenceError, ModelLoadError, UseAfterFree
from whisper_session.l1_entities.transcript import Segment
from whisper_session.l2_use_cases.ports.inference_engine import InferenceHooks

log = logging.getLogger('ws.engine')

GGML_MAGIC = 0x67676D6C  # 'ggml', stored little-endian at offset 0
ABORTED_STATUS = -6  # whisper_full's code for encoder_begin_callback returning false
ENGINE_FAILURE_STATUS = -1

STRATEGIES = {'greedy': 0, 'beam_search': 1}


@contextlib.contextmanager
def _suppress_c_stdout():
    """Redirect C-level stdout and stderr to /dev/null.

    whisper.cpp prints init/progress messages directly via C fprintf,
    bypassing Python's sys.stdout and any configured log handler.
    """
    devnull = os.open(os.devnull, os.O_WRONLY)
    old_stdout = os.dup(1)
    old_stderr = os.dup(2)
    try:
        os.dup2(devnull, 1)
        os.dup2(devnull, 2)
        yield
    finally:
        os.dup2(old_stdout, 1)
        os.dup2(old_stderr, 2)
        os.close(devnull)
        os.close(old_stdout)
        os.close(old_stderr)


def check_ggml_header(model_path: str) -> None:
    """Raise ModelLoadError unless *model_path* starts with the ggml magic."""
    try:
        with open(model_path, 'rb') as f:
            header = f.read(4)
    except OSError as e:
        raise ModelLoadError(f'Cannot read model file {model_path}: {e}') from e
    if len(header) < 4:
        raise ModelLoadError(f'Model file is truncated: {model_path}')
    (magic,) = struct.unpack('<I', header)
    if magic != GGML_MAGIC:
        raise ModelLoadError(f'Not a whisper.cpp ggml model (magic 0x{magic:08x}): {model_path}')


def whisper_params(config: DecodeConfig) -> dict:
    """Map a DecodeConfig onto pywhispercpp transcribe() parameters.

    pywhispercpp writes only the keys it is given onto the model's persistent
    params, so every per-session value is always emitted, defaults included.
    """
    return {
        'language': config.language,
        'initial_prompt': config.initial_prompt,
        'n_threads': config.thread_count,
        'translate': config.translate,
        'no_timestamps': config.no_timestamps,
        'split_on_word': config.split_on_word,
        'max_len': config.max_segment_length,
        'entropy_thold': config.entropy_threshold,
        'logprob_thold': config.logprob_threshold,
        'beam_search': {'beam_size': config.beam_width, 'patience': -1.0},
        'greedy': {'best_of': config.best_of},
        'offset_ms': 0,
        'duration_ms': 0,
        'print_progress': False,
        'print_realtime': False,
    }


def to_segments(raw_segments: list[Any], offset_s: float = 0.0) -> list[Segment]:
    """Convert pywhispercpp segments (centisecond stamps) and drop blank text.

    *offset_s* shifts window-relative stamps back onto the full buffer's clock.
    """
    result: list[Segment] = []
    for seg in raw_segments:
        text = seg.text.strip()
        if text:
            result.append(
                Segment(
                    text=text,
                    start=offset_s + seg.t0 / CENTISECONDS_PER_SECOND,
                    end=offset_s + seg.t1 / CENTISECONDS_PER_SECOND,
                )
            )
    return result


class WhisperCppEngine:
    """pywhispercpp adapter. Handles model loading, C stdout suppression,
    windowed decoding with checkpoints, and centisecond-to-seconds conversion.

    pywhispercpp does not expose whisper.cpp's encoder-begin or abort
    callbacks, so the buffer is decoded in windows of ``window_seconds``
    (30 s is the encoder's native context) and both checkpoints are consulted
    before each window. Its ``new_segment_callback`` is a class-level global
    shared by every Model in the process, so segments are taken from each
    window's return value instead.

    The engine owns every Model it loads. ``load()`` hands out an opaque
    integer context; ``free()`` drops the only reference to the Model so
    whisper.cpp tears it down while C output is still suppressed.
    """

    def __init__(self, strategy: str = 'beam_search', window_seconds: float = 30.0) -> None:
        if strategy not in STRATEGIES:
            raise ValueError(f'Unknown sampling strategy: {strategy!r}')
        if window_seconds <= 0:
            raise ValueError('window_seconds must be positive')
        self._strategy = strategy
        self._window_ms = int(window_seconds * 1000)
        self._models: dict[int, Model] = {}
        self._next_context = itertools.count(1)

    def load(self, model_path: str) -> int:
        check_ggml_header(model_path)
        try:
            with _suppress_c_stdout():
                model = Model(
                    model_path,
                    params_sampling_strategy=STRATEGIES[self._strategy],
                    print_progress=False,
                    print_realtime=False,
                )
        except Exception as e:
            raise ModelLoadError(f'whisper.cpp failed to load {model_path}: {e}') from e
        context = next(self._next_context)
        self._models[context] = model
        return context

    def infer(
        self,
        context: int,
        audio: np.ndarray,
        config: DecodeConfig,
        hooks: InferenceHooks,
    ) -> int:
        model = self._models.get(context)
        if model is None:
            raise UseAfterFree(f'Engine context {context} already freed')
        samples_per_ms = SAMPLE_RATE // 1000
        total_ms = len(audio) // samples_per_ms
        start_ms = min(config.offset_ms, total_ms)
        end_ms = total_ms if config.duration_ms == 0 else min(total_ms, start_ms + config.duration_ms)
        span_ms = max(end_ms - start_ms, 1)
        params = whisper_params(config)

        window_start = start_ms
        while window_start < end_ms:
            if not hooks.encoder_begin() or hooks.should_abort():
                return ABORTED_STATUS
            window_ms = min(self._window_ms, end_ms - window_start)
            window = audio[window_start * samples_per_ms : (window_start + window_ms) * samples_per_ms]
            log.debug('Decoding window %d..%d ms', window_start, window_start + window_ms)
            try:
                with _suppress_c_stdout():
                    raw_segments = model.transcribe(window, **params)
            except Exception as e:
                log.warning('whisper.cpp failed at %d ms: %s', window_start, e)
                raise InferenceError(ENGINE_FAILURE_STATUS, str(e)) from e

            hooks.on_new_segments(to_segments(raw_segments, offset_s=window_start / 1000))
            window_start += window_ms
            hooks.on_progress((window_start - start_ms) * 100 // span_ms)
        return 0

    def free(self, context: int) -> None:
        """Drop the model, suppressing C-level teardown noise."""
        with _suppress_c_stdout():
            self._models.pop(context, None)
