"""Gateway: audio file loader — turns a media file into session-ready samples via ffmpeg."""

from __future__ import annotations

import logging
import shutil
import subprocess  # noqa: S404 -- fixed argv, never shell=True
from pathlib import Path

import numpy as np

from whisper_session.l1_entities.audio_constants import SAMPLE_RATE
from whisper_session.l1_entities.errors import AudioLoadError

log = logging.getLogger('ws.audio')

FFMPEG_TIMEOUT_S = 300
_BYTES_PER_SAMPLE = np.dtype(np.float32).itemsize


def ffmpeg_command(path: Path) -> list[str]:
    """argv that decodes the first audio stream of *path* to raw 16 kHz mono f32le on stdout."""
    return [
        'ffmpeg',
        '-nostdin',
        '-hide_banner',
        '-loglevel',
        'error',
        '-i',
        str(path),
        '-vn',
        '-ac',
        '1',
        '-ar',
        str(SAMPLE_RATE),
        '-f',
        'f32le',
        'pipe:1',
    ]


def _decode(path: Path) -> bytes:
    try:
        proc = subprocess.run(ffmpeg_command(path), capture_output=True, timeout=FFMPEG_TIMEOUT_S)  # noqa: S603
    except subprocess.TimeoutExpired as exc:
        raise AudioLoadError(f'ffmpeg timed out after {FFMPEG_TIMEOUT_S}s decoding {path}') from exc
    except OSError as exc:
        raise AudioLoadError(f'Could not start ffmpeg: {exc}') from exc

    if proc.returncode != 0:
        detail = proc.stderr.decode('utf-8', errors='replace').strip() or 'no diagnostics'
        raise AudioLoadError(f'ffmpeg failed on {path} (exit {proc.returncode}): {detail}')
    return proc.stdout


def load_audio_file(path: Path) -> np.ndarray:
    """Decode *path* into float32 mono PCM at 16 kHz.

    The result satisfies TranscriptionSession's input contract (1-D,
    contiguous, non-empty). A missing file raises FileNotFoundError; every
    other failure raises AudioLoadError.
    """
    if not path.is_file():
        raise FileNotFoundError(f'Audio file not found: {path}')
    if shutil.which('ffmpeg') is None:
        raise AudioLoadError('ffmpeg is required but was not found on PATH (brew/apt install ffmpeg)')

    raw = _decode(path)
    usable = len(raw) - len(raw) % _BYTES_PER_SAMPLE
    if usable == 0:
        raise AudioLoadError(f'No audio stream could be decoded from {path}')

    samples = np.frombuffer(raw[:usable], dtype=np.float32)
    log.info('Decoded %s: %d samples (%.1fs)', path.name, samples.size, samples.size / SAMPLE_RATE)
    return samples
