"""Gateway: HuggingFace model resolver — implements ModelResolver port."""

from __future__ import annotations

import logging
from collections.abc import Callable
from pathlib import Path

from huggingface_hub import hf_hub_download
from pywhispercpp.constants import MODELS_DIR

from whisper_session.l1_entities.errors import ModelResolutionError

log = logging.getLogger('ws.model')

WHISPER_CPP_REPO = 'ggerganov/whisper.cpp'
WHISPER_CPP_MODELS = {
    'large-v3-turbo-q8_0': 'ggml-large-v3-turbo-q8_0.bin',
    'large-v3-turbo-q5_0': 'ggml-large-v3-turbo-q5_0.bin',
    'large-v3-turbo': 'ggml-large-v3-turbo.bin',
    'large-v3-q5_0': 'ggml-large-v3-q5_0.bin',
    'large-v3': 'ggml-large-v3.bin',
    'large-v2-q8_0': 'ggml-large-v2-q8_0.bin',
    'large-v2-q5_0': 'ggml-large-v2-q5_0.bin',
    'medium-q8_0': 'ggml-medium-q8_0.bin',
    'medium-q5_0': 'ggml-medium-q5_0.bin',
    'small-q8_0': 'ggml-small-q8_0.bin',
    'small-q5_1': 'ggml-small-q5_1.bin',
    'base': 'ggml-base.bin',
    'base.en': 'ggml-base.en.bin',
    'tiny': 'ggml-tiny.bin',
    'tiny.en': 'ggml-tiny.en.bin',
}


class _DownloadProgress:
    """Bare tqdm stand-in for hf_hub_download: relays whole-percent changes only."""

    callback: Callable[[int], None]

    def __init__(self, *args, total: int | None = None, initial: int = 0, **kwargs) -> None:
        self.total = total or 0
        self.n = initial or 0
        self._last: int | None = None
        self._relay()

    def update(self, n: int = 1) -> None:
        self.n += n
        self._relay()

    def _relay(self) -> None:
        if self.total <= 0:
            return
        percent = min(self.n * 100 // self.total, 100)
        if percent != self._last:
            self._last = percent
            self.callback(percent)

    def __getattr__(self, name: str):
        # close(), refresh(), set_description() and friends only drive a terminal bar
        return lambda *args, **kwargs: None

    def __enter__(self):
        return self

    def __exit__(self, *exc_info) -> None:
        pass


def _progress_class_for(callback: Callable[[int], None]) -> type:
    return type('_BoundDownloadProgress', (_DownloadProgress,), {'callback': staticmethod(callback)})


class HfModelResolver:
    """Resolves whisper model names to local file paths, downloading from HF if needed."""

    def __init__(self, on_progress: Callable[[int], None] | None = None) -> None:
        self._on_progress = on_progress

    def resolve(self, model_name: str) -> str:
        if Path(model_name).is_absolute():
            if not Path(model_name).exists():
                raise ModelResolutionError(f'Model file not found: {model_name}')
            return model_name

        if model_name in WHISPER_CPP_MODELS:
            tqdm_class = _progress_class_for(self._on_progress) if self._on_progress else None
            try:
                return _download_whisper_cpp(model_name, tqdm_class=tqdm_class)
            except OSError as e:
                raise ModelResolutionError(f'Could not download {model_name}: {e}') from e

        return model_name


def _download_whisper_cpp(name: str, *, tqdm_class: type | None = None) -> str:
    filename = WHISPER_CPP_MODELS[name]
    cache_dir = Path(MODELS_DIR) / 'whisper-cpp'
    cache_dir.mkdir(parents=True, exist_ok=True)
    local_path = cache_dir / filename
    if local_path.exists():
        return str(local_path)
    log.info('Downloading %s from %s', filename, WHISPER_CPP_REPO)
    kwargs: dict = dict(repo_id=WHISPER_CPP_REPO, filename=filename, local_dir=cache_dir)
    if tqdm_class is not None:
        kwargs['tqdm_class'] = tqdm_class
    return hf_hub_download(**kwargs)
