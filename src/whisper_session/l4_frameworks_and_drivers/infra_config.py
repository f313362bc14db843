"""Built-in defaults merged under user configuration."""

from __future__ import annotations

import copy

from whisper_session.l1_entities.config import AppConfig
from whisper_session.l3_interface_adapters.gateways.yaml_config_loader import deep_merge

APP_CONFIG_DEFAULTS: dict = {
    'model': 'large-v3-q5_0',
    'engine': {
        'strategy': 'beam_search',
        'window_seconds': 30.0,
    },
    'decode': {
        'language': 'auto',
        'initial_prompt': '',
        'beam_width': 5,
        'best_of': 5,
        'entropy_threshold': 2.40,
        'logprob_threshold': -1.00,
        'max_segment_length': 120,
        'thread_count': 4,
        'offset_ms': 0,
        'duration_ms': 0,
    },
    'logging': {
        'level': 'WARNING',
        'file': None,
    },
}


def build_app_config(raw: dict) -> AppConfig:
    """Merge *raw* user overrides on top of defaults, then validate."""
    merged = copy.deepcopy(APP_CONFIG_DEFAULTS)
    deep_merge(merged, raw)
    return AppConfig.model_validate(merged)
