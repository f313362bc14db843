"""Tests for DecodeConfig range checks."""

import pytest
from pydantic import ValidationError

from whisper_session.l1_entities.decode_config import DECODE_LIMITS, DecodeConfig
from whisper_session.l1_entities.errors import InvalidConfig


class TestDefaults:
    def test_defaults_are_valid(self):
        cfg = DecodeConfig()
        assert cfg.problems() == []
        cfg.check()

    def test_defaults_match_engine_wrapper(self):
        cfg = DecodeConfig()
        assert cfg.language == 'auto'
        assert cfg.beam_width == 5
        assert cfg.best_of == 5
        assert cfg.entropy_threshold == pytest.approx(2.40)
        assert cfg.logprob_threshold == pytest.approx(-1.00)
        assert cfg.max_segment_length == 120
        assert cfg.thread_count == 4

    def test_frozen(self):
        cfg = DecodeConfig()
        with pytest.raises(ValidationError):
            cfg.thread_count = 8  # type: ignore[misc]


class TestCheck:
    def test_zero_threads_rejected(self):
        with pytest.raises(InvalidConfig, match='thread_count=0'):
            DecodeConfig(thread_count=0).check()

    def test_not_clamped(self):
        cfg = DecodeConfig(thread_count=0)
        assert cfg.thread_count == 0

    def test_every_problem_listed(self):
        cfg = DecodeConfig(beam_width=0, best_of=0, offset_ms=-1)
        with pytest.raises(InvalidConfig) as exc_info:
            cfg.check()
        assert len(exc_info.value.problems) == 3

    def test_upper_bound(self):
        assert DecodeConfig(beam_width=17).problems() == ['beam_width=17 is above the maximum 16']

    def test_positive_logprob_threshold_rejected(self):
        assert DecodeConfig(logprob_threshold=0.5).problems()

    def test_blank_language_rejected(self):
        assert DecodeConfig(language='  ').problems()

    def test_invalid_config_is_value_error(self):
        with pytest.raises(ValueError):
            DecodeConfig(max_segment_length=0).check()

    def test_limits_name_real_fields(self):
        for name in DECODE_LIMITS:
            assert name in DecodeConfig.model_fields
