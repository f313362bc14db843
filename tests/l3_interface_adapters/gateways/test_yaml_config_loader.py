"""Tests for YAML config loader gateway."""

from __future__ import annotations

from pathlib import Path

import pytest

import whisper_session.l3_interface_adapters.gateways.yaml_config_loader as mod
from whisper_session.l3_interface_adapters.gateways.yaml_config_loader import YamlConfigLoader, deep_merge


class TestYamlConfigLoader:
    def test_load_raw_returns_dict(self, sample_config_yaml: Path):
        raw = YamlConfigLoader().load_raw(str(sample_config_yaml))
        assert raw['model'] == 'tiny'
        assert raw['decode']['thread_count'] == 2

    def test_load_nonexistent_raises(self, tmp_path: Path):
        with pytest.raises(FileNotFoundError):
            YamlConfigLoader().load_raw(str(tmp_path / 'nonexistent.yaml'))

    def test_load_raw_with_overrides(self, sample_config_yaml: Path):
        raw = YamlConfigLoader().load_raw(
            str(sample_config_yaml),
            overrides={'decode': {'thread_count': 8}},
        )
        assert raw['decode']['thread_count'] == 8
        assert raw['decode']['language'] == 'en'

    def test_empty_yaml_is_empty_dict(self, tmp_path: Path):
        p = tmp_path / 'empty.yaml'
        p.write_text('', encoding='utf-8')
        assert YamlConfigLoader().load_raw(str(p)) == {}


class TestDefaultConfigResolution:
    def test_loads_from_default_config_dir(self, tmp_path: Path, monkeypatch):
        config_dir = tmp_path / 'whisper-session'
        config_dir.mkdir()
        (config_dir / 'config.yml').write_text('model: "base.en"\n', encoding='utf-8')
        monkeypatch.setattr(mod, 'DEFAULT_CONFIG_PATHS', [config_dir / 'config.yaml', config_dir / 'config.yml'])

        assert YamlConfigLoader().load_raw() == {'model': 'base.en'}

    def test_no_default_config_returns_empty(self, tmp_path: Path, monkeypatch):
        nonexistent = tmp_path / 'nonexistent'
        monkeypatch.setattr(mod, 'DEFAULT_CONFIG_PATHS', [nonexistent / 'config.yaml'])

        assert YamlConfigLoader().load_raw() == {}


class TestDeepMerge:
    def test_nested_merge_keeps_siblings(self):
        base = {'decode': {'language': 'en', 'thread_count': 4}}
        deep_merge(base, {'decode': {'thread_count': 2}})
        assert base == {'decode': {'language': 'en', 'thread_count': 2}}

    def test_scalar_replaces_dict(self):
        base = {'logging': {'level': 'INFO'}}
        deep_merge(base, {'logging': None})
        assert base == {'logging': None}
