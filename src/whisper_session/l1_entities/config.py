"""Configuration Pydantic models — pure schema, no infrastructure defaults."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel

from whisper_session.l1_entities.decode_config import DecodeConfig


class EngineConfig(BaseModel):
    strategy: Literal['greedy', 'beam_search']
    window_seconds: float


class LoggingConfig(BaseModel):
    level: str
    file: str | None = None


class AppConfig(BaseModel):
    model: str
    engine: EngineConfig
    decode: DecodeConfig
    logging: LoggingConfig
