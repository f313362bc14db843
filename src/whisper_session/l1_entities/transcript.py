"""Transcript segment entity."""

from __future__ import annotations

from pydantic import BaseModel, Field


def format_timestamp(seconds: float) -> str:
    """Format seconds as HH:MM:SS."""
    hours = int(seconds // 3600)
    minutes = int((seconds % 3600) // 60)
    secs = int(seconds % 60)
    return f'{hours:02d}:{minutes:02d}:{secs:02d}'


class Segment(BaseModel):
    """A contiguous span of transcribed text."""

    model_config = {'frozen': True}

    text: str
    start: float = Field(description='Offset in seconds from the start of the buffer')
    end: float = Field(description='Offset in seconds from the start of the buffer')
