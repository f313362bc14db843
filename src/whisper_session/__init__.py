"""whisper-session: transcription sessions over whisper.cpp."""

__version__ = '0.1.0'
