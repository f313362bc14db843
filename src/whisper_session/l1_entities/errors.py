"""Domain error types."""

from __future__ import annotations


class WhisperSessionError(Exception):
    """Base class for every error raised by whisper-session."""


class ModelLoadError(WhisperSessionError):
    """Raised when a model file cannot be opened as a whisper.cpp model."""


class ModelResolutionError(ModelLoadError):
    """Raised when a whisper model cannot be resolved to a local path."""


class InvalidConfig(WhisperSessionError, ValueError):
    """Raised when decode parameters fall outside the engine's accepted ranges."""

    def __init__(self, problems: list[str]) -> None:
        self.problems = list(problems)
        super().__init__('Invalid decode config: ' + '; '.join(self.problems))


class InvalidAudio(WhisperSessionError, ValueError):
    """Raised when the audio buffer is empty or not mono."""


class AudioLoadError(WhisperSessionError, RuntimeError):
    """Raised when an audio file cannot be decoded into samples."""


class InferenceError(WhisperSessionError):
    """Raised when the engine reports an unrecoverable decode failure."""

    def __init__(self, status: int, message: str = '') -> None:
        self.status = status
        detail = f': {message}' if message else ''
        super().__init__(f'Inference failed with engine status {status}{detail}')


class ProgrammerError(WhisperSessionError):
    """Misuse of the session API. Never retried, never ignored."""


class TokenReused(ProgrammerError):
    """Raised when one cancellation token is handed to a second session."""


class UseAfterFree(ProgrammerError):
    """Raised when a closed model handle is used."""


class InvalidSessionState(ProgrammerError):
    """Raised when a session is run more than once."""
