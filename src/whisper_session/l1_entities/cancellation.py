"""Cooperative cancellation flag shared between a caller and one session."""

from __future__ import annotations

import threading

from whisper_session.l1_entities.errors import TokenReused


class CancellationToken:
    """Single-use abort flag.

    ``request()`` may be called from any thread; the session only reads the
    flag at its checkpoints. Once set the flag is never cleared, so a token
    is bound to exactly one session and rejected by any other.
    """

    def __init__(self) -> None:
        self._event = threading.Event()
        self._lock = threading.Lock()
        self._owner: object | None = None

    def request(self) -> None:
        self._event.set()

    def is_requested(self) -> bool:
        return self._event.is_set()

    @property
    def bound(self) -> bool:
        return self._owner is not None

    def bind(self, owner: object) -> None:
        """Attach the token to *owner*. Raises TokenReused for a second owner."""
        with self._lock:
            if self._owner is not None and self._owner is not owner:
                raise TokenReused('CancellationToken already belongs to another session')
            self._owner = owner
