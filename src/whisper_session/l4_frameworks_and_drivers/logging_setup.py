"""Logging setup for the ``ws`` logger tree."""

from __future__ import annotations

import logging
from pathlib import Path

_FORMAT = '%(asctime)s %(levelname)s %(message)s'


def setup_logging(level: str = 'WARNING', log_file: Path | None = None) -> None:
    """Send ``ws.*`` records to stderr, and to *log_file* at DEBUG when given."""
    root = logging.getLogger('ws')
    root.setLevel(logging.DEBUG)
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()

    console = logging.StreamHandler()
    console.setLevel(level.upper())
    console.setFormatter(logging.Formatter(_FORMAT))
    root.addHandler(console)

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding='utf-8')
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(_FORMAT))
        root.addHandler(file_handler)
        root.info('Debug logging started → %s', log_file)
