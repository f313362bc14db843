"""Gateway: transcript file writer."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from pathlib import Path

from whisper_session.l1_entities.transcript import Segment, format_timestamp

log = logging.getLogger('ws.persist')

TRANSCRIPT_FILENAME = 'transcript_raw.txt'


class FilePersistenceGateway:
    """Appends transcript lines to a file in the output directory."""

    def __init__(self, output_dir: Path) -> None:
        self._output_dir = output_dir
        self._output_dir.mkdir(parents=True, exist_ok=True)

    @property
    def transcript_path(self) -> Path:
        return self._output_dir / TRANSCRIPT_FILENAME

    def save_transcript_lines(self, segments: Sequence[Segment], *, append: bool = True) -> Path:
        path = self.transcript_path
        mode = 'a' if append else 'w'
        with path.open(mode, encoding='utf-8') as f:
            for seg in segments:
                f.write(f'[{format_timestamp(seg.start)}] {seg.text}\n')
        log.debug('Wrote %d segments to %s (mode=%s)', len(segments), path.name, mode)
        return path
