"""Audio format expected by the engine."""

SAMPLE_RATE = 16000
CENTISECONDS_PER_SECOND = 100.0
