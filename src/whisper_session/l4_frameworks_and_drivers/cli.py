"""CLI entry point for whisper-session."""

from __future__ import annotations

import sys
from pathlib import Path

import click
from pydantic import ValidationError

from whisper_session import __version__

EXIT_CANCELLED = 2


def _decode_overrides(language: str | None, threads: int | None, prompt: str | None) -> dict:
    decode: dict = {}
    if language is not None:
        decode['language'] = language
    if threads is not None:
        decode['thread_count'] = threads
    if prompt is not None:
        decode['initial_prompt'] = prompt
    return decode


@click.command()
@click.argument('audio_file', type=click.Path(exists=True, dir_okay=False))
@click.option('-m', '--model', default=None, help='Model name (e.g. large-v3-q5_0) or path to a ggml file.')
@click.option(
    '-c',
    '--config',
    'config_path',
    default=None,
    type=click.Path(exists=True),
    help='Path to YAML config file.',
)
@click.option('--language', default=None, help="Spoken language code, or 'auto'.")
@click.option('--threads', type=int, default=None, help='Engine worker threads.')
@click.option('--prompt', default=None, help='Initial prompt to bias decoding.')
@click.option('--timeout', type=float, default=None, help='Cancel the decode after this many seconds.')
@click.option(
    '-o',
    '--output-dir',
    default=None,
    type=click.Path(file_okay=False),
    help='Directory for transcript_raw.txt.',
)
@click.option('--log-file', default=None, type=click.Path(dir_okay=False), help='Write a debug log here.')
@click.option('-v', '--verbose', is_flag=True, help='Log progress details to stderr.')
@click.version_option(version=__version__)
def cli(audio_file, model, config_path, language, threads, prompt, timeout, output_dir, log_file, verbose):
    """whisper-session -- transcribe an audio file with whisper.cpp."""
    from whisper_session.l3_interface_adapters.gateways.yaml_config_loader import (  # noqa: PLC0415 -- deferred: yaml stack not loaded on --help
        YamlConfigLoader,
    )
    from whisper_session.l4_frameworks_and_drivers.infra_config import (  # noqa: PLC0415 -- deferred: not needed for --help
        build_app_config,
    )
    from whisper_session.l4_frameworks_and_drivers.logging_setup import (  # noqa: PLC0415 -- deferred: not needed for --help
        setup_logging,
    )

    overrides: dict = {}
    if model:
        overrides['model'] = model
    decode = _decode_overrides(language, threads, prompt)
    if decode:
        overrides['decode'] = decode
    if log_file:
        overrides['logging'] = {'file': log_file}
    if verbose:
        overrides.setdefault('logging', {})['level'] = 'INFO'

    try:
        raw = YamlConfigLoader().load_raw(config_path, overrides=overrides or None)
        config = build_app_config(raw)
    except FileNotFoundError as e:
        click.echo(f'Error: {e}', err=True)
        sys.exit(1)
    except ValidationError as e:
        click.echo(f'Error: invalid configuration\n{e}', err=True)
        sys.exit(1)

    setup_logging(config.logging.level, Path(config.logging.file) if config.logging.file else None)

    from whisper_session.l4_frameworks_and_drivers.batch_runner import (  # noqa: PLC0415 -- deferred: pulls in pywhispercpp
        run_file,
    )

    result = run_file(
        audio_path=Path(audio_file),
        config=config,
        out_dir=Path(output_dir) if output_dir else None,
        timeout=timeout,
    )
    if result.cancelled:
        sys.exit(EXIT_CANCELLED)
