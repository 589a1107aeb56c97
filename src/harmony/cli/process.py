"""Comandos `harmony analyze` e `harmony process` — arquivos PCM crus.

Arquivos sao float32 little-endian intercalados, sem cabecalho.
Decodificacao de containers (mp3, wav, ...) fica fora do nucleo.
"""

from __future__ import annotations

import sys
from pathlib import Path

import click
import numpy as np

from harmony.analysis.summary import analyze as analyze_buffer
from harmony.audio.buffer import SampleBuffer
from harmony.cli._common import config_option, load_engine
from harmony.cli.main import cli
from harmony.exceptions import HarmonyError

_RAW_DTYPE = np.dtype("<f4")


def _read_raw(path: Path, sample_rate: int, channels: int) -> SampleBuffer:
    if not path.exists():
        click.echo(f"Erro: arquivo nao encontrado: {path}", err=True)
        sys.exit(1)
    samples = np.fromfile(path, dtype=_RAW_DTYPE)
    return SampleBuffer(samples, sample_rate=sample_rate, channels=channels)


_sample_rate_option = click.option(
    "--sample-rate", default=44100, show_default=True, type=click.IntRange(min=1)
)
_channels_option = click.option(
    "--channels", default=1, show_default=True, type=click.IntRange(min=1)
)


@cli.command()
@click.argument("raw_file", type=click.Path(dir_okay=False, path_type=Path))
@_sample_rate_option
@_channels_option
@click.option("--width", default=60, show_default=True, type=click.IntRange(min=1))
def analyze(raw_file: Path, sample_rate: int, channels: int, width: int) -> None:
    """Mostra rms, pico, duracao e waveform de um arquivo PCM cru."""
    buffer = _read_raw(raw_file, sample_rate, channels)
    try:
        summary = analyze_buffer(buffer, width)
    except HarmonyError as e:
        click.echo(f"Erro: {e}", err=True)
        sys.exit(1)

    click.echo(f"samples:  {summary.length}")
    click.echo(f"duration: {summary.duration_s:.3f}s")
    click.echo(f"rms:      {summary.rms:.6f} ({_format_dbfs(summary.rms_dbfs)})")
    click.echo(f"peak:     {summary.peak:.6f} ({_format_dbfs(summary.peak_dbfs)})")
    click.echo("waveform: " + " ".join(f"{point:.3f}" for point in summary.waveform or ()))


@cli.command()
@click.argument("input_file", type=click.Path(dir_okay=False, path_type=Path))
@click.argument("output_file", type=click.Path(dir_okay=False, path_type=Path))
@_sample_rate_option
@_channels_option
@config_option
def process(
    input_file: Path,
    output_file: Path,
    sample_rate: int,
    channels: int,
    config_path: str | None,
) -> None:
    """Aplica a cadeia de efeitos configurada a um arquivo PCM cru.

    O arquivo e processado em blocos de performance.buffer_size amostras.
    """
    engine = load_engine(config_path)
    buffer = _read_raw(input_file, sample_rate, channels)

    block = engine.pipeline_config.performance.buffer_size
    block -= block % channels
    if block == 0:
        click.echo("Erro: buffer_size menor que o numero de canais.", err=True)
        sys.exit(1)

    samples = buffer.samples
    blocks: list[np.ndarray] = []
    warnings: set[str] = set()
    try:
        for start in range(0, len(samples), block):
            chunk = SampleBuffer(samples[start : start + block], sample_rate, channels)
            result = engine.process(chunk)
            blocks.append(result.output.samples)
            warnings.update(result.warnings)
    except HarmonyError as e:
        click.echo(f"Erro: {e}", err=True)
        sys.exit(1)

    output = np.concatenate(blocks) if blocks else np.zeros(0)
    output.astype(_RAW_DTYPE).tofile(output_file)

    for warning in sorted(warnings):
        click.echo(f"Aviso: {warning}", err=True)
    click.echo(f"{len(blocks)} blocos processados -> {output_file}")


def _format_dbfs(value: float | None) -> str:
    return "-inf dBFS" if value is None else f"{value:.2f} dBFS"
