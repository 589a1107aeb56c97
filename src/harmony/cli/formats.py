"""Comandos `harmony formats` e `harmony presets` — consultas de tabela."""

from __future__ import annotations

import click

from harmony.cli._common import config_option, load_engine
from harmony.cli.main import cli


@cli.command()
@config_option
def formats(config_path: str | None) -> None:
    """Lista formatos suportados (extensao, mime type, codec)."""
    engine = load_engine(config_path)
    descriptors = engine.list_formats()

    if not descriptors:
        click.echo("Nenhum formato configurado.")
        return

    click.echo(f"{'EXT':<6}  {'MIME':<14}  {'CODEC':<8}  {'BITRATE':>8}  {'RATE':>6}  {'CH':>2}")
    for d in descriptors:
        mime_type, codec = engine.describe_format(d.extension)
        bitrate = str(d.bitrate) if d.bitrate is not None else "-"
        sample_rate = str(d.sample_rate) if d.sample_rate is not None else "-"
        channels = str(d.channels) if d.channels is not None else "-"
        click.echo(
            f"{d.extension:<6}  {mime_type:<14}  {codec:<8}  "
            f"{bitrate:>8}  {sample_rate:>6}  {channels:>2}"
        )


@cli.command()
@config_option
def presets(config_path: str | None) -> None:
    """Lista presets de qualidade e de reverb."""
    engine = load_engine(config_path)

    click.echo(f"{'QUALITY':<10}  {'BITRATE':>8}  {'RATE':>6}  {'CH':>2}")
    for name, q in engine.list_quality_presets().items():
        click.echo(f"{name:<10}  {q.bitrate:>8}  {q.sample_rate:>6}  {q.channels:>2}")

    click.echo("")
    click.echo(f"{'REVERB':<10}  {'ROOM':>5}  {'DAMP':>5}  {'WET':>5}  {'DRY':>5}")
    for name, r in engine.list_reverb_presets().items():
        click.echo(
            f"{name:<10}  {r.room_size:>5.2f}  {r.damping:>5.2f}  "
            f"{r.wet_level:>5.2f}  {r.dry_level:>5.2f}"
        )
