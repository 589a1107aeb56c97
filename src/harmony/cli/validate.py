"""Comando `harmony validate-config` — valida um YAML de configuracao."""

from __future__ import annotations

import sys

import click

from harmony.cli.main import cli
from harmony.config.processing import AudioProcessingConfig
from harmony.engine import AudioEngine
from harmony.exceptions import ConfigError, ConfigValidationError


@cli.command("validate-config")
@click.argument("path", type=click.Path(dir_okay=False))
def validate_config(path: str) -> None:
    """Valida o arquivo de configuracao e mostra a cadeia resultante."""
    try:
        engine = AudioEngine.from_config(AudioProcessingConfig.from_yaml_path(path))
    except ConfigValidationError as e:
        click.echo(f"Configuracao invalida: {e.source}", err=True)
        for error in e.errors:
            click.echo(f"  - {error}", err=True)
        sys.exit(1)
    except ConfigError as e:
        click.echo(f"Erro: {e}", err=True)
        sys.exit(1)

    config = engine.pipeline_config
    click.echo(f"Configuracao valida: {path}")
    click.echo(f"buffer_size={config.performance.buffer_size}")
    for params in config.effects:
        status = "on" if params.enabled else "off"
        click.echo(f"  {params.kind.value:<20} {status}")
