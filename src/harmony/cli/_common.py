"""Helpers compartilhados pelos comandos CLI."""

from __future__ import annotations

import sys

import click

from harmony.config.processing import AudioProcessingConfig
from harmony.engine import AudioEngine
from harmony.exceptions import ConfigError

config_option = click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False),
    default=None,
    help="Arquivo YAML de configuracao. Sem ele, usa os defaults.",
)


def load_engine(config_path: str | None) -> AudioEngine:
    """Carrega a configuracao e constroi o engine; encerra com exit 1 em erro."""
    try:
        if config_path is None:
            config = AudioProcessingConfig()
        else:
            config = AudioProcessingConfig.from_yaml_path(config_path)
        return AudioEngine.from_config(config)
    except ConfigError as e:
        click.echo(f"Erro de configuracao: {e}", err=True)
        sys.exit(1)
