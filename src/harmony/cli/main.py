"""Grupo principal de comandos CLI do Harmony."""

from __future__ import annotations

import click

import harmony


@click.group()
@click.version_option(version=harmony.__version__, prog_name="harmony")
def cli() -> None:
    """Harmony — nucleo de processamento e analise de audio."""
