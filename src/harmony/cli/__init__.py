"""CLI do Harmony.

Registra todos os comandos no grupo principal.
"""

from harmony.cli.formats import formats, presets
from harmony.cli.main import cli
from harmony.cli.process import analyze, process
from harmony.cli.validate import validate_config

__all__ = [
    "analyze",
    "cli",
    "formats",
    "presets",
    "process",
    "validate_config",
]
