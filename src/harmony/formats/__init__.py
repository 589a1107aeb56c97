"""Catalogo de formatos, codecs e presets."""

from __future__ import annotations

from harmony.formats.registry import FormatRegistry, PresetTable, normalize_extension

__all__ = ["FormatRegistry", "PresetTable", "normalize_extension"]
