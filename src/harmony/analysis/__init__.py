"""Analysis — funcoes numericas puras sobre buffers de audio."""

from __future__ import annotations

from harmony.analysis.levels import decibel_to_linear, linear_to_decibel, peak, rms, variance
from harmony.analysis.summary import (
    AudioMetadata,
    analyze,
    analyze_preview,
    extract_summary,
    validate_metadata,
)
from harmony.analysis.waveform import normalize, waveform

__all__ = [
    "AudioMetadata",
    "analyze",
    "analyze_preview",
    "decibel_to_linear",
    "extract_summary",
    "linear_to_decibel",
    "normalize",
    "peak",
    "rms",
    "validate_metadata",
    "variance",
    "waveform",
]
