"""Buffer PCM do nucleo de audio."""

from __future__ import annotations

from harmony.audio.buffer import SampleBuffer, validate_buffer

__all__ = ["SampleBuffer", "validate_buffer"]
