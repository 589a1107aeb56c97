"""Schema de configuracao do nucleo de audio."""

from __future__ import annotations

from harmony.config.processing import AudioProcessingConfig

__all__ = ["AudioProcessingConfig"]
