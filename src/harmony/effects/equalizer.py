"""EqualizationStage — equalizador parametrico com bandas peaking.

Coeficientes RBJ (Audio EQ Cookbook) por banda, cascateados em
second-order sections e aplicados com scipy.signal.sosfilt.
"""

from __future__ import annotations

import math
from typing import TYPE_CHECKING

import numpy as np
from scipy.signal import sosfilt

from harmony._types import EffectKind
from harmony.effects.params import GAIN_DB_LIMIT
from harmony.effects.stages import EffectStage
from harmony.exceptions import NyquistViolationError

if TYPE_CHECKING:
    from harmony.audio.buffer import SampleBuffer
    from harmony.effects.params import EqualizationParams, EqualizerBand


def peaking_sos(band: EqualizerBand, sample_rate: int) -> np.ndarray:
    """Second-order section [b0, b1, b2, 1, a1, a2] normalizada por a0.

    Raises:
        NyquistViolationError: frequency_hz >= sample_rate / 2.
    """
    if band.frequency_hz >= sample_rate / 2:
        raise NyquistViolationError(band.frequency_hz, sample_rate)

    amplitude = 10.0 ** (band.gain_db / 40.0)
    w0 = 2.0 * math.pi * band.frequency_hz / sample_rate
    alpha = math.sin(w0) / (2.0 * band.q)
    cos_w0 = math.cos(w0)

    b0 = 1.0 + alpha * amplitude
    b1 = -2.0 * cos_w0
    b2 = 1.0 - alpha * amplitude
    a0 = 1.0 + alpha / amplitude
    a1 = -2.0 * cos_w0
    a2 = 1.0 - alpha / amplitude

    return np.array([b0 / a0, b1 / a0, b2 / a0, 1.0, a1 / a0, a2 / a0])


class EqualizationStage(EffectStage):
    """Equalizador de bandas peaking.

    Todas as bandas sao verificadas contra Nyquist antes de filtrar,
    mesmo as de ganho 0 dB (que nao entram na cascata).
    """

    @property
    def kind(self) -> EffectKind:
        return EffectKind.EQUALIZATION

    def _process(self, buffer: SampleBuffer, params: EqualizationParams) -> SampleBuffer:  # type: ignore[override]
        sections = [peaking_sos(band, buffer.sample_rate) for band in params.bands]
        active = [
            sos for sos, band in zip(sections, params.bands, strict=True) if band.gain_db != 0.0
        ]
        if not active:
            return buffer.copy()

        filtered = sosfilt(np.vstack(active), buffer.channel_view(), axis=0)
        return buffer.with_samples(filtered.reshape(-1))

    def _strength_of(self, params: EqualizationParams) -> float:  # type: ignore[override]
        if not params.bands:
            return 0.0
        return max(abs(band.gain_db) for band in params.bands) / GAIN_DB_LIMIT
