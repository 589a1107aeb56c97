"""Stages de dinamica: amplificacao, normalizacao e compressao."""

from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np
from scipy.signal import lfilter

from harmony._types import EffectKind
from harmony.analysis.levels import decibel_to_linear
from harmony.analysis.waveform import normalize
from harmony.effects.params import GAIN_DB_LIMIT
from harmony.effects.stages import EffectStage

if TYPE_CHECKING:
    from harmony.audio.buffer import SampleBuffer
    from harmony.effects.params import AmplificationParams, CompressionParams, NormalizationParams

# Constante de tempo do detector RMS do compressor (segundos).
_ENVELOPE_TIME_S = 0.010

# Threshold do compressor: -6 dBFS com strength 0 ate -30 dBFS com strength 1.
_THRESHOLD_TOP_DB = -6.0
_THRESHOLD_RANGE_DB = 24.0

# Ratio maximo (strength 1 -> 8:1). Strength 0 -> 1:1, identidade.
_MAX_RATIO = 8.0

# Evita log(0) no detector de envelope.
_EPSILON = 1e-10


class AmplificationStage(EffectStage):
    """Ganho fixo em dB. Nao clipa: amostras fora de [-1, 1] viram warning no pipeline."""

    @property
    def kind(self) -> EffectKind:
        return EffectKind.AMPLIFICATION

    def _process(self, buffer: SampleBuffer, params: AmplificationParams) -> SampleBuffer:  # type: ignore[override]
        gain = decibel_to_linear(params.gain_db)
        return buffer.with_samples(buffer.samples * gain)

    def _strength_of(self, params: AmplificationParams) -> float:  # type: ignore[override]
        return abs(params.gain_db) / GAIN_DB_LIMIT


class NormalizationStage(EffectStage):
    """Normalizacao de pico parcial.

    Interpola entre o sinal original (strength 0) e o sinal normalizado
    para pico 1.0 (strength 1). Pico comum a todos os canais, preservando
    o balanco estereo. Silencio passa inalterado.
    """

    @property
    def kind(self) -> EffectKind:
        return EffectKind.NORMALIZATION

    def _process(self, buffer: SampleBuffer, params: NormalizationParams) -> SampleBuffer:  # type: ignore[override]
        strength = params.strength
        if strength == 0.0:
            return buffer.copy()

        normalized = normalize(buffer)
        if strength == 1.0:
            return buffer.with_samples(normalized)
        return buffer.with_samples((1.0 - strength) * buffer.samples + strength * normalized)


class CompressionStage(EffectStage):
    """Compressor feed-forward com detector RMS ligado entre canais.

    Threshold e ratio derivam do strength; acima do threshold o ganho e
    reduzido em (nivel - threshold) * (1 - 1/ratio) dB.
    """

    @property
    def kind(self) -> EffectKind:
        return EffectKind.COMPRESSION

    def _process(self, buffer: SampleBuffer, params: CompressionParams) -> SampleBuffer:  # type: ignore[override]
        strength = params.strength
        if strength == 0.0:
            return buffer.copy()

        threshold_db = _THRESHOLD_TOP_DB - _THRESHOLD_RANGE_DB * strength
        ratio = 1.0 + (_MAX_RATIO - 1.0) * strength

        frames = buffer.channel_view()
        power = np.mean(np.square(frames), axis=1)

        coeff = float(np.exp(-1.0 / (_ENVELOPE_TIME_S * buffer.sample_rate)))
        envelope = np.sqrt(np.maximum(lfilter([1.0 - coeff], [1.0, -coeff], power), 0.0))

        level_db = 20.0 * np.log10(np.maximum(envelope, _EPSILON))
        over_db = np.maximum(level_db - threshold_db, 0.0)
        gain = 10.0 ** (-over_db * (1.0 - 1.0 / ratio) / 20.0)

        return buffer.with_samples((frames * gain[:, np.newaxis]).reshape(-1))
