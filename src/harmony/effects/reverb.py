"""ReverbStage — reverb algoritmico (topologia Schroeder/Freeverb).

Quatro filtros comb com amortecimento em paralelo seguidos de dois
allpass em serie, todos como filtros IIR via scipy.signal.lfilter.
A cauda do reverb fica limitada ao buffer corrente (stage sem estado).
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np
from scipy.signal import lfilter

from harmony._types import EffectKind
from harmony.effects.stages import EffectStage, map_channels

if TYPE_CHECKING:
    from harmony._types import ReverbPreset
    from harmony.audio.buffer import SampleBuffer
    from harmony.effects.params import ReverbParams
    from harmony.formats.registry import PresetTable

# Atrasos do Freeverb em amostras a 44.1kHz; reescalados pelo sample rate.
_COMB_DELAYS_44K = (1116, 1188, 1277, 1356)
_ALLPASS_DELAYS_44K = (556, 441)
_REFERENCE_RATE = 44100

# Deslocamento dos atrasos por canal (descorrelaciona estereo).
_STEREO_SPREAD_44K = 23

_ALLPASS_FEEDBACK = 0.5

# room_size [0, 1] -> feedback dos combs [0.70, 0.98]
_FEEDBACK_OFFSET = 0.7
_FEEDBACK_SCALE = 0.28

# damping [0, 1] -> coeficiente do passa-baixa no loop [0, 0.4]
_DAMPING_SCALE = 0.4


def _scaled_delay(delay_44k: int, sample_rate: int, channel: int) -> int:
    spread = _STEREO_SPREAD_44K * channel
    return max(2, round((delay_44k + spread) * sample_rate / _REFERENCE_RATE))


def _damped_comb(x: np.ndarray, delay: int, feedback: float, damp: float) -> np.ndarray:
    # Saida atrasada: H(z) = z^-D (1 - d z^-1) / (1 - d z^-1 - f (1 - d) z^-D)
    numerator = np.zeros(delay + 2)
    numerator[delay] = 1.0
    numerator[delay + 1] = -damp
    denominator = np.zeros(delay + 1)
    denominator[0] = 1.0
    denominator[1] = -damp
    denominator[delay] -= feedback * (1.0 - damp)
    return lfilter(numerator, denominator, x)


def _allpass(x: np.ndarray, delay: int, feedback: float) -> np.ndarray:
    # H(z) = (-1 + (1 + g) z^-D) / (1 - g z^-D)
    numerator = np.zeros(delay + 1)
    numerator[0] = -1.0
    numerator[delay] = 1.0 + feedback
    denominator = np.zeros(delay + 1)
    denominator[0] = 1.0
    denominator[delay] = -feedback
    return lfilter(numerator, denominator, x)


def render_wet(column: np.ndarray, sample_rate: int, channel: int, preset: ReverbPreset) -> np.ndarray:
    """Sinal 100% wet de um canal, com ganho DC unitario nos combs."""
    feedback = _FEEDBACK_OFFSET + _FEEDBACK_SCALE * preset.room_size
    damp = _DAMPING_SCALE * preset.damping

    wet = np.zeros_like(column)
    for delay_44k in _COMB_DELAYS_44K:
        delay = _scaled_delay(delay_44k, sample_rate, channel)
        wet += _damped_comb(column, delay, feedback, damp)
    wet *= (1.0 - feedback) / len(_COMB_DELAYS_44K)

    for delay_44k in _ALLPASS_DELAYS_44K:
        wet = _allpass(wet, _scaled_delay(delay_44k, sample_rate, channel), _ALLPASS_FEEDBACK)
    return wet


class ReverbStage(EffectStage):
    """Reverb com preset de sala resolvido no momento do apply.

    room_size e damping vem do preset; wet_level e dry_level vem dos
    parametros do efeito.

    Args:
        presets: Tabela de presets de reverb (somente-leitura, compartilhada).
    """

    def __init__(self, presets: PresetTable[ReverbPreset]) -> None:
        self._presets = presets

    @property
    def kind(self) -> EffectKind:
        return EffectKind.REVERB

    def _process(self, buffer: SampleBuffer, params: ReverbParams) -> SampleBuffer:  # type: ignore[override]
        preset = self._presets.require(params.preset_name)

        def mix(column: np.ndarray, sample_rate: int, channel: int) -> np.ndarray:
            wet = render_wet(column, sample_rate, channel, preset)
            return params.dry_level * column + params.wet_level * wet

        return map_channels(buffer, mix)

    def _strength_of(self, params: ReverbParams) -> float:  # type: ignore[override]
        return params.wet_level
