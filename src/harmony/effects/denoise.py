"""Stages de limpeza: noise cancellation e echo cancellation.

Ambos operam sobre o buffer inteiro de cada canal, sem estado entre
invocacoes (nenhum perfil de ruido ou sinal de referencia e retido).
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np
from scipy.signal import lfilter

from harmony._types import EffectKind
from harmony.effects.stages import EffectStage, map_channels

if TYPE_CHECKING:
    from harmony.audio.buffer import SampleBuffer
    from harmony.effects.params import EchoCancellationParams, NoiseCancellationParams

# Fator de sobre-subtracao do piso de ruido com strength 1.
_OVERSUBTRACTION = 1.5

# Fracao minima da magnitude original mantida por bin (evita "musical noise").
_SPECTRAL_FLOOR = 0.05

# Menor atraso considerado eco (segundos); abaixo disso e coloracao, nao eco.
_MIN_ECHO_DELAY_S = 0.005

# Maior atraso procurado (segundos), limitado a metade do buffer.
_MAX_ECHO_DELAY_S = 0.5

# Correlacao normalizada minima para considerar que ha eco.
_ECHO_DETECTION_THRESHOLD = 0.1

# Um eco simples x + a*x[n-D] produz correlacao a/(1+a^2) <= 0.5.
# Acima disso o pico vem de conteudo periodico (tom), nao de eco.
_MAX_SINGLE_ECHO_CORRELATION = 0.5

# Limite do coeficiente de cancelamento (estabilidade do filtro IIR).
_MAX_ECHO_GAIN = 0.95

_EPSILON = 1e-12


def _spectral_subtract(column: np.ndarray, strength: float) -> np.ndarray:
    spectrum = np.fft.rfft(column)
    magnitude = np.abs(spectrum)

    noise_floor = float(np.median(magnitude))
    reduced = np.maximum(
        magnitude - _OVERSUBTRACTION * strength * noise_floor,
        _SPECTRAL_FLOOR * magnitude,
    )
    gain = np.divide(reduced, magnitude, out=np.ones_like(magnitude), where=magnitude > _EPSILON)
    return np.fft.irfft(spectrum * gain, n=column.shape[0])


class NoiseCancellationStage(EffectStage):
    """Subtracao espectral com piso de ruido estimado pela mediana da magnitude.

    A fase e preservada; cada bin perde ate strength * 1.5 * piso de
    magnitude, mantendo no minimo 5% da magnitude original.
    """

    @property
    def kind(self) -> EffectKind:
        return EffectKind.NOISE_CANCELLATION

    def _process(self, buffer: SampleBuffer, params: NoiseCancellationParams) -> SampleBuffer:  # type: ignore[override]
        if params.strength == 0.0:
            return buffer.copy()
        return map_channels(
            buffer, lambda column, _sr, _ch: _spectral_subtract(column, params.strength)
        )


def detect_echo(column: np.ndarray, sample_rate: int) -> tuple[int, float] | None:
    """Detecta um eco simples via autocorrelacao.

    Returns:
        (atraso em amostras, ganho estimado do eco) ou None se nao ha eco
        detectavel no intervalo de atrasos considerado.
    """
    n = column.shape[0]
    min_lag = max(2, int(_MIN_ECHO_DELAY_S * sample_rate))
    max_lag = min(n // 2, int(_MAX_ECHO_DELAY_S * sample_rate))
    if max_lag <= min_lag:
        return None

    nfft = 1 << (2 * n - 1).bit_length()
    spectrum = np.fft.rfft(column, nfft)
    autocorr = np.fft.irfft(np.abs(spectrum) ** 2, nfft)[: max_lag + 1]

    energy = float(autocorr[0])
    if energy <= _EPSILON:
        return None

    window = autocorr[min_lag : max_lag + 1]
    lag = int(np.argmax(window)) + min_lag
    rho = float(autocorr[lag]) / energy

    if rho < _ECHO_DETECTION_THRESHOLD or rho > _MAX_SINGLE_ECHO_CORRELATION:
        return None

    # Inverte rho = a / (1 + a^2) para a raiz em (0, 1]
    echo_gain = (1.0 - np.sqrt(max(1.0 - 4.0 * rho * rho, 0.0))) / (2.0 * rho)
    return lag, min(float(echo_gain), _MAX_ECHO_GAIN)


class EchoCancellationStage(EffectStage):
    """Cancelamento de eco simples sem sinal de referencia.

    Detecta o atraso dominante por autocorrelacao e aplica o comb
    inverso y[n] = x[n] - g * y[n - D], com g = strength * ganho estimado.
    Canais sem eco detectavel passam inalterados.
    """

    @property
    def kind(self) -> EffectKind:
        return EffectKind.ECHO_CANCELLATION

    def _process(self, buffer: SampleBuffer, params: EchoCancellationParams) -> SampleBuffer:  # type: ignore[override]
        if params.strength == 0.0:
            return buffer.copy()

        def cancel(column: np.ndarray, sample_rate: int, _channel: int) -> np.ndarray:
            echo = detect_echo(column, sample_rate)
            if echo is None:
                return column
            lag, echo_gain = echo
            denominator = np.zeros(lag + 1)
            denominator[0] = 1.0
            denominator[lag] = params.strength * echo_gain
            return lfilter([1.0], denominator, column)

        return map_channels(buffer, cancel)
