"""Medidas de nivel: RMS, pico, variancia e conversoes dB <-> linear.

Funcoes puras sobre buffers ja validados. Aceitam SampleBuffer ou
qualquer sequencia 1-D de amostras.
"""

from __future__ import annotations

import math
from typing import TYPE_CHECKING

import numpy as np

from harmony.audio.buffer import SampleBuffer
from harmony.exceptions import EmptyBufferError, InvalidGainError

if TYPE_CHECKING:
    from collections.abc import Iterable


def as_samples(buffer: SampleBuffer | np.ndarray | Iterable[float]) -> np.ndarray:
    """Extrai array float64 1-D do buffer (sem copia para SampleBuffer).

    Raises:
        EmptyBufferError: Sequencia sem amostras.
    """
    if isinstance(buffer, SampleBuffer):
        samples = buffer.samples
    else:
        samples = np.asarray(buffer, dtype=np.float64).reshape(-1)
    if samples.size == 0:
        raise EmptyBufferError
    return samples


def rms(buffer: SampleBuffer | np.ndarray | Iterable[float]) -> float:
    """Root mean square: sqrt(sum(x^2) / n). Silencio -> exatamente 0."""
    samples = as_samples(buffer)
    return float(np.sqrt(np.mean(np.square(samples))))


def peak(buffer: SampleBuffer | np.ndarray | Iterable[float]) -> float:
    """Maior valor absoluto de amostra."""
    return float(np.max(np.abs(as_samples(buffer))))


def variance(buffer: SampleBuffer | np.ndarray | Iterable[float]) -> float:
    """Variancia populacional dos valores brutos (com sinal)."""
    return float(np.var(as_samples(buffer)))


def decibel_to_linear(db: float) -> float:
    """10^(db/20). decibel_to_linear(0) == 1.0."""
    return float(10.0 ** (db / 20.0))


def linear_to_decibel(linear: float) -> float:
    """20*log10(linear), inversa de decibel_to_linear.

    Raises:
        InvalidGainError: Valor zero, negativo ou NaN.
    """
    if not linear > 0.0:
        raise InvalidGainError(linear)
    return 20.0 * math.log10(linear)
