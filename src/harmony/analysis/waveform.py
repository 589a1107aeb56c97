"""Downsampling de waveform para visualizacao e normalizacao de pico."""

from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np

from harmony.analysis.levels import as_samples
from harmony.exceptions import InvalidWidthError

if TYPE_CHECKING:
    from collections.abc import Iterable

    from harmony.audio.buffer import SampleBuffer


def waveform(buffer: SampleBuffer | np.ndarray | Iterable[float], width: int) -> list[float]:
    """Reduz o buffer a `width` pontos (media dos valores absolutos por chunk).

    Chunks contiguos de floor(n/width) amostras. Amostras alem de
    width * chunk_size sao descartadas (comportamento lossy documentado).

    Raises:
        InvalidWidthError: width < 1 ou width > n (chunk de tamanho zero).
    """
    samples = as_samples(buffer)
    n = samples.shape[0]
    if width < 1 or width > n:
        raise InvalidWidthError(width, n)

    chunk_size = n // width
    chunks = np.abs(samples[: width * chunk_size]).reshape(width, chunk_size)
    return [float(v) for v in chunks.mean(axis=1)]


def normalize(buffer: SampleBuffer | np.ndarray | Iterable[float]) -> np.ndarray:
    """Escala todas as amostras por 1/pico.

    Pico zero devolve o buffer inalterado (guarda contra divisao por zero).
    Idempotente: o pico do resultado e exatamente 1.0.
    """
    samples = as_samples(buffer)
    buffer_peak = float(np.max(np.abs(samples)))
    if buffer_peak == 0.0:
        return samples.copy()
    return samples / buffer_peak
