"""SampleBuffer — buffer PCM normalizado e validacao de forma.

Amostras sao float64, intercaladas quando channels > 1, e
convencionalmente em [-1.0, 1.0]. O array interno e somente-leitura:
stages produzem buffers novos, nunca mutam o recebido, e o mesmo
buffer pode ser lido por varias threads de analise ao mesmo tempo.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np

from harmony.exceptions import (
    BufferTooLargeError,
    ChannelLayoutError,
    EmptyBufferError,
    NonFiniteSamplesError,
)

if TYPE_CHECKING:
    from collections.abc import Iterable


class SampleBuffer:
    """Sequencia ordenada de amostras com sample rate e numero de canais.

    Args:
        samples: Amostras (qualquer sequencia numerica 1-D). Sao copiadas
            para um array float64 somente-leitura.
        sample_rate: Sample rate em Hz.
        channels: Numero de canais (amostras intercaladas).
    """

    __slots__ = ("_channels", "_sample_rate", "_samples")

    def __init__(
        self,
        samples: np.ndarray | Iterable[float],
        sample_rate: int,
        channels: int = 1,
    ) -> None:
        if sample_rate <= 0:
            msg = f"sample_rate deve ser positivo, recebeu {sample_rate}"
            raise ValueError(msg)
        if channels <= 0:
            msg = f"channels deve ser positivo, recebeu {channels}"
            raise ValueError(msg)

        array = np.array(samples, dtype=np.float64).reshape(-1)
        array.flags.writeable = False
        self._samples = array
        self._sample_rate = int(sample_rate)
        self._channels = int(channels)

    @classmethod
    def from_samples(
        cls,
        samples: np.ndarray | Iterable[float],
        sample_rate: int = 44100,
        channels: int = 1,
    ) -> SampleBuffer:
        """Atalho com defaults para testes e chamadores de analise."""
        return cls(samples, sample_rate=sample_rate, channels=channels)

    @property
    def samples(self) -> np.ndarray:
        """View somente-leitura das amostras."""
        return self._samples

    @property
    def sample_rate(self) -> int:
        return self._sample_rate

    @property
    def channels(self) -> int:
        return self._channels

    @property
    def length(self) -> int:
        """Numero total de amostras (todos os canais)."""
        return int(self._samples.shape[0])

    @property
    def frames(self) -> int:
        """Numero de frames (amostras por canal)."""
        return self.length // self._channels

    @property
    def duration_s(self) -> float:
        return self.frames / self._sample_rate

    def channel_view(self) -> np.ndarray:
        """Amostras no formato (frames, channels), somente-leitura."""
        return self._samples.reshape(-1, self._channels)

    def with_samples(self, samples: np.ndarray | Iterable[float]) -> SampleBuffer:
        """Novo buffer com as mesmas propriedades e amostras diferentes."""
        return SampleBuffer(samples, sample_rate=self._sample_rate, channels=self._channels)

    def copy(self) -> SampleBuffer:
        return self.with_samples(self._samples)

    def __len__(self) -> int:
        return self.length

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SampleBuffer):
            return NotImplemented
        return (
            self._sample_rate == other._sample_rate
            and self._channels == other._channels
            and np.array_equal(self._samples, other._samples)
        )

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return (
            f"SampleBuffer(length={self.length}, sample_rate={self._sample_rate}, "
            f"channels={self._channels})"
        )


def validate_buffer(buffer: SampleBuffer, max_size: int) -> None:
    """Valida forma do buffer antes de qualquer processamento.

    Nunca trunca: buffers acima do maximo sao rejeitados e o chunking
    fica a cargo do chamador.

    Args:
        buffer: Buffer a validar.
        max_size: Maximo de amostras (performance.buffer_size).

    Raises:
        EmptyBufferError: Buffer sem amostras.
        BufferTooLargeError: Mais amostras que max_size.
        ChannelLayoutError: Amostras nao formam frames completos.
        NonFiniteSamplesError: Buffer contem NaN ou infinito.
    """
    length = buffer.length
    if length == 0:
        raise EmptyBufferError
    if length > max_size:
        raise BufferTooLargeError(length, max_size)
    if length % buffer.channels != 0:
        raise ChannelLayoutError(length, buffer.channels)

    non_finite = int(np.count_nonzero(~np.isfinite(buffer.samples)))
    if non_finite:
        raise NonFiniteSamplesError(non_finite)
