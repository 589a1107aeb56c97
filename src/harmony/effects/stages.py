"""Interface base para stages de efeito do pipeline."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

import numpy as np

from harmony.exceptions import ProcessingError

if TYPE_CHECKING:
    from collections.abc import Callable

    from harmony._types import EffectKind
    from harmony.audio.buffer import SampleBuffer
    from harmony.effects.params import EffectParams


class EffectStage(ABC):
    """Stage individual da cadeia de efeitos.

    Recebe um buffer e os parametros do seu tipo de efeito e retorna um
    buffer novo com o mesmo tamanho. Com enabled=False devolve uma copia
    inalterada: o proprio stage garante o no-op, para que o orchestrator
    trate todos os stages de forma uniforme.

    Stages sao deterministicos e sem estado entre invocacoes.
    """

    @property
    @abstractmethod
    def kind(self) -> EffectKind:
        """Tipo de efeito implementado pelo stage."""
        ...

    @property
    def name(self) -> str:
        """Nome identificador do stage (ex: 'reverb')."""
        return self.kind.value

    def apply(self, buffer: SampleBuffer, params: EffectParams) -> SampleBuffer:
        """Aplica o efeito ao buffer.

        Args:
            buffer: Buffer de entrada (ja validado, nunca mutado).
            params: Parametros do tipo de efeito do stage.

        Returns:
            Buffer novo com as mesmas propriedades.

        Raises:
            ProcessingError: Parametros de outro tipo de efeito.
            ValidationError: Parametros incompativeis com o buffer
                (ex: NyquistViolationError, UnknownPresetError).
        """
        if params.kind is not self.kind:
            msg = f"Stage '{self.name}' recebeu parametros de '{params.kind.value}'"
            raise ProcessingError(msg)

        if not params.enabled:
            return buffer.copy()

        return self._process(buffer, params)

    def applied_strength(self, params: EffectParams) -> float:
        """Intensidade efetivamente aplicada, reportada nas metricas por stage."""
        if not params.enabled:
            return 0.0
        return self._strength_of(params)

    @abstractmethod
    def _process(self, buffer: SampleBuffer, params: EffectParams) -> SampleBuffer:
        """Processa um buffer com o efeito habilitado."""
        ...

    def _strength_of(self, params: EffectParams) -> float:
        return float(getattr(params, "strength", 0.0))


def map_channels(
    buffer: SampleBuffer,
    fn: Callable[[np.ndarray, int, int], np.ndarray],
) -> SampleBuffer:
    """Aplica fn(coluna, sample_rate, indice_canal) a cada canal e reintercala.

    fn recebe uma copia float64 contigua do canal e deve retornar um
    array do mesmo tamanho.
    """
    frames = buffer.channel_view()
    out = np.empty(frames.shape, dtype=np.float64)
    for channel in range(buffer.channels):
        column = np.ascontiguousarray(frames[:, channel], dtype=np.float64)
        out[:, channel] = fn(column, buffer.sample_rate, channel)
    return buffer.with_samples(out.reshape(-1))
