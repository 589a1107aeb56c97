"""PipelineResult — resultado de uma invocacao, de posse do chamador."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from harmony._types import StageMetric
    from harmony.audio.buffer import SampleBuffer


@dataclass(frozen=True, slots=True)
class PipelineResult:
    """Buffer final e diagnosticos por stage.

    stage_metrics tem sempre uma entrada por tipo de efeito, na ordem
    canonica, inclusive para stages desabilitados (pass-through).

    Campos de streaming:
        sequence: Posicao do frame no stream (None no caminho batch).
        late: Execucao excedeu o latency target (resultado ainda valido).
        bypassed: Frame devolvido sem processamento pela politica BYPASS.
    """

    output: SampleBuffer
    stage_metrics: tuple[StageMetric, ...]
    warnings: tuple[str, ...] = ()
    elapsed_micros: int = 0
    sequence: int | None = None
    late: bool = False
    bypassed: bool = False

    @property
    def stage_names(self) -> list[str]:
        return [metric.stage_name for metric in self.stage_metrics]
