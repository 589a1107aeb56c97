"""PipelineOrchestrator — executa a cadeia de efeitos sobre um buffer.

Fluxo por invocacao (ver PipelineRun):
    IDLE -> VALIDATING -> RUNNING(0..N-1) -> COMPLETED | FAILED

- Stages rodam estritamente em sequencia, na ordem canonica; a saida
  de um e a entrada do proximo.
- Stages desabilitados ocupam seu lugar (pass-through), entao
  stage_metrics sempre tem uma entrada por tipo de efeito.
- A primeira falha aborta os stages restantes (fail-fast, sem reparo
  do buffer e sem retry).

O orchestrator nao guarda estado entre invocacoes: uma instancia pode
ser usada por varias threads ao mesmo tempo.
"""

from __future__ import annotations

import time
from typing import TYPE_CHECKING

import numpy as np

from harmony._types import CANONICAL_ORDER, StageMetric
from harmony.analysis.levels import peak
from harmony.audio.buffer import validate_buffer
from harmony.effects import build_stages
from harmony.exceptions import (
    ConfigValidationError,
    NonFiniteSamplesError,
    ProcessingTimeoutError,
    StageFailedError,
    ValidationError,
)
from harmony.logging import get_logger
from harmony.pipeline.metrics import pipeline_failures_total, stage_duration_seconds
from harmony.pipeline.result import PipelineResult
from harmony.pipeline.state import PipelineRun

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable

    from harmony._types import ReverbPreset
    from harmony.audio.buffer import SampleBuffer
    from harmony.effects.params import EffectParams
    from harmony.effects.stages import EffectStage
    from harmony.formats.registry import PresetTable
    from harmony.pipeline.config import PipelineConfig

logger = get_logger("pipeline.orchestrator")

GPU_UNAVAILABLE_WARNING = "use_gpu solicitado, mas nenhum backend de GPU disponivel: processado em CPU"


class PipelineOrchestrator:
    """Compoe e executa a cadeia de stages a partir de um PipelineConfig.

    Args:
        config: Snapshot imutavel da cadeia e das configuracoes de performance.
        reverb_presets: Tabela de presets de reverb (resolvida no apply).
        stages: Stages a usar, um por tipo na ordem canonica. Se None,
            usa build_stages().
        clock: Relogio monotonic em segundos (injetavel para testes).

    Raises:
        ConfigValidationError: Stages fora da ordem canonica.
    """

    def __init__(
        self,
        config: PipelineConfig,
        reverb_presets: PresetTable[ReverbPreset],
        *,
        stages: list[EffectStage] | None = None,
        clock: Callable[[], float] | None = None,
    ) -> None:
        resolved = stages if stages is not None else build_stages(reverb_presets)
        kinds = tuple(stage.kind for stage in resolved)
        if kinds != CANONICAL_ORDER:
            raise ConfigValidationError(
                "stages",
                [f"stages devem seguir a ordem canonica, recebeu {[k.value for k in kinds]}"],
            )

        self._config = config
        self._reverb_presets = reverb_presets
        self._stages = resolved
        self._clock: Callable[[], float] = clock if clock is not None else time.perf_counter

        # Nenhum backend de GPU esta disponivel: use_gpu e aceito e reportado,
        # sem alterar ordem ou determinismo do resultado.
        self._base_warnings: tuple[str, ...] = (
            (GPU_UNAVAILABLE_WARNING,) if config.performance.use_gpu else ()
        )

    @property
    def config(self) -> PipelineConfig:
        return self._config

    @property
    def reverb_presets(self) -> PresetTable[ReverbPreset]:
        return self._reverb_presets

    @property
    def stages(self) -> list[EffectStage]:
        return list(self._stages)

    @property
    def clock(self) -> Callable[[], float]:
        return self._clock

    def process(
        self,
        buffer: SampleBuffer,
        overrides: Iterable[EffectParams] | None = None,
        *,
        deadline_s: float | None = None,
    ) -> PipelineResult:
        """Executa a cadeia completa sobre o buffer.

        Args:
            buffer: Buffer de entrada (nao e mutado).
            overrides: Parametros que substituem os configurados apenas
                nesta invocacao.
            deadline_s: Deadline rigido (segundos desde o inicio). Verificado
                entre stages; nenhum stage e interrompido no meio.

        Returns:
            PipelineResult com buffer final e metricas por stage.

        Raises:
            ValidationError: Buffer invalido (nenhum stage executado).
            ConfigValidationError: Overrides duplicados.
            StageFailedError: Um stage falhou; os seguintes nao rodaram.
            ProcessingTimeoutError: deadline_s excedido.
        """
        config = self._config.with_overrides(overrides) if overrides else self._config
        run = PipelineRun(total_stages=len(self._stages))

        run.start_validation()
        try:
            validate_buffer(buffer, config.performance.buffer_size)
        except ValidationError as e:
            run.fail()
            logger.debug("pipeline_validation_failed", error=str(e), length=buffer.length)
            raise

        started = self._clock()
        current = buffer
        metrics: list[StageMetric] = []
        warnings: list[str] = list(self._base_warnings)

        for index, stage in enumerate(self._stages):
            run.start_stage(index)
            params = config.effects[index]
            stage_started = self._clock()

            try:
                output = stage.apply(current, params)
                _check_finite(output)
            except Exception as e:
                run.fail()
                if pipeline_failures_total is not None:
                    pipeline_failures_total.labels(stage=stage.name).inc()
                logger.warning(
                    "pipeline_stage_failed",
                    stage=stage.name,
                    stage_index=index,
                    error=str(e),
                )
                raise StageFailedError(
                    index,
                    stage.name,
                    e,
                    buffer_length=current.length,
                    buffer_peak=_safe_peak(current),
                ) from e

            now = self._clock()
            duration_s = now - stage_started
            if stage_duration_seconds is not None:
                stage_duration_seconds.labels(stage=stage.name).observe(duration_s)

            metrics.append(
                StageMetric(
                    stage_name=stage.name,
                    duration_micros=int(duration_s * 1_000_000),
                    applied_strength=stage.applied_strength(params),
                    enabled=params.enabled,
                )
            )
            logger.debug(
                "stage_complete",
                stage=stage.name,
                enabled=params.enabled,
                duration_us=metrics[-1].duration_micros,
            )

            if params.enabled:
                output_peak = peak(output)
                if output_peak > 1.0:
                    warnings.append(
                        f"{stage.name}: amostras fora de [-1, 1] (pico {output_peak:.4f})"
                    )

            current = output

            if deadline_s is not None and (now - started) > deadline_s:
                run.fail()
                raise ProcessingTimeoutError(
                    (now - started) * 1000.0,
                    deadline_s * 1000.0,
                    completed_stages=index + 1,
                )

        run.complete()
        elapsed_s = self._clock() - started
        return PipelineResult(
            output=current,
            stage_metrics=tuple(metrics),
            warnings=tuple(warnings),
            elapsed_micros=int(elapsed_s * 1_000_000),
        )


def _check_finite(buffer: SampleBuffer) -> None:
    non_finite = int(np.count_nonzero(~np.isfinite(buffer.samples)))
    if non_finite:
        raise NonFiniteSamplesError(non_finite)


def _safe_peak(buffer: SampleBuffer) -> float:
    if buffer.length == 0:
        return 0.0
    return float(np.nanmax(np.abs(buffer.samples)))
