"""StreamingController — pipeline aplicado a um stream continuo de frames.

Diferenca do caminho batch (PipelineOrchestrator.process):
- Batch: aceita qualquer tamanho ate performance.buffer_size
- Streaming: aceita somente frames de exatamente buffer_size amostras

Comportamento:
- Execucao acima do latency target: resultado marcado late=True e
  devolvido normalmente (audio nunca e descartado silenciosamente).
- Hard timeout (opcional): o frame falha com ProcessingTimeoutError,
  o stream continua aceitando frames.
- Sobrecarga sustentada (overload_threshold frames atrasados seguidos):
  politica explicita do integrador (PROCESS, BYPASS ou SKIP).
- Cancelamento vale entre frames; um frame em processamento sempre
  termina antes.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, replace
from typing import TYPE_CHECKING

from harmony._types import OverloadPolicy, StageMetric
from harmony.exceptions import (
    BufferSizeMismatchError,
    ConfigValidationError,
    ProcessingTimeoutError,
    StreamCancelledError,
)
from harmony.logging import bound_context, get_logger
from harmony.pipeline.metrics import stream_frames_total
from harmony.pipeline.result import PipelineResult

if TYPE_CHECKING:
    from collections.abc import Callable

    from harmony.audio.buffer import SampleBuffer
    from harmony.pipeline.orchestrator import PipelineOrchestrator

logger = get_logger("streaming.controller")

BYPASS_WARNING = "frame devolvido sem processamento (politica de sobrecarga: bypass)"


@dataclass(frozen=True, slots=True)
class StreamingSettings:
    """Orcamento de tempo real e politica de sobrecarga.

    Raises:
        ConfigValidationError: Valores fora dos limites.
    """

    latency_target_ms: float = 50.0
    hard_timeout_ms: float | None = None
    overload_policy: OverloadPolicy = OverloadPolicy.PROCESS
    overload_threshold: int = 3

    def __post_init__(self) -> None:
        errors: list[str] = []
        if not self.latency_target_ms > 0:
            errors.append(f"latency_target_ms deve ser positivo, recebeu {self.latency_target_ms}")
        if self.hard_timeout_ms is not None and not self.hard_timeout_ms >= self.latency_target_ms:
            errors.append(
                f"hard_timeout_ms ({self.hard_timeout_ms}) deve ser >= "
                f"latency_target_ms ({self.latency_target_ms})"
            )
        if self.overload_threshold < 1:
            errors.append(f"overload_threshold deve ser >= 1, recebeu {self.overload_threshold}")
        if errors:
            raise ConfigValidationError("streaming", errors)


class StreamingController:
    """Processa frames de tamanho fixo de um unico stream, em ordem de chegada.

    push_frame e serializado por um lock: chamadas concorrentes no mesmo
    stream nunca executam cadeias em paralelo nem reordenam frames.

    Args:
        orchestrator: Orchestrator compartilhado (sem estado entre invocacoes).
        settings: Orcamento de latencia e politica de sobrecarga.
        stream_id: Identificador do stream (logs e erros).
        clock: Relogio monotonic em segundos. Default: clock do orchestrator.
    """

    def __init__(
        self,
        orchestrator: PipelineOrchestrator,
        settings: StreamingSettings | None = None,
        *,
        stream_id: str = "default",
        clock: Callable[[], float] | None = None,
    ) -> None:
        self._orchestrator = orchestrator
        self._settings = settings or StreamingSettings()
        self._stream_id = stream_id
        self._clock = clock or orchestrator.clock
        self._frame_size = orchestrator.config.performance.buffer_size

        self._lock = threading.Lock()
        self._cancelled = threading.Event()

        self._next_sequence = 0
        self._consecutive_late = 0
        self._frames_processed = 0
        self._frames_late = 0
        self._frames_bypassed = 0
        self._frames_skipped = 0
        self._frames_timed_out = 0

    @property
    def stream_id(self) -> str:
        return self._stream_id

    @property
    def frame_size(self) -> int:
        """Tamanho fixo de frame aceito (performance.buffer_size)."""
        return self._frame_size

    @property
    def settings(self) -> StreamingSettings:
        return self._settings

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    @property
    def overloaded(self) -> bool:
        """True apos overload_threshold frames atrasados (ou em timeout) consecutivos."""
        return self._consecutive_late >= self._settings.overload_threshold

    @property
    def frames_processed(self) -> int:
        return self._frames_processed

    @property
    def frames_late(self) -> int:
        return self._frames_late

    @property
    def frames_bypassed(self) -> int:
        return self._frames_bypassed

    @property
    def frames_skipped(self) -> int:
        return self._frames_skipped

    @property
    def frames_timed_out(self) -> int:
        return self._frames_timed_out

    def cancel(self) -> None:
        """Cancela o stream. Frames em processamento terminam; os seguintes falham."""
        if not self._cancelled.is_set():
            self._cancelled.set()
            logger.info("stream_cancelled", stream_id=self._stream_id)

    def push_frame(self, buffer: SampleBuffer) -> PipelineResult | None:
        """Processa o proximo frame do stream.

        Args:
            buffer: Frame com exatamente frame_size amostras.

        Returns:
            PipelineResult com sequence e late preenchidos, ou None quando
            a politica SKIP descartou o frame.

        Raises:
            StreamCancelledError: Stream ja cancelado.
            BufferSizeMismatchError: Frame com tamanho diferente de frame_size.
            ProcessingTimeoutError: Hard timeout excedido (apenas este frame).
            ValidationError / StageFailedError: Propagados do orchestrator.
        """
        with self._lock:
            if self._cancelled.is_set():
                raise StreamCancelledError(self._stream_id)
            if buffer.length != self._frame_size:
                raise BufferSizeMismatchError(buffer.length, self._frame_size)

            sequence = self._next_sequence
            self._next_sequence += 1

            with bound_context(stream_id=self._stream_id, sequence=sequence):
                if self.overloaded and self._settings.overload_policy is not OverloadPolicy.PROCESS:
                    return self._shed_frame(buffer, sequence)
                return self._process_frame(buffer, sequence)

    def _process_frame(self, buffer: SampleBuffer, sequence: int) -> PipelineResult:
        hard_timeout_ms = self._settings.hard_timeout_ms
        deadline_s = hard_timeout_ms / 1000.0 if hard_timeout_ms is not None else None

        started = self._clock()
        try:
            result = self._orchestrator.process(buffer, deadline_s=deadline_s)
        except ProcessingTimeoutError as e:
            self._frames_timed_out += 1
            self._consecutive_late += 1
            _count("timeout")
            logger.warning("frame_timeout", elapsed_ms=round(e.elapsed_ms, 3))
            raise

        elapsed_ms = (self._clock() - started) * 1000.0
        late = elapsed_ms > self._settings.latency_target_ms
        self._frames_processed += 1
        if late:
            self._frames_late += 1
            self._consecutive_late += 1
            _count("late")
            logger.info(
                "frame_late",
                elapsed_ms=round(elapsed_ms, 3),
                latency_target_ms=self._settings.latency_target_ms,
                consecutive_late=self._consecutive_late,
            )
        else:
            self._consecutive_late = 0
            _count("on_time")

        return replace(result, sequence=sequence, late=late)

    def _shed_frame(self, buffer: SampleBuffer, sequence: int) -> PipelineResult | None:
        # Um frame aliviado por vez: o seguinte volta a ser processado e
        # mede de novo se a sobrecarga persiste.
        self._consecutive_late = 0
        policy = self._settings.overload_policy

        if policy is OverloadPolicy.SKIP:
            self._frames_skipped += 1
            _count("skipped")
            logger.warning("frame_skipped", policy=policy.value)
            return None

        self._frames_bypassed += 1
        _count("bypassed")
        logger.warning("frame_bypassed", policy=policy.value)
        passthrough = tuple(
            StageMetric(stage_name=stage.name, duration_micros=0, applied_strength=0.0, enabled=False)
            for stage in self._orchestrator.stages
        )
        return PipelineResult(
            output=buffer.copy(),
            stage_metrics=passthrough,
            warnings=(BYPASS_WARNING,),
            sequence=sequence,
            bypassed=True,
        )


def _count(outcome: str) -> None:
    if stream_frames_total is not None:
        stream_frames_total.labels(outcome=outcome).inc()
