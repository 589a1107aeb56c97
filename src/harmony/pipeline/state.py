"""PipelineRun — maquina de estados de uma invocacao do pipeline.

Estados:
    IDLE -> VALIDATING -> RUNNING (stage i de N) -> COMPLETED
                      \\-> FAILED  <-/

Regras:
- COMPLETED e FAILED sao terminais.
- Falha na validacao vai direto para FAILED, sem stage executado.
- RUNNING -> RUNNING avanca para o proximo stage.
- Transicoes invalidas levantam InvalidTransitionError.

Componente puro e sincrono; uma instancia por invocacao, nunca
compartilhada entre threads.
"""

from __future__ import annotations

from harmony._types import PipelineState
from harmony.exceptions import InvalidTransitionError

_VALID_TRANSITIONS: dict[PipelineState, frozenset[PipelineState]] = {
    PipelineState.IDLE: frozenset({PipelineState.VALIDATING}),
    PipelineState.VALIDATING: frozenset({PipelineState.RUNNING, PipelineState.FAILED}),
    PipelineState.RUNNING: frozenset(
        {PipelineState.RUNNING, PipelineState.COMPLETED, PipelineState.FAILED}
    ),
    PipelineState.COMPLETED: frozenset(),
    PipelineState.FAILED: frozenset(),
}


class PipelineRun:
    """Estado e historico de uma invocacao.

    Args:
        total_stages: Numero de stages da cadeia (N).
    """

    def __init__(self, total_stages: int) -> None:
        self._state = PipelineState.IDLE
        self._total_stages = total_stages
        self._stage_index: int | None = None
        self._failed_stage_index: int | None = None
        self._history: list[PipelineState] = [PipelineState.IDLE]

    @property
    def state(self) -> PipelineState:
        return self._state

    @property
    def stage_index(self) -> int | None:
        """Indice do stage em execucao (ou do ultimo executado)."""
        return self._stage_index

    @property
    def failed_stage_index(self) -> int | None:
        """Indice do stage que falhou; None se a falha foi na validacao."""
        return self._failed_stage_index

    @property
    def history(self) -> tuple[PipelineState, ...]:
        return tuple(self._history)

    @property
    def is_terminal(self) -> bool:
        return not _VALID_TRANSITIONS[self._state]

    def _transition(self, target: PipelineState) -> None:
        if target not in _VALID_TRANSITIONS[self._state]:
            raise InvalidTransitionError(self._state.value, target.value)
        self._state = target
        self._history.append(target)

    def start_validation(self) -> None:
        self._transition(PipelineState.VALIDATING)

    def start_stage(self, index: int) -> None:
        """Entra em RUNNING para o stage `index`, que deve ser o proximo da cadeia."""
        expected = 0 if self._stage_index is None else self._stage_index + 1
        if index != expected or index >= self._total_stages:
            raise InvalidTransitionError(
                f"{self._state.value}[{self._stage_index}]",
                f"{PipelineState.RUNNING.value}[{index}]",
            )
        self._transition(PipelineState.RUNNING)
        self._stage_index = index

    def complete(self) -> None:
        if self._stage_index != self._total_stages - 1:
            raise InvalidTransitionError(
                f"{self._state.value}[{self._stage_index}]", PipelineState.COMPLETED.value
            )
        self._transition(PipelineState.COMPLETED)

    def fail(self) -> None:
        if self._state == PipelineState.RUNNING:
            self._failed_stage_index = self._stage_index
        self._transition(PipelineState.FAILED)
