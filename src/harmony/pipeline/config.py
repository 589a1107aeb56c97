"""PipelineConfig — snapshot imutavel da cadeia de efeitos e de performance.

Construido uma vez a partir da configuracao externa e nunca mutado
enquanto um pipeline o usa; mudancas geram um PipelineConfig novo.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from harmony._types import CANONICAL_ORDER, EffectKind
from harmony.effects.params import default_params, params_type_for
from harmony.exceptions import ConfigValidationError

if TYPE_CHECKING:
    from collections.abc import Iterable

    from harmony.effects.params import EffectParams


@dataclass(frozen=True, slots=True)
class PerformanceSettings:
    """Configuracoes de performance do nucleo.

    Raises:
        ConfigValidationError: Valores nao positivos.
    """

    thread_pool_size: int = 4
    buffer_size: int = 4096
    use_gpu: bool = False
    gpu_memory_limit: int | None = None

    def __post_init__(self) -> None:
        errors: list[str] = []
        if self.thread_pool_size < 1:
            errors.append(f"thread_pool_size deve ser >= 1, recebeu {self.thread_pool_size}")
        if self.buffer_size < 1:
            errors.append(f"buffer_size deve ser >= 1, recebeu {self.buffer_size}")
        if self.gpu_memory_limit is not None and self.gpu_memory_limit < 1:
            errors.append(f"gpu_memory_limit deve ser positivo, recebeu {self.gpu_memory_limit}")
        if errors:
            raise ConfigValidationError("performance", errors)


def _canonicalize(effects: Iterable[EffectParams]) -> tuple[EffectParams, ...]:
    by_kind: dict[EffectKind, EffectParams] = {}
    errors: list[str] = []
    for params in effects:
        kind = getattr(params, "kind", None)
        if not isinstance(kind, EffectKind) or not isinstance(params, params_type_for(kind)):
            errors.append(f"parametros de efeito invalidos: {params!r}")
            continue
        if kind in by_kind:
            errors.append(f"efeito '{kind.value}' configurado mais de uma vez")
            continue
        by_kind[kind] = params

    if errors:
        raise ConfigValidationError("pipeline", errors)

    return tuple(by_kind.get(kind) or default_params(kind) for kind in CANONICAL_ORDER)


@dataclass(frozen=True, slots=True)
class PipelineConfig:
    """Cadeia de efeitos na ordem canonica + configuracoes de performance.

    Aceita os efeitos em qualquer ordem e armazena exatamente um por
    tipo, na ordem canonica; tipos ausentes entram desabilitados.

    Raises:
        ConfigValidationError: Efeito duplicado ou objeto que nao e EffectParams.
    """

    effects: tuple[EffectParams, ...] = ()
    performance: PerformanceSettings = field(default_factory=PerformanceSettings)

    def __post_init__(self) -> None:
        object.__setattr__(self, "effects", _canonicalize(self.effects))

    def params_for(self, kind: EffectKind) -> EffectParams:
        """Parametros configurados para o tipo de efeito."""
        return self.effects[kind.position]

    @property
    def enabled_kinds(self) -> list[EffectKind]:
        return [params.kind for params in self.effects if params.enabled]

    def with_overrides(self, overrides: Iterable[EffectParams]) -> PipelineConfig:
        """Novo config com os parametros dos tipos informados substituidos.

        Raises:
            ConfigValidationError: Override duplicado para o mesmo tipo.
        """
        replaced: dict[EffectKind, EffectParams] = {}
        for params in overrides:
            if params.kind in replaced:
                raise ConfigValidationError(
                    "overrides", [f"efeito '{params.kind.value}' sobrescrito mais de uma vez"]
                )
            replaced[params.kind] = params

        return PipelineConfig(
            effects=tuple(replaced.get(params.kind, params) for params in self.effects),
            performance=self.performance,
        )
