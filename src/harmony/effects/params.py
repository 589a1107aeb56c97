"""Parametros tipados de efeitos — uma variante por tipo de efeito.

Cada variante valida seus limites na construcao; um EffectParams que
existe ja passou pela validacao. Os stages nunca revalidam intervalos.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import ClassVar

from harmony._types import EffectKind
from harmony.exceptions import ParameterOutOfRangeError

GAIN_DB_LIMIT = 20.0


def _check_unit_interval(effect: str, parameter: str, value: float) -> None:
    if not 0.0 <= value <= 1.0:
        raise ParameterOutOfRangeError(effect, parameter, value, "[0, 1]")


def _check_gain_db(effect: str, parameter: str, value: float) -> None:
    if not -GAIN_DB_LIMIT <= value <= GAIN_DB_LIMIT:
        raise ParameterOutOfRangeError(
            effect, parameter, value, f"[{-GAIN_DB_LIMIT:g}, {GAIN_DB_LIMIT:g}]"
        )


def _check_positive(effect: str, parameter: str, value: float) -> None:
    if not (value > 0.0 and math.isfinite(value)):
        raise ParameterOutOfRangeError(effect, parameter, value, "> 0")


@dataclass(frozen=True, slots=True)
class _StrengthParams:
    """Base para efeitos controlados por um unico strength em [0, 1]."""

    kind: ClassVar[EffectKind]

    enabled: bool = False
    strength: float = 0.5

    def __post_init__(self) -> None:
        _check_unit_interval(self.kind.value, "strength", self.strength)


@dataclass(frozen=True, slots=True)
class NoiseCancellationParams(_StrengthParams):
    kind: ClassVar[EffectKind] = EffectKind.NOISE_CANCELLATION


@dataclass(frozen=True, slots=True)
class EchoCancellationParams(_StrengthParams):
    kind: ClassVar[EffectKind] = EffectKind.ECHO_CANCELLATION


@dataclass(frozen=True, slots=True)
class NormalizationParams(_StrengthParams):
    kind: ClassVar[EffectKind] = EffectKind.NORMALIZATION


@dataclass(frozen=True, slots=True)
class CompressionParams(_StrengthParams):
    kind: ClassVar[EffectKind] = EffectKind.COMPRESSION


@dataclass(frozen=True, slots=True)
class AmplificationParams:
    """Ganho fixo em dB, limitado a [-20, 20]."""

    kind: ClassVar[EffectKind] = EffectKind.AMPLIFICATION

    enabled: bool = False
    gain_db: float = 0.0

    def __post_init__(self) -> None:
        _check_gain_db(self.kind.value, "gain_db", self.gain_db)


@dataclass(frozen=True, slots=True)
class ReverbParams:
    """Reverb com preset de sala nomeado e mix wet/dry.

    O preset_name e resolvido na tabela de presets apenas no apply,
    para que atualizacoes da tabela valham sem reconstruir os parametros.
    """

    kind: ClassVar[EffectKind] = EffectKind.REVERB

    enabled: bool = False
    preset_name: str = "room"
    wet_level: float = 0.33
    dry_level: float = 0.67

    def __post_init__(self) -> None:
        if not self.preset_name.strip():
            raise ParameterOutOfRangeError(
                self.kind.value, "preset_name", self.preset_name, "nao-vazio"
            )
        _check_unit_interval(self.kind.value, "wet_level", self.wet_level)
        _check_unit_interval(self.kind.value, "dry_level", self.dry_level)


@dataclass(frozen=True, slots=True)
class EqualizerBand:
    """Banda peaking do equalizador."""

    frequency_hz: float
    gain_db: float = 0.0
    q: float = 1.0

    def __post_init__(self) -> None:
        effect = EffectKind.EQUALIZATION.value
        _check_positive(effect, "frequency_hz", self.frequency_hz)
        _check_gain_db(effect, "gain_db", self.gain_db)
        _check_positive(effect, "q", self.q)


@dataclass(frozen=True, slots=True)
class EqualizationParams:
    """Lista ordenada de bandas peaking."""

    kind: ClassVar[EffectKind] = EffectKind.EQUALIZATION

    enabled: bool = False
    bands: tuple[EqualizerBand, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        # Aceita lista na construcao, armazena tupla (imutavel)
        if not isinstance(self.bands, tuple):
            object.__setattr__(self, "bands", tuple(self.bands))
        for index, band in enumerate(self.bands):
            if not isinstance(band, EqualizerBand):
                raise ParameterOutOfRangeError(
                    self.kind.value, f"bands[{index}]", band, "EqualizerBand"
                )


EffectParams = (
    NoiseCancellationParams
    | EchoCancellationParams
    | AmplificationParams
    | NormalizationParams
    | CompressionParams
    | ReverbParams
    | EqualizationParams
)

_PARAMS_BY_KIND: dict[EffectKind, type[EffectParams]] = {
    EffectKind.NOISE_CANCELLATION: NoiseCancellationParams,
    EffectKind.ECHO_CANCELLATION: EchoCancellationParams,
    EffectKind.AMPLIFICATION: AmplificationParams,
    EffectKind.NORMALIZATION: NormalizationParams,
    EffectKind.COMPRESSION: CompressionParams,
    EffectKind.REVERB: ReverbParams,
    EffectKind.EQUALIZATION: EqualizationParams,
}


def params_type_for(kind: EffectKind) -> type[EffectParams]:
    """Classe de parametros correspondente ao tipo de efeito."""
    return _PARAMS_BY_KIND[kind]


def default_params(kind: EffectKind) -> EffectParams:
    """Variante desabilitada com valores default para o tipo de efeito."""
    return _PARAMS_BY_KIND[kind]()
