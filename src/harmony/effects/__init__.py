"""Effect Stages — cadeia de efeitos de audio.

Ordem canonica: noise_cancellation -> echo_cancellation -> amplification ->
normalization -> compression -> reverb -> equalization.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from harmony.effects.denoise import EchoCancellationStage, NoiseCancellationStage
from harmony.effects.dynamics import AmplificationStage, CompressionStage, NormalizationStage
from harmony.effects.equalizer import EqualizationStage
from harmony.effects.params import (
    AmplificationParams,
    CompressionParams,
    EchoCancellationParams,
    EffectParams,
    EqualizationParams,
    EqualizerBand,
    NoiseCancellationParams,
    NormalizationParams,
    ReverbParams,
    default_params,
    params_type_for,
)
from harmony.effects.reverb import ReverbStage
from harmony.effects.stages import EffectStage

if TYPE_CHECKING:
    from harmony._types import ReverbPreset
    from harmony.formats.registry import PresetTable


def build_stages(reverb_presets: PresetTable[ReverbPreset]) -> list[EffectStage]:
    """Instancia um stage por tipo de efeito, na ordem canonica."""
    return [
        NoiseCancellationStage(),
        EchoCancellationStage(),
        AmplificationStage(),
        NormalizationStage(),
        CompressionStage(),
        ReverbStage(reverb_presets),
        EqualizationStage(),
    ]


__all__ = [
    "AmplificationParams",
    "AmplificationStage",
    "CompressionParams",
    "CompressionStage",
    "EchoCancellationParams",
    "EchoCancellationStage",
    "EffectParams",
    "EffectStage",
    "EqualizationParams",
    "EqualizationStage",
    "EqualizerBand",
    "NoiseCancellationParams",
    "NoiseCancellationStage",
    "NormalizationParams",
    "NormalizationStage",
    "ReverbParams",
    "ReverbStage",
    "build_stages",
    "default_params",
    "params_type_for",
]
