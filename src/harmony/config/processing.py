"""Configuracao do nucleo de processamento de audio.

Schema pydantic do snapshot de configuracao (formatos, algoritmos,
performance, presets, efeitos, streaming, analise) e conversao para os
valores imutaveis usados pelo nucleo (PipelineConfig, tabelas, registry).

Defaults correspondem a configuracao padrao do servico de audio. Leitura de variaveis de
ambiente fica fora deste modulo.
"""

from __future__ import annotations

from pathlib import Path
from typing import Annotated, Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, PositiveFloat, PositiveInt, model_validator
from pydantic import ValidationError as PydanticValidationError

from harmony._types import (  # noqa: TC001 - Pydantic needs at runtime
    FormatDescriptor,
    OverloadPolicy,
    QualityPreset,
    ReverbPreset,
)
from harmony.effects.params import (
    AmplificationParams,
    CompressionParams,
    EchoCancellationParams,
    EqualizationParams,
    EqualizerBand,
    NoiseCancellationParams,
    NormalizationParams,
    ReverbParams,
)
from harmony.exceptions import ConfigParseError, ConfigValidationError
from harmony.formats.registry import FormatRegistry, PresetTable, normalize_extension
from harmony.pipeline.config import PerformanceSettings, PipelineConfig
from harmony.streaming.controller import StreamingSettings

QUALITY_TABLE = "quality_presets"
REVERB_TABLE = "reverb_presets"

UnitFloat = Annotated[float, Field(ge=0.0, le=1.0)]


class _Section(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)


class FormatConfig(_Section):
    """Formato suportado declarado na configuracao."""

    extension: str = Field(min_length=1)
    mime_type: str = Field(min_length=1)
    codec: str | None = None
    bitrate: PositiveInt | None = None
    sample_rate: PositiveInt | None = None
    channels: PositiveInt | None = None


class AlgorithmConfig(_Section):
    enabled: bool = True
    strength: float = Field(default=0.5, ge=0.0, le=1.0)


class AmplificationConfig(_Section):
    enabled: bool = False
    gain: float = Field(default=0.0, ge=-20.0, le=20.0)


class AlgorithmsConfig(_Section):
    noise_cancellation: AlgorithmConfig = AlgorithmConfig(strength=0.5)
    echo_cancellation: AlgorithmConfig = AlgorithmConfig(strength=0.5)
    amplification: AmplificationConfig = AmplificationConfig()
    normalization: AlgorithmConfig = AlgorithmConfig(strength=0.8)
    compression: AlgorithmConfig = AlgorithmConfig(strength=0.3)


class PerformanceConfig(_Section):
    thread_pool_size: PositiveInt = 4
    buffer_size: PositiveInt = 4096
    use_gpu: bool = False
    gpu_memory_limit: PositiveInt | None = 1_073_741_824


class QualityPresetConfig(_Section):
    bitrate: PositiveInt
    sample_rate: PositiveInt
    channels: PositiveInt


class ReverbPresetConfig(_Section):
    room_size: UnitFloat
    damping: UnitFloat
    wet_level: UnitFloat
    dry_level: UnitFloat


def _default_reverb_presets() -> dict[str, ReverbPresetConfig]:
    return {
        "room": ReverbPresetConfig(room_size=0.5, damping=0.5, wet_level=0.33, dry_level=0.67),
        "hall": ReverbPresetConfig(room_size=0.8, damping=0.3, wet_level=0.4, dry_level=0.6),
        "plate": ReverbPresetConfig(room_size=0.6, damping=0.7, wet_level=0.3, dry_level=0.7),
    }


class ReverbConfig(_Section):
    """Reverb: preset ativo e tabela de presets.

    wet_level/dry_level None herdam os niveis do preset ativo.
    """

    enabled: bool = False
    preset: str = "room"
    wet_level: float | None = Field(default=None, ge=0.0, le=1.0)
    dry_level: float | None = Field(default=None, ge=0.0, le=1.0)
    presets: dict[str, ReverbPresetConfig] = Field(default_factory=_default_reverb_presets)

    @model_validator(mode="after")
    def preset_must_exist(self) -> ReverbConfig:
        if self.preset not in self.presets:
            msg = f"preset de reverb '{self.preset}' nao existe em presets {sorted(self.presets)}"
            raise ValueError(msg)
        return self


class EqBandConfig(_Section):
    frequency: PositiveFloat
    gain: float = Field(default=0.0, ge=-20.0, le=20.0)
    q: PositiveFloat = 1.0


def _default_eq_bands() -> list[EqBandConfig]:
    return [
        EqBandConfig(frequency=100, gain=0, q=1),
        EqBandConfig(frequency=1000, gain=0, q=1),
        EqBandConfig(frequency=10000, gain=0, q=1),
    ]


class EqualizationConfig(_Section):
    enabled: bool = False
    bands: list[EqBandConfig] = Field(default_factory=_default_eq_bands)


class EffectsConfig(_Section):
    reverb: ReverbConfig = ReverbConfig()
    equalization: EqualizationConfig = EqualizationConfig()


class StreamingConfig(_Section):
    latency_target_ms: PositiveFloat = 50.0
    hard_timeout_ms: PositiveFloat | None = None
    overload_policy: OverloadPolicy = OverloadPolicy.PROCESS
    overload_threshold: PositiveInt = 3


class AnalysisConfig(_Section):
    waveform_width: PositiveInt = 1000


def _default_formats() -> list[FormatConfig]:
    return [
        FormatConfig(extension="mp3", mime_type="audio/mpeg", bitrate=320000, channels=2),
        FormatConfig(extension="wav", mime_type="audio/wav", sample_rate=44100, channels=2),
        FormatConfig(extension="ogg", mime_type="audio/ogg", bitrate=128000, channels=2),
        FormatConfig(extension="aac", mime_type="audio/aac", bitrate=256000, channels=2),
        FormatConfig(extension="flac", mime_type="audio/flac", sample_rate=96000, channels=2),
    ]


def _default_quality_presets() -> dict[str, QualityPresetConfig]:
    return {
        "low": QualityPresetConfig(bitrate=96000, sample_rate=44100, channels=2),
        "medium": QualityPresetConfig(bitrate=192000, sample_rate=48000, channels=2),
        "high": QualityPresetConfig(bitrate=320000, sample_rate=96000, channels=2),
    }


class AudioProcessingConfig(_Section):
    """Snapshot completo da configuracao de processamento de audio."""

    supported_formats: list[FormatConfig] = Field(default_factory=_default_formats)
    max_file_size: PositiveInt = 104_857_600
    default_codec: str = "mp3"
    algorithms: AlgorithmsConfig = AlgorithmsConfig()
    performance: PerformanceConfig = PerformanceConfig()
    quality_presets: dict[str, QualityPresetConfig] = Field(
        default_factory=_default_quality_presets
    )
    effects: EffectsConfig = EffectsConfig()
    streaming: StreamingConfig = StreamingConfig()
    analysis: AnalysisConfig = AnalysisConfig()

    @model_validator(mode="after")
    def default_codec_must_be_supported(self) -> AudioProcessingConfig:
        extensions = {normalize_extension(f.extension) for f in self.supported_formats}
        if normalize_extension(self.default_codec) not in extensions:
            msg = f"default_codec '{self.default_codec}' nao esta em supported_formats"
            raise ValueError(msg)
        return self

    @model_validator(mode="after")
    def hard_timeout_covers_latency(self) -> AudioProcessingConfig:
        streaming = self.streaming
        if (
            streaming.hard_timeout_ms is not None
            and streaming.hard_timeout_ms < streaming.latency_target_ms
        ):
            msg = "streaming.hard_timeout_ms deve ser >= streaming.latency_target_ms"
            raise ValueError(msg)
        return self

    @classmethod
    def from_mapping(cls, data: Any, source: str = "<mapping>") -> AudioProcessingConfig:
        """Valida um mapeamento ja carregado.

        Raises:
            ConfigValidationError: Campos faltando, tipos ou limites errados.
        """
        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ConfigValidationError(source, ["conteudo deve ser um mapeamento"])
        try:
            return cls.model_validate(data)
        except PydanticValidationError as e:
            errors = [
                f"{'.'.join(str(loc) for loc in err['loc']) or '<root>'}: {err['msg']}"
                for err in e.errors()
            ]
            raise ConfigValidationError(source, errors) from e

    @classmethod
    def from_yaml_path(cls, path: str | Path) -> AudioProcessingConfig:
        """Carrega configuracao a partir de arquivo YAML."""
        path = Path(path)
        if not path.exists():
            raise ConfigParseError(str(path), "Arquivo nao encontrado")

        try:
            raw = path.read_text(encoding="utf-8")
        except OSError as e:
            raise ConfigParseError(str(path), f"Erro ao ler arquivo: {e}") from e

        return cls.from_yaml_string(raw, source_path=str(path))

    @classmethod
    def from_yaml_string(cls, raw: str, source_path: str = "<string>") -> AudioProcessingConfig:
        """Carrega configuracao a partir de string YAML."""
        try:
            data = yaml.safe_load(raw)
        except yaml.YAMLError as e:
            raise ConfigParseError(source_path, f"YAML invalido: {e}") from e

        return cls.from_mapping(data, source=source_path)

    # --- Conversao para valores do nucleo ---

    def format_registry(self) -> FormatRegistry:
        return FormatRegistry(
            FormatDescriptor(
                extension=f.extension,
                mime_type=f.mime_type,
                codec=f.codec,
                bitrate=f.bitrate,
                sample_rate=f.sample_rate,
                channels=f.channels,
            )
            for f in self.supported_formats
        )

    def quality_preset_table(self) -> PresetTable[QualityPreset]:
        return PresetTable(
            QUALITY_TABLE,
            {
                name: QualityPreset(
                    bitrate=p.bitrate, sample_rate=p.sample_rate, channels=p.channels
                )
                for name, p in self.quality_presets.items()
            },
        )

    def reverb_preset_table(self) -> PresetTable[ReverbPreset]:
        return PresetTable(
            REVERB_TABLE,
            {
                name: ReverbPreset(
                    room_size=p.room_size,
                    damping=p.damping,
                    wet_level=p.wet_level,
                    dry_level=p.dry_level,
                )
                for name, p in self.effects.reverb.presets.items()
            },
        )

    def to_pipeline_config(self) -> PipelineConfig:
        """Converte para o PipelineConfig imutavel do nucleo."""
        algorithms = self.algorithms
        reverb = self.effects.reverb
        active_preset = reverb.presets[reverb.preset]
        equalization = self.effects.equalization

        effects = (
            NoiseCancellationParams(
                enabled=algorithms.noise_cancellation.enabled,
                strength=algorithms.noise_cancellation.strength,
            ),
            EchoCancellationParams(
                enabled=algorithms.echo_cancellation.enabled,
                strength=algorithms.echo_cancellation.strength,
            ),
            AmplificationParams(
                enabled=algorithms.amplification.enabled,
                gain_db=algorithms.amplification.gain,
            ),
            NormalizationParams(
                enabled=algorithms.normalization.enabled,
                strength=algorithms.normalization.strength,
            ),
            CompressionParams(
                enabled=algorithms.compression.enabled,
                strength=algorithms.compression.strength,
            ),
            ReverbParams(
                enabled=reverb.enabled,
                preset_name=reverb.preset,
                wet_level=(
                    reverb.wet_level if reverb.wet_level is not None else active_preset.wet_level
                ),
                dry_level=(
                    reverb.dry_level if reverb.dry_level is not None else active_preset.dry_level
                ),
            ),
            EqualizationParams(
                enabled=equalization.enabled,
                bands=tuple(
                    EqualizerBand(frequency_hz=b.frequency, gain_db=b.gain, q=b.q)
                    for b in equalization.bands
                ),
            ),
        )
        performance = self.performance
        return PipelineConfig(
            effects=effects,
            performance=PerformanceSettings(
                thread_pool_size=performance.thread_pool_size,
                buffer_size=performance.buffer_size,
                use_gpu=performance.use_gpu,
                gpu_memory_limit=performance.gpu_memory_limit,
            ),
        )

    def to_streaming_settings(self) -> StreamingSettings:
        streaming = self.streaming
        return StreamingSettings(
            latency_target_ms=streaming.latency_target_ms,
            hard_timeout_ms=streaming.hard_timeout_ms,
            overload_policy=streaming.overload_policy,
            overload_threshold=streaming.overload_threshold,
        )

