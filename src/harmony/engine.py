"""AudioEngine — ponto de entrada do nucleo de audio para os colaboradores.

Recebe um snapshot de configuracao ja validado e expoe:
- construcao de PipelineOrchestrator / StreamingController / StreamPool
- processamento batch (process) e analise (analyze)
- consultas de formato/codec e presets de qualidade
- validacao de upload (extensao, tamanho, codec)

Nenhuma operacao faz I/O de disco ou rede.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from harmony.analysis.summary import analyze
from harmony.audio.buffer import validate_buffer
from harmony.exceptions import InvalidFileSizeError, UnsupportedCodecError
from harmony.formats.registry import normalize_extension
from harmony.logging import get_logger
from harmony.pipeline.orchestrator import PipelineOrchestrator
from harmony.streaming.controller import StreamingController, StreamingSettings
from harmony.streaming.pool import StreamPool

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable

    from harmony._types import BufferSummary, FormatDescriptor, QualityPreset, ReverbPreset
    from harmony.audio.buffer import SampleBuffer
    from harmony.config.processing import AudioProcessingConfig
    from harmony.effects.params import EffectParams
    from harmony.formats.registry import FormatRegistry, PresetTable
    from harmony.pipeline.config import PipelineConfig
    from harmony.pipeline.result import PipelineResult

logger = get_logger("engine")

_DEFAULT_WAVEFORM_WIDTH = 1000
_DEFAULT_MAX_FILE_SIZE = 104_857_600


class AudioEngine:
    """Fachada do nucleo: configuracao imutavel + tabelas somente-leitura.

    Args:
        pipeline_config: Cadeia de efeitos e performance.
        formats: Registry de formatos suportados.
        quality_presets: Tabela de presets de qualidade.
        reverb_presets: Tabela de presets de reverb.
        streaming: Configuracoes de streaming (default: StreamingSettings()).
        waveform_width: Largura default do waveform em analyze().
        max_file_size: Limite em bytes para check_file_size.
        default_codec: Codec aceito por check_codec alem das extensoes.
        clock: Relogio monotonic injetavel, repassado aos orchestrators.
    """

    def __init__(
        self,
        pipeline_config: PipelineConfig,
        formats: FormatRegistry,
        quality_presets: PresetTable[QualityPreset],
        reverb_presets: PresetTable[ReverbPreset],
        *,
        streaming: StreamingSettings | None = None,
        waveform_width: int = _DEFAULT_WAVEFORM_WIDTH,
        max_file_size: int = _DEFAULT_MAX_FILE_SIZE,
        default_codec: str | None = None,
        clock: Callable[[], float] | None = None,
    ) -> None:
        if waveform_width < 1:
            msg = f"waveform_width deve ser >= 1, recebeu {waveform_width}"
            raise ValueError(msg)
        if max_file_size < 1:
            msg = f"max_file_size deve ser >= 1, recebeu {max_file_size}"
            raise ValueError(msg)
        self._max_file_size = max_file_size
        self._default_codec = default_codec
        self._pipeline_config = pipeline_config
        self._formats = formats
        self._quality_presets = quality_presets
        self._reverb_presets = reverb_presets
        self._streaming = streaming or StreamingSettings()
        self._waveform_width = waveform_width
        self._clock = clock
        self._orchestrator = self.create_orchestrator()

    @classmethod
    def from_config(
        cls,
        config: AudioProcessingConfig,
        *,
        clock: Callable[[], float] | None = None,
    ) -> AudioEngine:
        """Constroi o engine a partir do snapshot pydantic.

        Raises:
            ConfigError: Snapshot inconsistente (ex: extensoes duplicadas).
        """
        engine = cls(
            pipeline_config=config.to_pipeline_config(),
            formats=config.format_registry(),
            quality_presets=config.quality_preset_table(),
            reverb_presets=config.reverb_preset_table(),
            streaming=config.to_streaming_settings(),
            waveform_width=config.analysis.waveform_width,
            max_file_size=config.max_file_size,
            default_codec=config.default_codec,
            clock=clock,
        )
        logger.info(
            "engine_configured",
            enabled_effects=[kind.value for kind in engine.pipeline_config.enabled_kinds],
            buffer_size=engine.pipeline_config.performance.buffer_size,
            formats=len(engine.formats),
        )
        return engine

    @property
    def pipeline_config(self) -> PipelineConfig:
        return self._pipeline_config

    @property
    def formats(self) -> FormatRegistry:
        return self._formats

    @property
    def streaming_settings(self) -> StreamingSettings:
        return self._streaming

    @property
    def orchestrator(self) -> PipelineOrchestrator:
        return self._orchestrator

    # --- Construcao ---

    def create_orchestrator(self) -> PipelineOrchestrator:
        return PipelineOrchestrator(self._pipeline_config, self._reverb_presets, clock=self._clock)

    def create_streaming_controller(self, stream_id: str = "default") -> StreamingController:
        return StreamingController(self._orchestrator, self._streaming, stream_id=stream_id)

    def create_stream_pool(self, max_workers: int | None = None) -> StreamPool:
        return StreamPool(self._orchestrator, self._streaming, max_workers=max_workers)

    # --- Processamento ---

    def process(
        self,
        buffer: SampleBuffer,
        overrides: Iterable[EffectParams] | None = None,
    ) -> PipelineResult:
        """Caminho batch: cadeia completa sobre um buffer de ate buffer_size amostras."""
        return self._orchestrator.process(buffer, overrides)

    def analyze(self, buffer: SampleBuffer, width: int | None = None) -> BufferSummary:
        """Resumo com waveform para o colaborador de storage/upload.

        Raises:
            ValidationError: Buffer invalido (mesmas regras do pipeline).
        """
        validate_buffer(buffer, self._pipeline_config.performance.buffer_size)
        return analyze(buffer, width or self._waveform_width)

    # --- Formatos e presets ---

    def is_format_supported(self, extension: str) -> bool:
        return self._formats.is_format_supported(extension)

    def describe_format(self, extension: str) -> tuple[str, str]:
        return self._formats.describe_format(extension)

    def check_upload_extension(self, extension: str) -> tuple[str, str]:
        """Validacao do caminho de upload: extensao nao vazia e suportada.

        Returns:
            (mime_type, codec).

        Raises:
            InvalidExtensionError: Extensao vazia ou em branco.
            UnsupportedFormatError: Extensao nao registrada.
        """
        key = self._formats.require_extension(extension)
        return self._formats.describe_format(key)

    def check_file_size(self, size: int) -> int:
        """Valida o tamanho em bytes de um upload contra max_file_size.

        Raises:
            InvalidFileSizeError: Tamanho <= 0 ou acima do limite.
        """
        if size <= 0 or size > self._max_file_size:
            raise InvalidFileSizeError(size, self._max_file_size)
        return size

    def check_codec(self, codec: str) -> str:
        """Valida um codec: codec default ou extensao suportada.

        Returns:
            Codec normalizado (minusculo, sem ponto inicial).

        Raises:
            UnsupportedCodecError: Codec fora do conjunto aceito.
        """
        allowed = self.allowed_codecs()
        key = normalize_extension(codec)
        if key not in allowed:
            raise UnsupportedCodecError(codec, allowed)
        return key

    def allowed_codecs(self) -> list[str]:
        """Codec default seguido das extensoes suportadas, sem repeticao."""
        codecs = [normalize_extension(d.extension) for d in self._formats.list_formats()]
        if self._default_codec is not None:
            codecs.insert(0, normalize_extension(self._default_codec))
        return list(dict.fromkeys(codecs))

    def list_formats(self) -> list[FormatDescriptor]:
        return self._formats.list_formats()

    def list_quality_presets(self) -> dict[str, QualityPreset]:
        return dict(self._quality_presets.items())

    def get_quality_preset(self, name: str) -> QualityPreset | None:
        return self._quality_presets.get(name)

    def list_reverb_presets(self) -> dict[str, ReverbPreset]:
        return dict(self._reverb_presets.items())
