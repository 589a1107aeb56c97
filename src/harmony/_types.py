"""Tipos fundamentais do Harmony.

Este modulo define enums e dataclasses usados por todos os componentes
do nucleo. Alteracoes aqui impactam o sistema inteiro.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class EffectKind(Enum):
    """Tipo de efeito do pipeline.

    A ordem de declaracao E a ordem canonica de execucao:
    noise_cancellation -> echo_cancellation -> amplification ->
    normalization -> compression -> reverb -> equalization.
    """

    NOISE_CANCELLATION = "noise_cancellation"
    ECHO_CANCELLATION = "echo_cancellation"
    AMPLIFICATION = "amplification"
    NORMALIZATION = "normalization"
    COMPRESSION = "compression"
    REVERB = "reverb"
    EQUALIZATION = "equalization"

    @property
    def position(self) -> int:
        """Indice do efeito na ordem canonica (0-based)."""
        return CANONICAL_ORDER.index(self)


CANONICAL_ORDER: tuple[EffectKind, ...] = tuple(EffectKind)


class PipelineState(Enum):
    """Estado de uma invocacao do pipeline.

    Transicoes validas:
        IDLE -> VALIDATING
        VALIDATING -> RUNNING | FAILED
        RUNNING -> RUNNING (proximo stage) | COMPLETED | FAILED
        COMPLETED e FAILED sao terminais.
    """

    IDLE = "idle"
    VALIDATING = "validating"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


class OverloadPolicy(Enum):
    """Politica do streaming sob sobrecarga sustentada.

    Aplicada somente apos overload_threshold frames atrasados consecutivos.
    """

    PROCESS = "process"  # continua processando todos os frames (default)
    BYPASS = "bypass"  # devolve o proximo frame sem processamento, marcado
    SKIP = "skip"  # descarta o proximo frame explicitamente


@dataclass(frozen=True, slots=True)
class FormatDescriptor:
    """Formato de audio suportado (metadados; nenhum parsing de container)."""

    extension: str
    mime_type: str
    codec: str | None = None
    bitrate: int | None = None
    sample_rate: int | None = None
    channels: int | None = None


@dataclass(frozen=True, slots=True)
class QualityPreset:
    """Preset de qualidade para decisoes de transcodificacao externas."""

    bitrate: int
    sample_rate: int
    channels: int


@dataclass(frozen=True, slots=True)
class ReverbPreset:
    """Caracteristicas de sala para o reverb. Valores em [0, 1]."""

    room_size: float
    damping: float
    wet_level: float
    dry_level: float


@dataclass(frozen=True, slots=True)
class StageMetric:
    """Diagnostico de um stage em uma invocacao do pipeline."""

    stage_name: str
    duration_micros: int
    applied_strength: float
    enabled: bool


@dataclass(frozen=True, slots=True)
class BufferSummary:
    """Resumo de niveis e duracao de um buffer.

    rms_dbfs/peak_dbfs sao None para buffers de silencio absoluto.
    waveform e None quando o resumo nao foi gerado com largura.
    """

    rms: float
    peak: float
    duration_s: float
    sample_rate: int
    channels: int
    length: int
    rms_dbfs: float | None = None
    peak_dbfs: float | None = None
    waveform: tuple[float, ...] | None = None
