"""Resumo de buffer (niveis, duracao, waveform) e validacao de metadados.

Metadados de arquivo (titulo, artista, ...) vem de um extrator externo;
aqui apenas validamos a forma. Nenhum arquivo e lido por este modulo.
"""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from dataclasses import replace
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError

from harmony._types import BufferSummary
from harmony.analysis.levels import linear_to_decibel, peak, rms
from harmony.analysis.waveform import waveform
from harmony.exceptions import MetadataValidationError

if TYPE_CHECKING:
    from collections.abc import Mapping
    from concurrent.futures import Executor

    from harmony.audio.buffer import SampleBuffer


def _dbfs_or_none(linear: float) -> float | None:
    return linear_to_decibel(linear) if linear > 0.0 else None


def extract_summary(buffer: SampleBuffer, sample_rate: int, channels: int) -> BufferSummary:
    """Agrupa rms, pico e duracao do buffer.

    A duracao considera frames (amostras por canal): n / channels / sample_rate.

    Args:
        buffer: Buffer ja validado.
        sample_rate: Sample rate em Hz.
        channels: Numero de canais intercalados.
    """
    buffer_rms = rms(buffer)
    buffer_peak = peak(buffer)
    length = buffer.length
    return BufferSummary(
        rms=buffer_rms,
        peak=buffer_peak,
        duration_s=(length // channels) / sample_rate,
        sample_rate=sample_rate,
        channels=channels,
        length=length,
        rms_dbfs=_dbfs_or_none(buffer_rms),
        peak_dbfs=_dbfs_or_none(buffer_peak),
    )


def analyze(buffer: SampleBuffer, width: int) -> BufferSummary:
    """Resumo completo com waveform, para geracao de preview.

    Diferente de waveform(), a largura e limitada ao tamanho do buffer
    em vez de rejeitada: o preview de um buffer curto tem um ponto por amostra.
    """
    summary = extract_summary(buffer, buffer.sample_rate, buffer.channels)
    points = waveform(buffer, max(1, min(width, buffer.length)))
    return _with_waveform(summary, points)


def analyze_preview(
    buffer: SampleBuffer,
    width: int,
    executor: Executor | None = None,
) -> BufferSummary:
    """Igual a analyze(), calculando rms, pico e waveform em paralelo.

    O buffer e somente-leitura, entao as tres analises leem a mesma
    memoria sem copia nem lock.

    Args:
        buffer: Buffer ja validado.
        width: Largura desejada do waveform (limitada ao tamanho do buffer).
        executor: Executor a usar. Se None, cria um temporario com 3 workers.
    """
    effective_width = max(1, min(width, buffer.length))

    if executor is None:
        with ThreadPoolExecutor(max_workers=3, thread_name_prefix="harmony-analysis") as pool:
            return analyze_preview(buffer, width, pool)

    rms_future = executor.submit(rms, buffer)
    peak_future = executor.submit(peak, buffer)
    waveform_future = executor.submit(waveform, buffer, effective_width)

    buffer_rms = rms_future.result()
    buffer_peak = peak_future.result()
    summary = BufferSummary(
        rms=buffer_rms,
        peak=buffer_peak,
        duration_s=buffer.duration_s,
        sample_rate=buffer.sample_rate,
        channels=buffer.channels,
        length=buffer.length,
        rms_dbfs=_dbfs_or_none(buffer_rms),
        peak_dbfs=_dbfs_or_none(buffer_peak),
    )
    return _with_waveform(summary, waveform_future.result())


def _with_waveform(summary: BufferSummary, points: list[float]) -> BufferSummary:
    return replace(summary, waveform=tuple(points))


class AudioMetadata(BaseModel):
    """Metadados de arquivo fornecidos pelo extrator externo.

    Campos descritivos sao opcionais. Duracao, formato de stream e
    container sao obrigatorios e positivos.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    title: str = ""
    artist: str = ""
    album: str = ""
    genre: str = ""
    year: int | None = Field(default=None, gt=0, le=9999)
    duration: float = Field(gt=0.0)
    sample_rate: int = Field(gt=0)
    channels: int = Field(gt=0)
    bitrate: int = Field(gt=0)
    format: str = Field(min_length=1)


def validate_metadata(raw: Mapping[str, Any]) -> AudioMetadata:
    """Valida a forma dos metadados do extrator.

    Raises:
        MetadataValidationError: Tipos ou valores invalidos.
    """
    try:
        return AudioMetadata.model_validate(dict(raw))
    except PydanticValidationError as e:
        errors = [
            f"{'.'.join(str(loc) for loc in err['loc'])}: {err['msg']}" for err in e.errors()
        ]
        raise MetadataValidationError(errors) from e
