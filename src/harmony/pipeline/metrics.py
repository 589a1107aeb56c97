"""Metricas Prometheus do pipeline e do streaming.

Metricas sao opcionais: se prometheus_client nao estiver instalado,
o modulo exporta None para cada metrica e o codigo consumidor deve
verificar antes de usar.

Metricas definidas:
- harmony_stage_duration_seconds: Histogram de duracao por stage
- harmony_pipeline_failures_total: Counter de falhas por stage
- harmony_stream_frames_total: Counter de frames de streaming por desfecho
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from prometheus_client import Counter, Histogram

try:
    from prometheus_client import Counter as _Counter
    from prometheus_client import Histogram as _Histogram

    stage_duration_seconds: Histogram | None = _Histogram(
        "harmony_stage_duration_seconds",
        "Duration of one effect stage over one buffer",
        ["stage"],
        buckets=(0.0001, 0.0005, 0.001, 0.0025, 0.005, 0.01, 0.025, 0.05, 0.1, 0.5),
    )

    pipeline_failures_total: Counter | None = _Counter(
        "harmony_pipeline_failures_total",
        "Pipeline invocations that failed, by failing stage",
        ["stage"],
    )

    stream_frames_total: Counter | None = _Counter(
        "harmony_stream_frames_total",
        "Streaming frames by outcome",
        ["outcome"],
    )

    HAS_METRICS = True

except ImportError:
    stage_duration_seconds = None
    pipeline_failures_total = None
    stream_frames_total = None

    HAS_METRICS = False
