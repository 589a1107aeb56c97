"""Pipeline Orchestrator — cadeia sequencial de efeitos com diagnosticos."""

from __future__ import annotations

from harmony.pipeline.config import PerformanceSettings, PipelineConfig
from harmony.pipeline.orchestrator import PipelineOrchestrator
from harmony.pipeline.result import PipelineResult
from harmony.pipeline.state import PipelineRun

__all__ = [
    "PerformanceSettings",
    "PipelineConfig",
    "PipelineOrchestrator",
    "PipelineResult",
    "PipelineRun",
]
