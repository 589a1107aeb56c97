"""Real-Time Streaming — frames de tamanho fixo com orcamento de latencia."""

from __future__ import annotations

from harmony.streaming.controller import StreamingController, StreamingSettings
from harmony.streaming.pool import StreamPool

__all__ = ["StreamPool", "StreamingController", "StreamingSettings"]
