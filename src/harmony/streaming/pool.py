"""StreamPool — varios streams independentes sobre um pool de workers limitado.

Modelo:
- ThreadPoolExecutor com performance.thread_pool_size workers.
- Cada unidade de trabalho e "cadeia completa sobre um frame de um stream".
- Cada stream tem uma fila FIFO e no maximo uma cadeia em execucao:
  frames do mesmo stream saem na ordem de chegada; streams diferentes
  completam em qualquer ordem entre si.
- cancel_stream falha os frames ainda na fila com StreamCancelledError;
  o frame em execucao termina normalmente.
"""

from __future__ import annotations

import threading
from collections import deque
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from harmony.exceptions import StreamCancelledError, StreamNotFoundError
from harmony.logging import get_logger
from harmony.streaming.controller import StreamingController

if TYPE_CHECKING:
    from harmony.audio.buffer import SampleBuffer
    from harmony.pipeline.orchestrator import PipelineOrchestrator
    from harmony.pipeline.result import PipelineResult
    from harmony.streaming.controller import StreamingSettings

logger = get_logger("streaming.pool")

FrameFuture = Future["PipelineResult | None"]


@dataclass(slots=True)
class _StreamLane:
    """Fila de frames pendentes de um stream."""

    controller: StreamingController
    pending: deque[tuple[SampleBuffer, FrameFuture]] = field(default_factory=deque)
    scheduled: bool = False
    lock: threading.Lock = field(default_factory=threading.Lock)


class StreamPool:
    """Processa frames de varios streams em paralelo, ordem preservada por stream.

    Args:
        orchestrator: Orchestrator compartilhado por todos os streams.
        settings: Configuracoes de streaming aplicadas a cada stream.
        max_workers: Tamanho do pool. Default: performance.thread_pool_size.
    """

    def __init__(
        self,
        orchestrator: PipelineOrchestrator,
        settings: StreamingSettings | None = None,
        *,
        max_workers: int | None = None,
    ) -> None:
        self._orchestrator = orchestrator
        self._settings = settings
        self._max_workers = max_workers or orchestrator.config.performance.thread_pool_size
        self._executor = ThreadPoolExecutor(
            max_workers=self._max_workers,
            thread_name_prefix="harmony-stream",
        )
        self._lanes: dict[str, _StreamLane] = {}
        self._lock = threading.Lock()
        self._closed = False

    @property
    def max_workers(self) -> int:
        return self._max_workers

    @property
    def stream_ids(self) -> list[str]:
        with self._lock:
            return list(self._lanes)

    def open_stream(self, stream_id: str) -> StreamingController:
        """Registra um stream. Idempotente: stream existente e reutilizado."""
        with self._lock:
            if self._closed:
                msg = "StreamPool encerrado"
                raise RuntimeError(msg)
            lane = self._lanes.get(stream_id)
            if lane is None:
                controller = StreamingController(
                    self._orchestrator, self._settings, stream_id=stream_id
                )
                lane = _StreamLane(controller=controller)
                self._lanes[stream_id] = lane
                logger.debug("stream_opened", stream_id=stream_id)
            return lane.controller

    def get_stream(self, stream_id: str) -> StreamingController:
        """Raises: StreamNotFoundError."""
        return self._get_lane(stream_id).controller

    def submit(self, stream_id: str, buffer: SampleBuffer) -> FrameFuture:
        """Enfileira um frame no stream.

        Returns:
            Future resolvido com o PipelineResult (ou None se SKIP), ou com
            a exception do frame (timeout, validacao, falha de stage,
            cancelamento). Erros de um frame nao encerram o stream.

        Raises:
            StreamNotFoundError: Stream nao registrado.
            RuntimeError: Pool ja encerrado.
        """
        future: FrameFuture = Future()

        # Sob self._lock: shutdown() nao intercala entre enfileirar e agendar.
        with self._lock:
            if self._closed:
                msg = "StreamPool encerrado"
                raise RuntimeError(msg)
            lane = self._lanes.get(stream_id)
            if lane is None:
                raise StreamNotFoundError(stream_id)

            with lane.lock:
                if lane.controller.cancelled:
                    future.set_exception(StreamCancelledError(stream_id))
                    return future
                lane.pending.append((buffer, future))
                schedule = not lane.scheduled
                lane.scheduled = True

            if schedule:
                self._executor.submit(self._drain, lane)
        return future

    def cancel_stream(self, stream_id: str) -> int:
        """Cancela o stream entre frames.

        Returns:
            Numero de frames pendentes que foram falhados.
        """
        lane = self._get_lane(stream_id)
        lane.controller.cancel()
        with lane.lock:
            dropped = list(lane.pending)
            lane.pending.clear()
        for _buffer, future in dropped:
            if future.set_running_or_notify_cancel():
                future.set_exception(StreamCancelledError(stream_id))
        if dropped:
            logger.info("stream_pending_cancelled", stream_id=stream_id, frames=len(dropped))
        return len(dropped)

    def close_stream(self, stream_id: str) -> None:
        """Cancela e remove o stream do pool."""
        self.cancel_stream(stream_id)
        with self._lock:
            self._lanes.pop(stream_id, None)
        logger.debug("stream_closed", stream_id=stream_id)

    def shutdown(self, wait: bool = True) -> None:
        """Encerra o pool. Frames ja enfileirados sao processados ate o fim."""
        with self._lock:
            self._closed = True
        self._executor.shutdown(wait=wait)

    def __enter__(self) -> StreamPool:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.shutdown(wait=True)

    def _get_lane(self, stream_id: str) -> _StreamLane:
        with self._lock:
            lane = self._lanes.get(stream_id)
        if lane is None:
            raise StreamNotFoundError(stream_id)
        return lane

    def _drain(self, lane: _StreamLane) -> None:
        while True:
            with lane.lock:
                if not lane.pending:
                    lane.scheduled = False
                    return
                buffer, future = lane.pending.popleft()

            if not future.set_running_or_notify_cancel():
                continue

            try:
                result = lane.controller.push_frame(buffer)
            except Exception as e:
                future.set_exception(e)
            else:
                future.set_result(result)
