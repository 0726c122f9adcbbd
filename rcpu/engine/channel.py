from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable

from rcpu.models import UtilizationSample

logger = logging.getLogger(__name__)

Sink = Callable[[UtilizationSample], Awaitable[None]]


class SampleChannel:
    """Hands samples from the sampling task to a single consumer task.

    ``publish`` never blocks the producer: when the queue is full the oldest
    queued sample is dropped.
    """

    def __init__(self, maxsize: int = 64) -> None:
        self._queue: asyncio.Queue[UtilizationSample] = asyncio.Queue(maxsize=maxsize)
        self._sinks: list[Sink] = []
        self._running = False
        self._consumer_task: asyncio.Task | None = None
        self.dropped = 0

    # ── lifecycle ────────────────────────────────────────

    async def start(self) -> None:
        if self._running:
            return
        self._running = True
        self._consumer_task = asyncio.create_task(self._consume_loop())
        logger.info("SampleChannel started")

    async def stop(self) -> None:
        if not self._running:
            return
        self._running = False
        await self._drain()
        if self._consumer_task:
            self._consumer_task.cancel()
            try:
                await self._consumer_task
            except asyncio.CancelledError:
                pass
            self._consumer_task = None
        logger.info("SampleChannel stopped")

    # ── publish / subscribe ─────────────────────────────

    def publish(self, sample: UtilizationSample) -> None:
        if self._queue.full():
            self._queue.get_nowait()
            self._queue.task_done()
            self.dropped += 1
            logger.warning("Sink is falling behind, dropped oldest sample")
        self._queue.put_nowait(sample)

    def subscribe(self, sink: Sink) -> None:
        self._sinks.append(sink)

    def unsubscribe(self, sink: Sink) -> None:
        self._sinks.remove(sink)

    # ── internals ───────────────────────────────────────

    async def _consume_loop(self) -> None:
        while self._running:
            try:
                sample = await asyncio.wait_for(self._queue.get(), timeout=0.5)
            except asyncio.TimeoutError:
                continue
            await self._dispatch(sample)
            self._queue.task_done()

    async def _drain(self) -> None:
        while not self._queue.empty():
            try:
                sample = self._queue.get_nowait()
            except asyncio.QueueEmpty:
                break
            await self._dispatch(sample)
            self._queue.task_done()

    async def _dispatch(self, sample: UtilizationSample) -> None:
        for sink in self._sinks:
            try:
                await sink(sample)
            except Exception:
                logger.exception("Sink %s failed for sample at %s", sink, sample.timestamp)

    # ── introspection ───────────────────────────────────

    @property
    def pending(self) -> int:
        return self._queue.qsize()

    @property
    def running(self) -> bool:
        return self._running

    @property
    def sink_count(self) -> int:
        return len(self._sinks)
