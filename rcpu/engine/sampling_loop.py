from __future__ import annotations

import asyncio
import logging
from enum import StrEnum
from typing import Protocol

from rcpu.engine.channel import SampleChannel
from rcpu.engine.estimators import adjusted_usage, naive_usage
from rcpu.engine.period import pair_periods
from rcpu.errors import DataIntegrityError, DegenerateInputError, TransientIOError
from rcpu.models import CoreTopology, CounterSnapshot, UtilizationSample

logger = logging.getLogger(__name__)


class Sampler(Protocol):
    def sample(self) -> list[CounterSnapshot]: ...


class LoopState(StrEnum):
    AWAITING_BASELINE = "awaiting_baseline"
    STEADY = "steady"


class SamplingLoop:
    """Fixed-cadence driver: sample, pair, estimate, emit.

    The first tick only records a baseline. Every later tick turns the
    previous and current snapshot sets into one :class:`UtilizationSample`.
    Tick-scoped failures are logged and leave a gap in the output; they never
    stop the loop.
    """

    def __init__(
        self,
        sampler: Sampler,
        topology: CoreTopology,
        channel: SampleChannel | None = None,
        interval: float = 1.0,
    ) -> None:
        if interval <= 0:
            raise ValueError(f"interval must be positive, got {interval}")
        self._sampler = sampler
        self._topology = topology
        self._channel = channel
        self.interval = interval

        self._state = LoopState.AWAITING_BASELINE
        self._previous: list[CounterSnapshot] | None = None

        self._running = False
        self._task: asyncio.Task | None = None
        self._stop_event: asyncio.Event | None = None

        self.ticks = 0
        self.samples_emitted = 0
        self.ticks_skipped = 0
        self.wakeups_coalesced = 0

    # ── one tick ─────────────────────────────────────────

    def tick(self) -> UtilizationSample | None:
        """Run one pipeline step. Returns the sample, or None when nothing is emitted."""
        self.ticks += 1
        try:
            current = self._sampler.sample()
        except TransientIOError as e:
            # previous is left as is, the next tick pairs against it
            self.ticks_skipped += 1
            logger.warning("Skipping tick %d, counters unavailable: %s", self.ticks, e)
            return None

        if self._state is LoopState.AWAITING_BASELINE:
            self._previous = current
            self._state = LoopState.STEADY
            logger.info("Baseline captured for %d logical CPUs", len(current))
            return None

        previous, self._previous = self._previous, current
        sample = self._estimate(previous, current)
        if sample is None:
            self.ticks_skipped += 1
        else:
            self.samples_emitted += 1
        return sample

    def _estimate(
        self,
        previous: list[CounterSnapshot],
        current: list[CounterSnapshot],
    ) -> UtilizationSample | None:
        periods, errors = pair_periods(previous, current)
        if errors:
            for err in errors:
                logger.warning("Skipping emission for tick %d: %s", self.ticks, err)
            return None

        try:
            naive = naive_usage(periods)
            adjusted = adjusted_usage(periods, self._topology)
        except (DataIntegrityError, DegenerateInputError) as e:
            logger.warning("Skipping emission for tick %d: %s", self.ticks, e)
            return None

        return UtilizationSample.from_usages(current[0].collected_at, naive, adjusted)

    # ── lifecycle ────────────────────────────────────────

    async def start(self) -> None:
        if self._running:
            return
        self._running = True
        self._stop_event = asyncio.Event()
        self._task = asyncio.create_task(self._loop())
        logger.info("SamplingLoop started (interval=%.1fs)", self.interval)

    async def stop(self) -> None:
        """Ask the loop to exit and wait for it. A tick in progress is completed first."""
        if not self._running:
            return
        self._running = False
        if self._stop_event:
            self._stop_event.set()
        if self._task:
            await self._task
            self._task = None
        logger.info(
            "SamplingLoop stopped after %d ticks (%d samples, %d skipped)",
            self.ticks,
            self.samples_emitted,
            self.ticks_skipped,
        )

    # ── internals ───────────────────────────────────────

    async def _loop(self) -> None:
        loop = asyncio.get_running_loop()
        next_tick = loop.time()
        while self._running:
            try:
                sample = self.tick()
                if sample is not None and self._channel is not None:
                    self._channel.publish(sample)
            except Exception:
                logger.exception("SamplingLoop error during tick %d", self.ticks)

            next_tick += self.interval
            now = loop.time()
            if now >= next_tick:
                # overran: skip to the next boundary still in the future
                missed = int((now - next_tick) // self.interval) + 1
                next_tick += missed * self.interval
                self.wakeups_coalesced += missed
                logger.debug("Tick %d overran, coalesced %d wakeups", self.ticks, missed)

            try:
                await asyncio.wait_for(self._stop_event.wait(), timeout=next_tick - now)
            except asyncio.TimeoutError:
                pass

    @property
    def state(self) -> LoopState:
        return self._state

    @property
    def running(self) -> bool:
        return self._running

    @property
    def topology(self) -> CoreTopology:
        return self._topology
