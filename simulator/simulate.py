"""Synthetic load simulator for the RCPU estimator.

Feeds synthetic per-CPU counters through the real SamplingLoop so the gap
between the average estimate and the SMT-adjusted estimate can be seen on
any machine, SMT or not.

Usage:
    python simulator/simulate.py                        # run all scenarios
    python simulator/simulate.py --scenario one_sibling_busy
    python simulator/simulate.py --cores 8 --samples 10
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import random
import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Callable

# Allow running from project root
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from rcpu.engine import SampleChannel, SamplingLoop
from rcpu.models import CoreTopology, CounterSnapshot, CpuInfo
from rcpu.sinks import LogSink

logging.basicConfig(level=logging.INFO, format="%(asctime)s [SIM] %(message)s")
logger = logging.getLogger("simulator")

# (core_id, step) -> busy fraction of each sibling
LoadProfile = Callable[[int, int], tuple[float, float]]


# ── Scenario load profiles ───────────────────────────


def balanced(core_id: int, step: int) -> tuple[float, float]:
    """Both siblings equally loaded: naive and adjusted agree."""
    return 0.5, 0.5


def one_sibling_busy(core_id: int, step: int) -> tuple[float, float]:
    """One thread saturated, its sibling idle: naive reports half the core free."""
    return 1.0, 0.0


def mixed(core_id: int, step: int) -> tuple[float, float]:
    """Uneven random load on every core."""
    return random.uniform(0.2, 1.0), random.uniform(0.0, 0.4)


def idle(core_id: int, step: int) -> tuple[float, float]:
    return 0.02, 0.02


SCENARIOS: dict[str, LoadProfile] = {
    "balanced": balanced,
    "one_sibling_busy": one_sibling_busy,
    "mixed": mixed,
    "idle": idle,
}


def make_topology(cores: int) -> CoreTopology:
    """Linux-style numbering: cpu N and cpu N+cores are siblings of core N."""
    infos = [CpuInfo(cpu_id=core, core_id=core) for core in range(cores)]
    infos += [CpuInfo(cpu_id=core + cores, core_id=core) for core in range(cores)]
    return CoreTopology.from_cpu_infos(infos)


class SyntheticSampler:
    """Produces cumulative counters that advance by ``ticks_per_sample`` per call."""

    def __init__(
        self,
        topology: CoreTopology,
        profile: LoadProfile,
        ticks_per_sample: int = 100,
        jitter: float = 0.0,
        start: datetime | None = None,
    ) -> None:
        self._topology = topology
        self._profile = profile
        self._ticks = ticks_per_sample
        self._jitter = jitter
        self._start = start or datetime.now(timezone.utc)
        self._step = 0
        self._counters = {cpu: {"user": 0, "system": 0, "idle": 0} for cpu in topology.cpu_ids}

    def _busy_ticks(self, fraction: float) -> int:
        if self._jitter:
            fraction += random.uniform(-self._jitter, self._jitter)
        return round(self._ticks * min(max(fraction, 0.0), 1.0))

    def sample(self) -> list[CounterSnapshot]:
        collected_at = self._start + timedelta(seconds=self._step)
        for core_id, cpu_ids in self._topology.core_to_cpus.items():
            for cpu_id, fraction in zip(cpu_ids, self._profile(core_id, self._step)):
                busy = self._busy_ticks(fraction)
                counters = self._counters[cpu_id]
                counters["user"] += busy - busy // 5
                counters["system"] += busy // 5
                counters["idle"] += self._ticks - busy
        self._step += 1

        return [
            CounterSnapshot(cpu_id=cpu_id, collected_at=collected_at, **counters)
            for cpu_id, counters in sorted(self._counters.items())
        ]


# ── Main runner ──────────────────────────────────────


async def run_scenario(name: str, cores: int, samples: int, interval: float) -> None:
    topology = make_topology(cores)
    channel = SampleChannel()
    channel.subscribe(LogSink().handle_sample)
    loop = SamplingLoop(
        SyntheticSampler(topology, SCENARIOS[name], jitter=0.02),
        topology,
        channel=channel,
        interval=interval,
    )

    await channel.start()
    await loop.start()
    while loop.samples_emitted < samples:
        await asyncio.sleep(interval)
    await loop.stop()
    await channel.stop()


async def main() -> None:
    parser = argparse.ArgumentParser(description="RCPU load simulator")
    parser.add_argument("--scenario", choices=list(SCENARIOS.keys()), help="Run a single scenario")
    parser.add_argument("--cores", type=int, default=4, help="physical cores to simulate")
    parser.add_argument("--samples", type=int, default=5, help="samples per scenario")
    parser.add_argument("--interval", type=float, default=0.2, help="seconds between ticks")
    args = parser.parse_args()

    names = [args.scenario] if args.scenario else list(SCENARIOS)
    for name in names:
        logger.info("=== Starting scenario: %s ===", name)
        await run_scenario(name, args.cores, args.samples, args.interval)
    logger.info("=== All scenarios complete ===")


if __name__ == "__main__":
    asyncio.run(main())
