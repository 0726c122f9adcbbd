"""Shared test fixtures for rcpu."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

from rcpu.models import CoreTopology, CounterSnapshot, CpuInfo, Period

T0 = datetime(2024, 5, 1, 12, 0, 0, tzinfo=timezone.utc)


def make_snapshot(cpu_id: int = 0, at: datetime = T0, **counters: int) -> CounterSnapshot:
    return CounterSnapshot(cpu_id=cpu_id, collected_at=at, **counters)


def make_period(cpu_id: int = 0, total: int = 1000, idle: int = 0) -> Period:
    """A period of ``total`` ticks of which ``idle`` were idle and the rest user."""
    return Period(
        cpu_id=cpu_id,
        start=T0,
        end=T0 + timedelta(seconds=1),
        user=total - idle,
        idle=idle,
    )


def make_topology(*cores: tuple[int, int]) -> CoreTopology:
    """Topology with one core per (cpu, cpu) sibling pair, core ids in order."""
    infos = [
        CpuInfo(cpu_id=cpu, core_id=core_id)
        for core_id, pair in enumerate(cores)
        for cpu in pair
    ]
    return CoreTopology.from_cpu_infos(infos)


def stat_text(rows: dict[int, list[int]], aggregate: bool = True) -> str:
    """Render a /proc/stat document for the given per-CPU raw counters."""
    lines = []
    if aggregate:
        totals = [sum(col) for col in zip(*rows.values())]
        lines.append("cpu  " + " ".join(map(str, totals)))
    for cpu_id, values in rows.items():
        lines.append(f"cpu{cpu_id} " + " ".join(map(str, values)))
    lines += [
        "intr 1234 0 0",
        "ctxt 987654",
        "btime 1714560000",
        "processes 4242",
    ]
    return "\n".join(lines) + "\n"


class ScriptedSampler:
    """Returns prepared snapshot sets (or raises prepared errors) in order."""

    def __init__(self, *steps: list[CounterSnapshot] | Exception) -> None:
        self._steps = list(steps)
        self.calls = 0

    def sample(self) -> list[CounterSnapshot]:
        step = self._steps[min(self.calls, len(self._steps) - 1)]
        self.calls += 1
        if isinstance(step, Exception):
            raise step
        return step


class AdvancingSampler:
    """Endless sampler: every call advances each CPU by ``busy`` user and ``idle`` idle ticks."""

    def __init__(self, loads: dict[int, tuple[int, int]]) -> None:
        self._loads = loads
        self._step = 0

    def sample(self) -> list[CounterSnapshot]:
        self._step += 1
        at = T0 + timedelta(seconds=self._step)
        return [
            make_snapshot(cpu_id, at, user=busy * self._step, idle=idle * self._step)
            for cpu_id, (busy, idle) in sorted(self._loads.items())
        ]


@pytest.fixture
def two_core_topology() -> CoreTopology:
    """cpu0/cpu2 share core 0, cpu1/cpu3 share core 1."""
    return make_topology((0, 2), (1, 3))


@pytest.fixture
def fake_proc(tmp_path: Path) -> Path:
    root = tmp_path / "proc"
    root.mkdir()
    return root


@pytest.fixture
def fake_sys(tmp_path: Path) -> Path:
    root = tmp_path / "sys"
    (root / "devices" / "system" / "cpu" / "smt").mkdir(parents=True)
    return root
