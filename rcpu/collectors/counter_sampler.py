from __future__ import annotations

import logging
from datetime import datetime, timezone
from pathlib import Path

from rcpu.errors import EmptyDataError, TransientIOError
from rcpu.models import CounterSnapshot

logger = logging.getLogger(__name__)

# user nice system idle iowait irq softirq steal guest guest_nice
_FIELD_COUNT = 10


def parse_stat(text: str, collected_at: datetime) -> list[CounterSnapshot]:
    """Parse the per-CPU lines of a ``/proc/stat`` document.

    The aggregate ``cpu`` line and every non-cpu line are ignored, as are
    lines too short or holding values that are not unsigned integers.
    Guest time is already counted inside user/nice by the kernel, so it is
    subtracted here.
    """
    snapshots: list[CounterSnapshot] = []
    for line in text.splitlines():
        items = line.split()
        if len(items) < _FIELD_COUNT + 1 or not items[0].startswith("cpu"):
            continue

        cpu_suffix = items[0][3:]
        if not (cpu_suffix.isascii() and cpu_suffix.isdigit()):
            continue

        raw = items[1 : _FIELD_COUNT + 1]
        if not all(v.isascii() and v.isdigit() for v in raw):
            logger.debug("Skipping malformed stat line: %s", line)
            continue

        user, nice, system, idle, iowait, irq, softirq, steal, guest, guest_nice = map(int, raw)
        snapshots.append(
            CounterSnapshot(
                cpu_id=int(cpu_suffix),
                collected_at=collected_at,
                user=max(user - guest, 0),
                nice=max(nice - guest_nice, 0),
                system=system,
                idle=idle,
                iowait=iowait,
                irq=irq,
                softirq=softirq,
                steal=steal,
                guest=guest,
                guest_nice=guest_nice,
            )
        )
    return snapshots


class CounterSampler:
    """Reads cumulative per-logical-CPU counters from ``<proc_root>/stat``."""

    def __init__(self, proc_root: str | Path = "/proc") -> None:
        self.stat_path = Path(proc_root) / "stat"

    def sample(self) -> list[CounterSnapshot]:
        try:
            text = self.stat_path.read_text()
        except OSError as e:
            raise TransientIOError(f"failed to read {self.stat_path}: {e}") from e

        # One instant for every CPU of this call
        now = datetime.now(timezone.utc)
        snapshots = parse_stat(text, now)
        if not snapshots:
            raise EmptyDataError(f"no per-CPU records in {self.stat_path}")
        return snapshots
