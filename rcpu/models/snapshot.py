from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, NonNegativeInt


class CounterSnapshot(BaseModel):
    """Cumulative time-accounting counters of one logical CPU at one instant.

    Values are kernel ticks since boot. ``user`` and ``nice`` are already net
    of ``guest`` and ``guest_nice``.
    """

    model_config = ConfigDict(frozen=True)

    cpu_id: int
    collected_at: datetime
    user: NonNegativeInt = 0
    nice: NonNegativeInt = 0
    system: NonNegativeInt = 0
    idle: NonNegativeInt = 0
    iowait: NonNegativeInt = 0
    irq: NonNegativeInt = 0
    softirq: NonNegativeInt = 0
    steal: NonNegativeInt = 0
    guest: NonNegativeInt = 0
    guest_nice: NonNegativeInt = 0

    @property
    def total_idle(self) -> int:
        return self.idle + self.iowait

    @property
    def total_system(self) -> int:
        return self.system + self.irq + self.softirq

    @property
    def total_virtual(self) -> int:
        return self.guest + self.guest_nice

    @property
    def total(self) -> int:
        return (
            self.user
            + self.nice
            + self.total_system
            + self.total_idle
            + self.steal
            + self.total_virtual
        )
