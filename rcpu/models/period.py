from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, NonNegativeInt, computed_field, model_validator


class Period(BaseModel):
    """Per-category counter deltas of one logical CPU over ``[start, end]``."""

    model_config = ConfigDict(frozen=True)

    cpu_id: int
    start: datetime
    end: datetime
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

    @model_validator(mode="after")
    def _check_window(self) -> Period:
        if self.end < self.start:
            raise ValueError(f"period end {self.end.isoformat()} is before start {self.start.isoformat()}")
        return self

    @computed_field
    @property
    def total_system_period(self) -> int:
        return self.system + self.irq + self.softirq

    @computed_field
    @property
    def total_idle_period(self) -> int:
        return self.idle + self.iowait

    @computed_field
    @property
    def total_virtual_period(self) -> int:
        return self.guest + self.guest_nice

    @computed_field
    @property
    def total_period(self) -> int:
        return (
            self.user
            + self.nice
            + self.total_system_period
            + self.total_idle_period
            + self.steal
            + self.total_virtual_period
        )
