from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict


class UtilizationSample(BaseModel):
    """One tick's naive and SMT-adjusted utilization, in percent."""

    model_config = ConfigDict(frozen=True)

    timestamp: datetime
    naive_usage_percent: float
    adjusted_usage_percent: float
    naive_remaining_percent: float
    adjusted_remaining_percent: float
    difference_percent: float

    @classmethod
    def from_usages(cls, timestamp: datetime, naive: float, adjusted: float) -> UtilizationSample:
        naive_remaining = 100.0 - naive
        adjusted_remaining = 100.0 - adjusted
        return cls(
            timestamp=timestamp,
            naive_usage_percent=naive,
            adjusted_usage_percent=adjusted,
            naive_remaining_percent=naive_remaining,
            adjusted_remaining_percent=adjusted_remaining,
            difference_percent=naive_remaining - adjusted_remaining,
        )


class RollingUtilization(BaseModel):
    """Exponentially smoothed adjusted usage over 1, 5 and 15 minutes."""

    timestamp: datetime | None = None
    samples: int = 0
    rcpu_1min: float = 0.0
    rcpu_5min: float = 0.0
    rcpu_15min: float = 0.0
