from __future__ import annotations

import logging
import math

from rcpu.models import RollingUtilization, UtilizationSample

logger = logging.getLogger(__name__)

RCPU_FEATURE_GATE_KEY = "rcpu-scheduler/enable"
RCPU_METRIC_1M_KEY = "rcpu-scheduler/rcpu_1min"
RCPU_METRIC_5M_KEY = "rcpu-scheduler/rcpu_5min"
RCPU_METRIC_15M_KEY = "rcpu-scheduler/rcpu_15min"

RCPU_MAX_SCORE = 1000  # annotation values are usage in thousandths

_WINDOWS = {
    "rcpu_1min": 60.0,
    "rcpu_5min": 300.0,
    "rcpu_15min": 900.0,
}


def to_millis(usage_percent: float) -> int:
    return max(0, min(RCPU_MAX_SCORE, round(usage_percent * 10)))


class RollingAverager:
    """Load-average style smoothing of adjusted usage over 1/5/15 minutes.

    Kept in memory only; the annotation values are handed to whoever
    publishes them.
    """

    def __init__(self) -> None:
        self._current = RollingUtilization()

    async def handle_sample(self, sample: UtilizationSample) -> None:
        self.update(sample)

    def update(self, sample: UtilizationSample) -> RollingUtilization:
        value = sample.adjusted_usage_percent
        prev = self._current

        if prev.timestamp is None:
            averages = {name: value for name in _WINDOWS}
        else:
            elapsed = max((sample.timestamp - prev.timestamp).total_seconds(), 0.0)
            averages = {}
            for name, window in _WINDOWS.items():
                decay = math.exp(-elapsed / window)
                averages[name] = getattr(prev, name) * decay + value * (1 - decay)

        self._current = RollingUtilization(
            timestamp=sample.timestamp,
            samples=prev.samples + 1,
            **averages,
        )
        return self._current

    @property
    def current(self) -> RollingUtilization:
        return self._current

    def annotations(self) -> dict[str, str]:
        """Scheduler annotation values for the current averages, empty before any sample."""
        if self._current.timestamp is None:
            return {}
        return {
            RCPU_FEATURE_GATE_KEY: "true",
            RCPU_METRIC_1M_KEY: str(to_millis(self._current.rcpu_1min)),
            RCPU_METRIC_5M_KEY: str(to_millis(self._current.rcpu_5min)),
            RCPU_METRIC_15M_KEY: str(to_millis(self._current.rcpu_15min)),
        }
