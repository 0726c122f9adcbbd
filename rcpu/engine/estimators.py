from __future__ import annotations

from collections.abc import Mapping

from rcpu.errors import DataIntegrityError, DegenerateInputError
from rcpu.models import CoreTopology, Period


def _usage_percent(total_period: int, total_idle_period: int) -> float:
    if total_period == 0:
        raise DegenerateInputError("total period is zero")
    return 100.0 * (1 - total_idle_period / total_period)


def naive_usage(periods: Mapping[int, Period]) -> float:
    """Average usage over every logical CPU, as top/htop/btop report it."""
    total_period = 0
    total_idle_period = 0
    for period in periods.values():
        total_period += period.total_period
        total_idle_period += period.total_idle_period
    return _usage_percent(total_period, total_idle_period)


def adjusted_usage(periods: Mapping[int, Period], topology: CoreTopology) -> float:
    """SMT-aware usage (RCPU) computed at physical core granularity.

    Each core contributes the larger of its two siblings' windows and the
    smaller of their idle times: both threads share the same execution units,
    so the core is only as idle as its busier sibling.
    """
    total_period = 0
    total_idle_period = 0
    for core_id, (cpu0, cpu1) in topology.core_to_cpus.items():
        try:
            ht0 = periods[cpu0]
            ht1 = periods[cpu1]
        except KeyError as e:
            raise DataIntegrityError(f"no period for cpu {e.args[0]} of core {core_id}") from e

        total_period += max(ht0.total_period, ht1.total_period)
        total_idle_period += min(ht0.total_idle_period, ht1.total_idle_period)
    return _usage_percent(total_period, total_idle_period)
