from __future__ import annotations

from collections.abc import Iterable

from rcpu.errors import CpuPairingError, DataIntegrityError, TimestampOrderError
from rcpu.models import CounterSnapshot, Period

_CATEGORIES = (
    "user",
    "nice",
    "system",
    "idle",
    "iowait",
    "irq",
    "softirq",
    "steal",
    "guest",
    "guest_nice",
)


def saturating_sub(a: int, b: int) -> int:
    """``a - b``, or 0 when that would go negative (counter reset)."""
    return a - b if a >= b else 0


def compute_period(previous: CounterSnapshot, current: CounterSnapshot) -> Period:
    if previous.cpu_id != current.cpu_id:
        raise CpuPairingError(f"CPU IDs don't match: {previous.cpu_id} != {current.cpu_id}")
    if current.collected_at < previous.collected_at:
        raise TimestampOrderError(
            f"collect time is not in order for cpu {current.cpu_id}: "
            f"{previous.collected_at.isoformat()} > {current.collected_at.isoformat()}"
        )

    deltas = {
        name: saturating_sub(getattr(current, name), getattr(previous, name))
        for name in _CATEGORIES
    }
    return Period(
        cpu_id=current.cpu_id,
        start=previous.collected_at,
        end=current.collected_at,
        **deltas,
    )


def pair_periods(
    previous: Iterable[CounterSnapshot],
    current: Iterable[CounterSnapshot],
) -> tuple[dict[int, Period], list[DataIntegrityError]]:
    """Pair snapshots by CPU id and compute one period per CPU.

    A CPU that fails to pair does not stop the others; its error is returned
    alongside the periods that could be computed.
    """
    by_id = {snap.cpu_id: snap for snap in previous}
    periods: dict[int, Period] = {}
    errors: list[DataIntegrityError] = []

    for snap in current:
        before = by_id.get(snap.cpu_id)
        if before is None:
            errors.append(CpuPairingError(f"cpu {snap.cpu_id} has no previous snapshot"))
            continue
        try:
            periods[snap.cpu_id] = compute_period(before, snap)
        except DataIntegrityError as e:
            errors.append(e)

    return periods, errors
