from .snapshot import CounterSnapshot
from .period import Period
from .topology import CoreTopology, CpuInfo
from .sample import RollingUtilization, UtilizationSample

__all__ = [
    "CounterSnapshot",
    "Period",
    "CoreTopology",
    "CpuInfo",
    "RollingUtilization",
    "UtilizationSample",
]
