from .averager import RollingAverager
from .channel import SampleChannel
from .estimators import adjusted_usage, naive_usage
from .period import compute_period, pair_periods, saturating_sub
from .sampling_loop import LoopState, SamplingLoop

__all__ = [
    "RollingAverager",
    "SampleChannel",
    "adjusted_usage",
    "naive_usage",
    "compute_period",
    "pair_periods",
    "saturating_sub",
    "LoopState",
    "SamplingLoop",
]
