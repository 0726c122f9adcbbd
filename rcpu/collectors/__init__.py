from .capability import CpuCapabilities, check_capabilities
from .counter_sampler import CounterSampler, parse_stat
from .topology import load_topology, load_topology_file, parse_lscpu

__all__ = [
    "CpuCapabilities",
    "check_capabilities",
    "CounterSampler",
    "parse_stat",
    "load_topology",
    "load_topology_file",
    "parse_lscpu",
]
