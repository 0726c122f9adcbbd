from __future__ import annotations

from collections import defaultdict

from pydantic import BaseModel, ConfigDict, Field

from rcpu.errors import ConfigurationError


class CpuInfo(BaseModel):
    """Placement of one logical CPU as reported by the topology source."""

    model_config = ConfigDict(frozen=True)

    cpu_id: int
    core_id: int
    socket_id: int = 0
    node_id: int = 0


class CoreTopology(BaseModel):
    """Logical CPU to physical core mapping of a 2-way SMT machine.

    Build it with :meth:`from_cpu_infos`, which rejects any core that does not
    own exactly two logical CPUs.
    """

    model_config = ConfigDict(frozen=True)

    cpus: tuple[CpuInfo, ...] = ()
    cpu_to_core: dict[int, int] = Field(default_factory=dict)
    core_to_cpus: dict[int, tuple[int, int]] = Field(default_factory=dict)

    @classmethod
    def from_cpu_infos(cls, infos: list[CpuInfo]) -> CoreTopology:
        if not infos:
            raise ConfigurationError("topology is empty")

        cpu_to_core: dict[int, int] = {}
        grouped: dict[int, list[int]] = defaultdict(list)
        for info in infos:
            if info.cpu_id in cpu_to_core:
                raise ConfigurationError(f"cpu {info.cpu_id} appears more than once in topology")
            cpu_to_core[info.cpu_id] = info.core_id
            grouped[info.core_id].append(info.cpu_id)

        for core_id, cpu_ids in sorted(grouped.items()):
            if len(cpu_ids) != 2:
                raise ConfigurationError(
                    f"core {core_id} has {len(cpu_ids)} CPUs, expected 2"
                )

        return cls(
            cpus=tuple(infos),
            cpu_to_core=cpu_to_core,
            core_to_cpus={core: tuple(sorted(ids)) for core, ids in grouped.items()},
        )

    @property
    def cpu_ids(self) -> list[int]:
        return sorted(self.cpu_to_core)

    @property
    def core_count(self) -> int:
        return len(self.core_to_cpus)

    def siblings(self, cpu_id: int) -> tuple[int, int]:
        return self.core_to_cpus[self.cpu_to_core[cpu_id]]
