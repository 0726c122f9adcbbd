from __future__ import annotations

import logging
import shutil
import subprocess
from pathlib import Path

import yaml

from rcpu.errors import ConfigurationError
from rcpu.models import CoreTopology, CpuInfo

logger = logging.getLogger(__name__)

LSCPU_COLUMNS = "CPU,NODE,SOCKET,CORE"


def _sort_key(info: CpuInfo) -> tuple[int, int, int, int]:
    return (info.node_id, info.socket_id, info.core_id, info.cpu_id)


def _parse_id(value: str) -> int:
    # lscpu prints "-" for a NODE/SOCKET it cannot resolve
    return 0 if value == "-" else int(value)


def parse_lscpu(text: str) -> list[CpuInfo]:
    """Parse ``lscpu -e=CPU,NODE,SOCKET,CORE`` output.

    Example::

        CPU NODE SOCKET CORE
        0   0    0      0
        1   0    0      1
    """
    infos: list[CpuInfo] = []
    for line in text.splitlines():
        items = line.split()
        if len(items) < 4:
            continue
        try:
            info = CpuInfo(
                cpu_id=int(items[0]),
                node_id=_parse_id(items[1]),
                socket_id=_parse_id(items[2]),
                core_id=int(items[3]),
            )
        except ValueError:
            continue
        infos.append(info)

    infos.sort(key=_sort_key)
    return infos


def run_lscpu(timeout: float = 5.0) -> str:
    executable = shutil.which("lscpu")
    if executable is None:
        raise ConfigurationError("failed to find lscpu")
    try:
        result = subprocess.run(
            [executable, f"-e={LSCPU_COLUMNS}"],
            capture_output=True,
            text=True,
            timeout=timeout,
            check=True,
        )
    except (OSError, subprocess.SubprocessError) as e:
        raise ConfigurationError(f"failed to run lscpu: {e}") from e
    return result.stdout


def load_topology_file(path: str | Path) -> list[CpuInfo]:
    """Load CPU placement from a YAML file.

    The file holds a ``cpus`` list of ``{cpu, core, socket, node}`` mappings;
    ``socket`` and ``node`` default to 0.
    """
    path = Path(path)
    try:
        raw = yaml.safe_load(path.read_text())
    except (OSError, yaml.YAMLError) as e:
        raise ConfigurationError(f"failed to load topology file {path}: {e}") from e

    entries = raw.get("cpus", []) if isinstance(raw, dict) else raw
    if not isinstance(entries, list):
        raise ConfigurationError(f"topology file {path} has no cpus list")

    infos: list[CpuInfo] = []
    for entry in entries:
        try:
            infos.append(
                CpuInfo(
                    cpu_id=entry["cpu"],
                    core_id=entry["core"],
                    socket_id=entry.get("socket", 0),
                    node_id=entry.get("node", 0),
                )
            )
        except (KeyError, TypeError, ValueError) as e:
            raise ConfigurationError(f"invalid cpu entry {entry!r} in {path}") from e

    infos.sort(key=_sort_key)
    return infos


def load_topology(topology_file: str | Path | None = None, lscpu_timeout: float = 5.0) -> CoreTopology:
    """Discover CPU placement and validate it as a 2-way SMT topology."""
    if topology_file:
        infos = load_topology_file(topology_file)
        source = str(topology_file)
    else:
        infos = parse_lscpu(run_lscpu(timeout=lscpu_timeout))
        source = "lscpu"

    if not infos:
        raise ConfigurationError(f"failed to get CPU infos from {source}")

    topology = CoreTopology.from_cpu_infos(infos)
    logger.info(
        "Topology loaded from %s: %d logical CPUs on %d cores",
        source,
        len(topology.cpu_to_core),
        topology.core_count,
    )
    for info in topology.cpus:
        logger.debug(
            "  CPU %d, Core %d, Socket %d, Node %d",
            info.cpu_id,
            info.core_id,
            info.socket_id,
            info.node_id,
        )
    return topology
