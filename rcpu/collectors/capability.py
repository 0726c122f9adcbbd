from __future__ import annotations

import logging
from pathlib import Path

import psutil
from pydantic import BaseModel

from rcpu.errors import ConfigurationError

logger = logging.getLogger(__name__)

SMT_ACTIVE_PATH = "devices/system/cpu/smt/active"


class CpuCapabilities(BaseModel):
    """Result of the startup capability gate."""

    model_name: str
    smt_active: bool
    logical_cpus: int | None = None
    physical_cores: int | None = None


def get_cpu_model(proc_root: str | Path = "/proc") -> str:
    cpuinfo_path = Path(proc_root) / "cpuinfo"
    try:
        text = cpuinfo_path.read_text()
    except OSError as e:
        raise ConfigurationError(f"failed to read {cpuinfo_path}: {e}") from e

    for line in text.splitlines():
        if "model name" in line or "Model Name" in line:
            _, sep, value = line.partition(":")
            if sep:
                return value.strip()

    raise ConfigurationError(f"failed to find model name in {cpuinfo_path}")


def is_smt_enabled(sys_root: str | Path = "/sys") -> bool | None:
    """Read the kernel SMT switch. ``None`` when the kernel does not expose it."""
    smt_path = Path(sys_root) / SMT_ACTIVE_PATH
    try:
        return smt_path.read_text().strip() == "1"
    except FileNotFoundError:
        return None
    except OSError as e:
        raise ConfigurationError(f"failed to read {smt_path}: {e}") from e


def check_capabilities(
    proc_root: str | Path = "/proc",
    sys_root: str | Path = "/sys",
    vendors: list[str] | None = None,
) -> CpuCapabilities:
    """Fail with ConfigurationError unless the CPU is supported and SMT is on."""
    vendors = vendors if vendors is not None else ["Intel"]

    model = get_cpu_model(proc_root)
    if vendors and not any(v in model for v in vendors):
        raise ConfigurationError(f"unsupported CPU model: {model}")

    logical = psutil.cpu_count(logical=True)
    physical = psutil.cpu_count(logical=False)

    smt = is_smt_enabled(sys_root)
    if smt is None:
        logger.info("SMT switch not exposed, comparing logical and physical CPU counts")
        smt = bool(logical and physical and logical == 2 * physical)
    if not smt:
        raise ConfigurationError("SMT is not enabled")

    logger.info("CPU model: %s", model)
    logger.info("SMT is enabled (%s logical CPUs, %s cores)", logical, physical)
    return CpuCapabilities(
        model_name=model,
        smt_active=True,
        logical_cpus=logical,
        physical_cores=physical,
    )
