from __future__ import annotations

from pydantic import PositiveFloat
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # --- sampling ---
    sample_interval: PositiveFloat = 1.0  # seconds between ticks
    proc_root: str = "/proc"
    sys_root: str = "/sys"

    # --- startup checks ---
    supported_vendors: list[str] = ["Intel"]
    skip_capability_check: bool = False

    # --- topology ---
    topology_file: str | None = None  # YAML file, lscpu is used when unset
    lscpu_timeout: float = 5.0

    # --- output ---
    channel_maxsize: int = 64
    table_rows: int = 20
    log_level: str = "INFO"

    model_config = {"env_file": ".env", "env_prefix": "RCPU_"}


settings = Settings()
