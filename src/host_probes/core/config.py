"""Configuration loading utilities.

Supports YAML and JSON configuration files with schema validation.
"""

from __future__ import annotations

import json
from pathlib import Path

import yaml
from pydantic import BaseModel, Field, field_validator

from host_probes.core.constants import DEFAULT_CGROUP_ROOT, DEFAULT_PROC_ROOT


class ProbeConfig(BaseModel):
    """Where probes read from and how they log.

    Attributes:
        proc_root: Mount point of procfs
        cgroup_root: Mount point of the cgroup filesystem
        cpu_count: Explicit number of cores allotted to the container. When set it
            takes precedence over the quota/period read from the cgroup.
        log_level: Logging level name
        json_logs: Emit structured JSON logs instead of rich console output
    """

    proc_root: Path = Field(default=Path(DEFAULT_PROC_ROOT))
    cgroup_root: Path = Field(default=Path(DEFAULT_CGROUP_ROOT))
    cpu_count: float | None = Field(default=None, gt=0, description="Allotted CPU cores")
    log_level: str = Field(default="INFO")
    json_logs: bool = Field(default=False)

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Normalize and check the level name."""
        level = v.upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"Unknown log level: {v}")
        return level


def load_config(path: Path | str) -> ProbeConfig:
    """Load and validate a probe configuration file.

    Args:
        path: Path to YAML or JSON configuration file

    Returns:
        Validated ProbeConfig object

    Raises:
        FileNotFoundError: If config file doesn't exist
        ValueError: If file format is unsupported
        pydantic.ValidationError: If config is invalid
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Configuration file not found: {path}")

    suffix = path.suffix.lower()
    with open(path, encoding="utf-8") as f:
        if suffix in (".yaml", ".yml"):
            data = yaml.safe_load(f)
        elif suffix == ".json":
            data = json.load(f)
        else:
            raise ValueError(f"Unsupported config format: {suffix}. Use .yaml, .yml, or .json")

    return ProbeConfig.model_validate(data or {})
