"""Core module - configuration, errors and schemas."""

from __future__ import annotations

from host_probes.core.config import ProbeConfig, load_config
from host_probes.core.constants import NANOS_PER_MINUTE
from host_probes.core.exceptions import (
    InvalidInputError,
    ProbeError,
    ProbeIOError,
    UnexpectedContentError,
)
from host_probes.core.schemas import (
    CgroupCpuStat,
    CgroupCpuStatPercentages,
    CgroupVersion,
    CpuStat,
    CpuStatPercentages,
    DiskInodeUsage,
    DiskStat,
    DiskUsage,
    LoadAverage,
    Memory,
    MemoryPercentages,
    NetworkTraffic,
    ProcDiskStat,
    ResourceDomain,
    SysDiskStat,
)

__all__ = [
    "NANOS_PER_MINUTE",
    "CgroupCpuStat",
    "CgroupCpuStatPercentages",
    "CgroupVersion",
    "CpuStat",
    "CpuStatPercentages",
    "DiskInodeUsage",
    "DiskStat",
    "DiskUsage",
    "InvalidInputError",
    "load_config",
    "LoadAverage",
    "Memory",
    "MemoryPercentages",
    "NetworkTraffic",
    "ProbeConfig",
    "ProbeError",
    "ProbeIOError",
    "ProcDiskStat",
    "ResourceDomain",
    "SysDiskStat",
    "UnexpectedContentError",
]
