"""Monitoring module - Counter readers and rate derivation.

Readers:
- procfs: /proc/stat, /proc/meminfo, /proc/diskstats, /proc/net/dev
- cgroups: container CPU, memory and block I/O (cgroup v1 or v2)
- disk_usage: df -l / df -i
- process: process RSS and load average

Shared utilities:
- rates: per-minute rate derivation, percentages, CPU-count normalization
"""

from __future__ import annotations

from host_probes.monitoring.base import Measurement
from host_probes.monitoring.cgroup_v1 import read_v1_blkio, read_v1_cpu, read_v1_memory
from host_probes.monitoring.cgroup_v2 import read_v2_cpu, read_v2_io, read_v2_memory
from host_probes.monitoring.cgroups import detect_cgroup_version, in_container, read_container_stat
from host_probes.monitoring.probe import SystemProbe
from host_probes.monitoring.rates import (
    derive_rate,
    in_percentages,
    normalize_by_cpu_count,
    to_percentages,
)

__all__ = [
    "Measurement",
    "SystemProbe",
    "derive_rate",
    "detect_cgroup_version",
    "in_container",
    "in_percentages",
    "normalize_by_cpu_count",
    "read_container_stat",
    "read_v1_blkio",
    "read_v1_cpu",
    "read_v1_memory",
    "read_v2_cpu",
    "read_v2_io",
    "read_v2_memory",
    "to_percentages",
]
