"""Shared constants for host-probes.

Centralized constants to avoid duplication and ensure consistency across modules.
"""

from __future__ import annotations

# One minute expressed in nanoseconds. Rates are scaled to this window and
# container CPU percentages use it as their denominator.
NANOS_PER_MINUTE = 60_000_000_000

# cgroup v1 cpuacct.stat reports USER_HZ ticks (100 Hz), one tick is 10ms.
CENTISECONDS_TO_NANOS = 10_000_000

# cgroup v2 cpu.stat reports microseconds.
MICROSECONDS_TO_NANOS = 1_000

# cgroup v1 reports this (page-aligned LONG_MAX) when no memory limit is set.
CGROUP_V1_UNLIMITED_MEMORY = 9_223_372_036_854_771_712

# cgroup v1 cpu.cfs_quota_us value meaning "no quota".
CGROUP_V1_UNLIMITED_QUOTA = -1

# cgroup v2 cpu.max / memory.max token meaning "no limit".
CGROUP_V2_UNLIMITED = "max"

# /proc/diskstats reports sectors of 512 bytes regardless of the device.
SECTOR_SIZE = 512

# Default mount points, overridable through ProbeConfig.
DEFAULT_PROC_ROOT = "/proc"
DEFAULT_CGROUP_ROOT = "/sys/fs/cgroup"

# Substrings of /proc/self/cgroup that indicate a containerized process.
CONTAINER_CGROUP_MARKERS = ("/docker", "/lxc", "/kubepods")
