"""Pydantic schemas for host-probes.

This module defines the counter records produced by every reader (procfs,
cgroup v1, cgroup v2, df) and the percentage records derived from them.
Counter records are frozen: a stat is captured once and never mutated.
"""

from __future__ import annotations

from enum import Enum
from typing import Union

from pydantic import BaseModel, Field

from host_probes.core.constants import SECTOR_SIZE


class ResourceDomain(str, Enum):
    """Resource domains that can be read from a container's cgroup."""

    CPU = "cpu"
    MEMORY = "memory"
    DISK = "disk"


class CgroupVersion(str, Enum):
    """On-disk cgroup interface generation."""

    V1 = "v1"  # Per-controller hierarchies (cpuacct/, memory/, blkio/)
    V2 = "v2"  # Unified hierarchy (cpu.stat, memory.current, io.stat)


# =============================================================================
# COUNTER RECORDS (rate derivation inputs)
# =============================================================================


class CpuStat(BaseModel):
    """Host CPU time from /proc/stat, in USER_HZ ticks.

    `user` and `nice` exclude guest time, which the kernel already counts in
    them; `total` is the sum of every category without double counting.
    """

    total: int = Field(default=0, ge=0)
    user: int = Field(default=0, ge=0)
    nice: int = Field(default=0, ge=0)
    system: int = Field(default=0, ge=0)
    idle: int = Field(default=0, ge=0)
    iowait: int = Field(default=0, ge=0)
    irq: int = Field(default=0, ge=0)
    softirq: int = Field(default=0, ge=0)
    steal: int = Field(default=0, ge=0)
    guest: int = Field(default=0, ge=0)
    guestnice: int = Field(default=0, ge=0)

    model_config = {"frozen": True}


class CgroupCpuStat(BaseModel):
    """Container CPU time in nanoseconds, normalized to one core."""

    total_usage: int = Field(default=0, ge=0, description="Cumulative usage (ns)")
    user: int = Field(default=0, ge=0, description="User time (ns)")
    system: int = Field(default=0, ge=0, description="System time (ns)")

    model_config = {"frozen": True}


class Memory(BaseModel):
    """Memory status in kilobytes.

    Fields a backend cannot report are None rather than zero, so "unknown" is
    never confused with "measured as zero".
    """

    total: int | None = Field(default=None, ge=0)
    free: int | None = Field(default=None, ge=0)
    used: int = Field(default=0, ge=0)
    buffers: int | None = Field(default=None, ge=0)
    cached: int | None = Field(default=None, ge=0)
    shmem: int | None = Field(default=None, ge=0)
    swap_total: int | None = Field(default=None, ge=0)
    swap_free: int | None = Field(default=None, ge=0)
    swap_used: int | None = Field(default=None, ge=0)

    model_config = {"frozen": True}


class ProcDiskStat(BaseModel):
    """Per-device counters from /proc/diskstats."""

    reads_completed_successfully: int = Field(default=0, ge=0)
    reads_merged: int = Field(default=0, ge=0)
    sectors_read: int = Field(default=0, ge=0)
    time_spent_reading_ms: int = Field(default=0, ge=0)
    writes_completed: int = Field(default=0, ge=0)
    writes_merged: int = Field(default=0, ge=0)
    sectors_written: int = Field(default=0, ge=0)
    time_spent_writing_ms: int = Field(default=0, ge=0)
    ios_currently_in_progress: int = Field(default=0, ge=0)
    time_spent_doing_ios_ms: int = Field(default=0, ge=0)
    weighted_time_spent_doing_ios_ms: int = Field(default=0, ge=0)

    model_config = {"frozen": True}

    @property
    def bytes_read(self) -> int:
        return self.sectors_read * SECTOR_SIZE

    @property
    def bytes_written(self) -> int:
        return self.sectors_written * SECTOR_SIZE


class SysDiskStat(BaseModel):
    """Container block I/O totals from cgroup blkio / io accounting (bytes)."""

    read: int = Field(default=0, ge=0)
    written: int = Field(default=0, ge=0)

    model_config = {"frozen": True}

    @property
    def bytes_read(self) -> int:
        return self.read

    @property
    def bytes_written(self) -> int:
        return self.written


DiskStat = Union[ProcDiskStat, SysDiskStat]


class NetworkTraffic(BaseModel):
    """Per-interface traffic from /proc/net/dev (bytes)."""

    received: int = Field(default=0, ge=0)
    transmitted: int = Field(default=0, ge=0)

    model_config = {"frozen": True}


# =============================================================================
# PERCENTAGE RECORDS (display only, never fed back into rate derivation)
# =============================================================================


class CpuStatPercentages(BaseModel):
    """Weight of each CPU category relative to total CPU time."""

    user: float = 0.0
    nice: float = 0.0
    system: float = 0.0
    idle: float = 0.0
    iowait: float = 0.0
    irq: float = 0.0
    softirq: float = 0.0
    steal: float = 0.0
    guest: float = 0.0
    guestnice: float = 0.0


class CgroupCpuStatPercentages(BaseModel):
    """Container CPU time as a percentage of one minute on one core."""

    total_usage: float = 0.0
    user: float = 0.0
    system: float = 0.0


class MemoryPercentages(BaseModel):
    """Memory fields relative to total memory, swap fields relative to swap total.

    A field is None when either the value or its basis is unknown.
    """

    used: float | None = None
    free: float | None = None
    buffers: float | None = None
    cached: float | None = None
    shmem: float | None = None
    swap_used: float | None = None
    swap_free: float | None = None


# =============================================================================
# SNAPSHOT RECORDS (gauges)
# =============================================================================


class DiskUsage(BaseModel):
    """One mounted filesystem as reported by `df -l` (1K blocks)."""

    filesystem: str | None = Field(default=None, description="None when df reports 'none'")
    one_k_blocks: int = Field(ge=0)
    one_k_blocks_used: int = Field(ge=0)
    one_k_blocks_free: int = Field(ge=0)
    used_percentage: int = Field(ge=0, le=100)
    mountpoint: str


class DiskInodeUsage(BaseModel):
    """One mounted filesystem as reported by `df -i`."""

    filesystem: str | None = None
    inodes: int = Field(ge=0)
    iused: int = Field(ge=0)
    ifree: int = Field(ge=0)
    iused_percentage: int = Field(ge=0, le=100)
    mountpoint: str


class LoadAverage(BaseModel):
    """System load averages over 1, 5 and 15 minutes."""

    one: float = Field(ge=0)
    five: float = Field(ge=0)
    fifteen: float = Field(ge=0)
