"""cgroup v2 backend for the unified hierarchy.

Metrics sourced:
- cpu.stat: usage_usec, user_usec, system_usec (microseconds)
- cpu.max: "<quota> <period>" or "max <period>"
- memory.current, memory.max, memory.stat (shmem)
- memory.swap.current, memory.swap.max (only with swap accounting)
- io.stat: rbytes, wbytes per device
"""

from __future__ import annotations

import logging
import time
from fractions import Fraction
from pathlib import Path
from types import MappingProxyType

from host_probes.core.constants import CGROUP_V2_UNLIMITED, MICROSECONDS_TO_NANOS
from host_probes.core.exceptions import UnexpectedContentError
from host_probes.core.schemas import CgroupCpuStat, Memory, SysDiskStat
from host_probes.monitoring.base import (
    Measurement,
    parse_key_values,
    parse_u64,
    read_first_line,
    read_lines,
    read_u64,
)
from host_probes.monitoring.rates import cpu_count_from_quota, normalize_by_cpu_count

logger = logging.getLogger(__name__)

CPU_STAT_FIELDS = ("usage_usec", "user_usec", "system_usec")


def read_v2_cpu_count(max_file: Path) -> Fraction | None:
    """Derive the allotted core count from cpu.max.

    Returns:
        quota / period, or None when the file is absent or the quota is "max"

    Raises:
        UnexpectedContentError: If the first line is not "<quota> <period>"
    """
    if not max_file.exists():
        logger.debug(f"{max_file} not present, not normalizing")
        return None

    lines = read_lines(max_file)
    if not lines:
        return None

    segments = lines[0].split()
    if len(segments) != 2:
        raise UnexpectedContentError(f"Expected '<quota> <period>' in {max_file}: {lines[0]!r}")

    quota, period = segments
    if quota == CGROUP_V2_UNLIMITED:
        logger.debug("cpu.max quota is unlimited, not normalizing")
        return None

    return cpu_count_from_quota(parse_u64(quota), parse_u64(period))


def read_v2_cpu(
    stat_file: Path,
    max_file: Path,
    cpu_count: float | None = None,
) -> Measurement:
    """Read container CPU usage from cpu.stat.

    Args:
        stat_file: cpu.stat of the cgroup
        max_file: cpu.max of the cgroup
        cpu_count: Explicit core count; takes precedence over cpu.max

    Returns:
        Measurement holding a CgroupCpuStat in single-core nanoseconds

    Raises:
        ProbeIOError: If cpu.stat cannot be read
        UnexpectedContentError: If a required field is missing or malformed
    """
    effective_count = cpu_count if cpu_count is not None else read_v2_cpu_count(max_file)

    timestamp = time.monotonic_ns()
    fields = parse_key_values(read_lines(stat_file), CPU_STAT_FIELDS, CPU_STAT_FIELDS, stat_file)

    # Scale to nanoseconds before dividing so rounding happens at ns precision.
    stat = CgroupCpuStat(
        total_usage=fields["usage_usec"] * MICROSECONDS_TO_NANOS,
        user=fields["user_usec"] * MICROSECONDS_TO_NANOS,
        system=fields["system_usec"] * MICROSECONDS_TO_NANOS,
    )
    return Measurement(timestamp=timestamp, stat=normalize_by_cpu_count(stat, effective_count))


def _read_limit(path: Path) -> int | None:
    """Read a v2 limit file; a missing file or "max" means no limit."""
    if not path.exists():
        return None
    value = read_first_line(path).strip()
    if value == CGROUP_V2_UNLIMITED:
        return None
    return parse_u64(value)


def read_v2_memory(cgroup_dir: Path) -> Measurement:
    """Read container memory from the unified hierarchy.

    Args:
        cgroup_dir: cgroup directory holding memory.* files

    Returns:
        Measurement holding a Memory record in kilobytes
    """
    timestamp = time.monotonic_ns()

    limit = _read_limit(cgroup_dir / "memory.max")
    total = None if limit is None else limit // 1024
    used = read_u64(cgroup_dir / "memory.current") // 1024

    stat_path = cgroup_dir / "memory.stat"
    fields = parse_key_values(read_lines(stat_path), ("shmem",), ("shmem",), stat_path)

    # memory.swap.max is reported on top of the memory limit
    swap_limit = _read_limit(cgroup_dir / "memory.swap.max")
    swap_total = None
    if swap_limit is not None and total is not None:
        swap_total = max(swap_limit // 1024 - total, 0)

    swap_current_path = cgroup_dir / "memory.swap.current"
    swap_used = read_u64(swap_current_path) // 1024 if swap_current_path.exists() else None

    swap_free = None
    if swap_total is not None and swap_used is not None:
        swap_free = max(swap_total - swap_used, 0)

    memory = Memory(
        total=total,
        free=None if total is None else max(total - used, 0),
        used=used,
        buffers=None,
        cached=None,
        shmem=fields["shmem"] // 1024,
        swap_total=swap_total,
        swap_free=swap_free,
        swap_used=swap_used,
    )
    logger.debug(f"cgroup v2 memory from {cgroup_dir}: {memory}")
    return Measurement(timestamp=timestamp, stat=memory)


def read_v2_io(io_stat_file: Path) -> Measurement:
    """Read container block I/O bytes from io.stat.

    Format (per device):
        8:0 rbytes=12345 wbytes=67890 rios=100 wios=50 dbytes=0 dios=0

    Bytes are summed across devices.

    Returns:
        Measurement holding {"container": SysDiskStat}
    """
    timestamp = time.monotonic_ns()

    totals = {"rbytes": 0, "wbytes": 0}
    for line in read_lines(io_stat_file):
        parts = line.split()
        if not parts:
            continue
        # First token is the device (e.g. "8:0"), the rest are key=value pairs
        for pair in parts[1:]:
            key, sep, value = pair.partition("=")
            if not sep:
                raise UnexpectedContentError(f"Malformed entry {pair!r} in {io_stat_file}")
            if key in totals:
                totals[key] += parse_u64(value)

    disk = SysDiskStat(read=totals["rbytes"], written=totals["wbytes"])
    return Measurement(timestamp=timestamp, stat=MappingProxyType({"container": disk}))
