"""cgroup v1 backend.

Reads the per-controller hierarchies of the legacy cgroup interface:

- cpuacct/cpuacct.stat: user, system (USER_HZ ticks)
- cpuacct/cpuacct.usage: cumulative CPU usage (ns)
- cpu/cpu.cfs_quota_us, cpu/cpu.cfs_period_us: CPU quota (-1 = unlimited)
- memory/memory.limit_in_bytes, memory.usage_in_bytes, memory.stat
- memory/memory.memsw.*: memory + swap accounting (only with swapaccount=1)
- blkio/blkio.throttle.io_service_bytes: bytes per device and operation
"""

from __future__ import annotations

import logging
import time
from fractions import Fraction
from pathlib import Path
from types import MappingProxyType

from host_probes.core.constants import (
    CENTISECONDS_TO_NANOS,
    CGROUP_V1_UNLIMITED_MEMORY,
    CGROUP_V1_UNLIMITED_QUOTA,
)
from host_probes.core.exceptions import UnexpectedContentError
from host_probes.core.schemas import CgroupCpuStat, Memory, SysDiskStat
from host_probes.monitoring.base import (
    Measurement,
    parse_key_values,
    parse_u64,
    read_first_line,
    read_lines,
    read_optional_u64,
    read_u64,
)
from host_probes.monitoring.rates import cpu_count_from_quota, normalize_by_cpu_count

logger = logging.getLogger(__name__)

CPUACCT_STAT_FIELDS = ("user", "system")


def _read_quota(path: Path) -> int:
    """Read cpu.cfs_quota_us, which is signed (-1 means no quota)."""
    line = read_first_line(path).strip()
    try:
        return int(line)
    except ValueError:
        raise UnexpectedContentError(f"Could not parse CPU quota {line!r} in {path}") from None


def read_v1_cpu_count(period_file: Path, quota_file: Path) -> Fraction | None:
    """Derive the allotted core count from the CFS quota and period.

    Returns:
        quota / period, or None when either file is absent or no quota is set
    """
    if not (period_file.exists() and quota_file.exists()):
        logger.debug(f"No CFS quota files at {period_file.parent}, not normalizing")
        return None

    quota = _read_quota(quota_file)
    if quota == CGROUP_V1_UNLIMITED_QUOTA:
        logger.debug("CFS quota is unlimited, not normalizing")
        return None
    if quota < 0:
        raise UnexpectedContentError(f"Unexpected negative CPU quota {quota} in {quota_file}")

    period = read_u64(period_file)
    return cpu_count_from_quota(quota, period)


def read_v1_cpu(
    usage_dir: Path,
    period_file: Path,
    quota_file: Path,
    cpu_count: float | None = None,
) -> Measurement:
    """Read container CPU usage from the cpuacct controller.

    Args:
        usage_dir: cpuacct directory holding cpuacct.stat and cpuacct.usage
        period_file: cpu.cfs_period_us
        quota_file: cpu.cfs_quota_us
        cpu_count: Explicit core count; takes precedence over quota/period

    Returns:
        Measurement holding a CgroupCpuStat in single-core nanoseconds

    Raises:
        ProbeIOError: If cpuacct.stat or cpuacct.usage cannot be read
        UnexpectedContentError: If user/system are missing or values are not numeric
    """
    effective_count = cpu_count if cpu_count is not None else read_v1_cpu_count(
        period_file, quota_file
    )

    timestamp = time.monotonic_ns()
    stat_path = usage_dir / "cpuacct.stat"
    fields = parse_key_values(
        read_lines(stat_path), CPUACCT_STAT_FIELDS, CPUACCT_STAT_FIELDS, stat_path
    )
    total_usage = read_u64(usage_dir / "cpuacct.usage")

    stat = CgroupCpuStat(
        total_usage=total_usage,
        user=fields["user"] * CENTISECONDS_TO_NANOS,
        system=fields["system"] * CENTISECONDS_TO_NANOS,
    )
    return Measurement(timestamp=timestamp, stat=normalize_by_cpu_count(stat, effective_count))


def _bytes_to_kilobytes(value: int) -> int:
    return value // 1024


def read_v1_memory(memory_dir: Path) -> Measurement:
    """Read container memory from the v1 memory controller.

    `used` excludes the page cache. Swap fields are only known when the kernel
    accounts memory+swap (memory.memsw.* present).

    Args:
        memory_dir: memory controller directory

    Returns:
        Measurement holding a Memory record in kilobytes
    """
    timestamp = time.monotonic_ns()

    limit = read_u64(memory_dir / "memory.limit_in_bytes")
    total = None if limit >= CGROUP_V1_UNLIMITED_MEMORY else _bytes_to_kilobytes(limit)

    usage = _bytes_to_kilobytes(read_u64(memory_dir / "memory.usage_in_bytes"))

    stat_path = memory_dir / "memory.stat"
    fields = parse_key_values(read_lines(stat_path), ("cache", "shmem"), ("cache",), stat_path)
    cached = _bytes_to_kilobytes(fields["cache"])
    shmem = _bytes_to_kilobytes(fields["shmem"]) if "shmem" in fields else None

    used = max(usage - cached, 0)
    free = None if total is None else max(total - used, 0)

    swap_total = None
    memsw_limit = read_optional_u64(memory_dir / "memory.memsw.limit_in_bytes")
    if memsw_limit is not None and total is not None:
        swap_total = max(_bytes_to_kilobytes(memsw_limit) - total, 0)

    swap_used = None
    memsw_usage = read_optional_u64(memory_dir / "memory.memsw.usage_in_bytes")
    if memsw_usage is not None:
        swap_used = max(_bytes_to_kilobytes(memsw_usage) - usage, 0)

    swap_free = None
    if swap_total is not None and swap_used is not None:
        swap_free = max(swap_total - swap_used, 0)

    memory = Memory(
        total=total,
        free=free,
        used=used,
        buffers=None,
        cached=cached,
        shmem=shmem,
        swap_total=swap_total,
        swap_free=swap_free,
        swap_used=swap_used,
    )
    logger.debug(f"cgroup v1 memory from {memory_dir}: {memory}")
    return Measurement(timestamp=timestamp, stat=memory)


def read_v1_blkio(blkio_dir: Path) -> Measurement:
    """Read container block I/O bytes from blkio.throttle.io_service_bytes.

    Format (per device, followed by a grand total):
        8:0 Read 1234
        8:0 Write 5678
        8:0 Sync 6912
        8:0 Async 0
        8:0 Total 6912
        Total 6912

    Read and Write rows are summed across devices.

    Returns:
        Measurement holding {"container": SysDiskStat}
    """
    timestamp = time.monotonic_ns()
    path = blkio_dir / "blkio.throttle.io_service_bytes"

    read_bytes = 0
    written_bytes = 0
    for line in read_lines(path):
        segments = line.split()
        if not segments:
            continue
        if len(segments) == 2 and segments[0] == "Total":
            continue
        if len(segments) != 3:
            raise UnexpectedContentError(f"Incorrect number of segments in {path}: {line!r}")
        operation = segments[1]
        if operation == "Read":
            read_bytes += parse_u64(segments[2])
        elif operation == "Write":
            written_bytes += parse_u64(segments[2])

    disk = SysDiskStat(read=read_bytes, written=written_bytes)
    return Measurement(timestamp=timestamp, stat=MappingProxyType({"container": disk}))
