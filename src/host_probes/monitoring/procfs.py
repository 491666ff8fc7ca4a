"""Host-level readers for procfs counter files.

Each reader extracts raw counters from one virtual text file and returns a
Measurement that can be fed straight into derive_rate:

- /proc/stat: aggregate "cpu" line (USER_HZ ticks)
- /proc/meminfo: memory and swap (kB)
- /proc/diskstats: per-device I/O counters
- /proc/net/dev: per-interface received/transmitted bytes
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType

from host_probes.core.exceptions import UnexpectedContentError
from host_probes.core.schemas import CpuStat, Memory, NetworkTraffic, ProcDiskStat
from host_probes.monitoring.base import Measurement, parse_key_values, parse_u64, read_lines

logger = logging.getLogger(__name__)

MEMINFO_FIELDS = (
    "MemTotal:",
    "MemFree:",
    "Buffers:",
    "Cached:",
    "SwapTotal:",
    "SwapFree:",
    "Shmem:",
)
MEMINFO_REQUIRED_FIELDS = ("MemTotal:", "MemFree:")

# major, minor, name and the 11 classic counters; newer kernels append more
DISKSTATS_MIN_SEGMENTS = 14


def read_proc_stat(path: Path = Path("/proc/stat")) -> Measurement:
    """Read aggregate CPU time from the first line of /proc/stat.

    Columns: user nice system idle iowait irq softirq steal guest guest_nice.
    Older kernels stop after iowait; missing columns count as zero.

    Raises:
        ProbeIOError: If the file cannot be read
        UnexpectedContentError: If the cpu line is missing, short, or not numeric
    """
    lines = read_lines(path)
    timestamp = time.monotonic_ns()

    if not lines or not lines[0].startswith("cpu"):
        raise UnexpectedContentError(f"No aggregate cpu line in {path}")

    columns = lines[0].split()[1:]
    if len(columns) < 5:
        raise UnexpectedContentError(f"Incorrect number of stats in {path}: {len(columns)}")

    values = [parse_u64(column) for column in columns[:10]]
    values += [0] * (10 - len(values))
    user, nice, system, idle, iowait, irq, softirq, steal, guest, guestnice = values

    # Guest time is already included in user and nice
    user = max(user - guest, 0)
    nice = max(nice - guestnice, 0)
    total = user + nice + system + irq + softirq + idle + iowait + steal + guest + guestnice

    return Measurement(
        timestamp=timestamp,
        stat=CpuStat(
            total=total,
            user=user,
            nice=nice,
            system=system,
            idle=idle,
            iowait=iowait,
            irq=irq,
            softirq=softirq,
            steal=steal,
            guest=guest,
            guestnice=guestnice,
        ),
    )


def read_proc_meminfo(path: Path = Path("/proc/meminfo")) -> Measurement:
    """Read memory status of the system from /proc/meminfo.

    Free memory includes buffers and page cache, which the kernel reclaims when
    memory is needed. Fields older kernels lack (e.g. Shmem) are left None.

    Raises:
        ProbeIOError: If the file cannot be read
        UnexpectedContentError: If MemTotal or MemFree is missing or malformed
    """
    lines = read_lines(path)
    timestamp = time.monotonic_ns()
    fields = parse_key_values(lines, MEMINFO_FIELDS, MEMINFO_REQUIRED_FIELDS, path)

    total = fields["MemTotal:"]
    buffers = fields.get("Buffers:")
    cached = fields.get("Cached:")
    free = fields["MemFree:"] + (buffers or 0) + (cached or 0)

    swap_total = fields.get("SwapTotal:")
    swap_free = fields.get("SwapFree:")
    swap_used = None
    if swap_total is not None and swap_free is not None:
        swap_used = max(swap_total - swap_free, 0)

    return Measurement(
        timestamp=timestamp,
        stat=Memory(
            total=total,
            free=free,
            used=max(total - free, 0),
            buffers=buffers,
            cached=cached,
            shmem=fields.get("Shmem:"),
            swap_total=swap_total,
            swap_free=swap_free,
            swap_used=swap_used,
        ),
    )


def read_proc_diskstats(path: Path = Path("/proc/diskstats")) -> Measurement:
    """Read per-device I/O counters from /proc/diskstats.

    Returns:
        Measurement holding {device name: ProcDiskStat}

    Raises:
        ProbeIOError: If the file cannot be read
        UnexpectedContentError: If a row is short or not numeric
    """
    lines = read_lines(path)
    timestamp = time.monotonic_ns()

    stats: dict[str, ProcDiskStat] = {}
    for line in lines:
        segments = line.split()
        if not segments:
            continue
        if len(segments) < DISKSTATS_MIN_SEGMENTS:
            raise UnexpectedContentError(
                f"Incorrect number of segments in {path}: expected at least "
                f"{DISKSTATS_MIN_SEGMENTS}, got {len(segments)}"
            )
        counters = [parse_u64(segment) for segment in segments[3:DISKSTATS_MIN_SEGMENTS]]
        stats[segments[2]] = ProcDiskStat(
            reads_completed_successfully=counters[0],
            reads_merged=counters[1],
            sectors_read=counters[2],
            time_spent_reading_ms=counters[3],
            writes_completed=counters[4],
            writes_merged=counters[5],
            sectors_written=counters[6],
            time_spent_writing_ms=counters[7],
            ios_currently_in_progress=counters[8],
            time_spent_doing_ios_ms=counters[9],
            weighted_time_spent_doing_ios_ms=counters[10],
        )

    logger.debug(f"Read {len(stats)} devices from {path}")
    return Measurement(timestamp=timestamp, stat=MappingProxyType(stats))


@dataclass(frozen=True)
class Positions:
    """Column index of the bytes counters, counted after the interface name."""

    receive_bytes: int
    transmit_bytes: int


def get_positions(header_line: str) -> Positions:
    """Locate the receive and transmit `bytes` columns in the /proc/net/dev header.

    Header example:
        face |bytes    packets errs drop fifo frame compressed multicast|bytes    packets ...

    Raises:
        UnexpectedContentError: If the header does not have three groups or a
            bytes column is missing
    """
    groups = header_line.split("|")
    if len(groups) != 3:
        raise UnexpectedContentError("Incorrect number of segments in network header")

    receive_group = groups[1].split()
    transmit_group = groups[2].split()

    if "bytes" not in receive_group:
        raise UnexpectedContentError("bytes field not found for receive")
    if "bytes" not in transmit_group:
        raise UnexpectedContentError("bytes field not found for transmit")

    return Positions(
        receive_bytes=receive_group.index("bytes"),
        transmit_bytes=len(receive_group) + transmit_group.index("bytes"),
    )


def read_proc_net_dev(path: Path = Path("/proc/net/dev")) -> Measurement:
    """Read per-interface traffic from /proc/net/dev.

    Returns:
        Measurement holding {interface name: NetworkTraffic}

    Raises:
        ProbeIOError: If the file cannot be read
        UnexpectedContentError: If the header or a row is malformed
    """
    lines = read_lines(path)
    timestamp = time.monotonic_ns()

    if len(lines) < 2:
        raise UnexpectedContentError(f"Missing header lines in {path}")
    positions = get_positions(lines[1])

    interfaces: dict[str, NetworkTraffic] = {}
    for line in lines[2:]:
        if not line.strip():
            continue
        # Large counters can touch the colon ("eth0:123456"), so split on it
        name, sep, rest = line.partition(":")
        name = name.strip()
        if not sep:
            raise UnexpectedContentError(f"Interface name not found in {path}: {line!r}")
        segments = rest.split()
        if len(segments) <= positions.transmit_bytes:
            raise UnexpectedContentError(
                f"Expected at least {positions.transmit_bytes + 1} items, "
                f"had {len(segments)} for '{name}'"
            )
        interfaces[name] = NetworkTraffic(
            received=parse_u64(segments[positions.receive_bytes]),
            transmitted=parse_u64(segments[positions.transmit_bytes]),
        )

    return Measurement(timestamp=timestamp, stat=MappingProxyType(interfaces))
