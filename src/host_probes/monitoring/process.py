"""Process memory and system load readers.

- /proc/<pid>/statm: resident set size (pages)
- getrusage(RUSAGE_SELF): peak resident set size of this process
- /proc/loadavg: 1, 5 and 15 minute load averages
"""

from __future__ import annotations

import os
import resource
from pathlib import Path

from host_probes.core.exceptions import UnexpectedContentError
from host_probes.core.schemas import LoadAverage
from host_probes.monitoring.base import parse_u64, read_file


def read_process_rss(statm_file: Path = Path("/proc/self/statm")) -> int:
    """Current resident set size of a process in kilobytes.

    Args:
        statm_file: /proc/self/statm or /proc/<pid>/statm

    Raises:
        ProbeIOError: If the file cannot be read
        UnexpectedContentError: If the resident column is missing or not numeric
    """
    segments = read_file(statm_file).split()
    if len(segments) < 2:
        raise UnexpectedContentError(f"Incorrect number of segments in {statm_file}")

    pages = parse_u64(segments[1])
    return pages * (os.sysconf("SC_PAGE_SIZE") // 1024)


def read_process_rss_of(pid: int, proc_root: Path = Path("/proc")) -> int:
    """Current resident set size of the process with the given pid in kilobytes."""
    return read_process_rss(proc_root / str(pid) / "statm")


def max_rss() -> int:
    """Peak resident set size of this process in kilobytes."""
    # Linux reports ru_maxrss in kilobytes already
    return resource.getrusage(resource.RUSAGE_SELF).ru_maxrss


def read_load_average(loadavg_file: Path = Path("/proc/loadavg")) -> LoadAverage:
    """Read system load averages.

    Format: "0.08 0.03 0.01 1/234 5678"
    """
    segments = read_file(loadavg_file).split()
    if len(segments) < 3:
        raise UnexpectedContentError(f"Incorrect number of segments in {loadavg_file}")

    try:
        one, five, fifteen = (float(segment) for segment in segments[:3])
    except ValueError:
        raise UnexpectedContentError(
            f"Could not parse load averages {segments[:3]} in {loadavg_file}"
        ) from None

    return LoadAverage(one=one, five=five, fifteen=fifteen)
