"""Shared fixtures: fake procfs files and cgroup v1/v2 trees under tmp_path."""

from __future__ import annotations

from pathlib import Path

import pytest

V2_CPU_STAT = """usage_usec 171462
user_usec 53792
system_usec 117670
nr_periods 0
nr_throttled 0
throttled_usec 0
"""

V1_CPUACCT_STAT = """user 14934
system 98
"""

V1_CPUACCT_USAGE = "152657213021\n"

V1_MEMORY_STAT = """cache 60342272
rss 6537216
rss_huge 0
shmem 0
mapped_file 32845824
dirty 0
writeback 0
"""

V2_MEMORY_STAT = """anon 6537216
file 60342272
kernel_stack 98304
shmem 1048576
file_mapped 32845824
"""

V1_BLKIO = """8:0 Read 1024
8:0 Write 2048
8:0 Sync 3072
8:0 Async 0
8:0 Total 3072
8:16 Read 100
8:16 Write 200
8:16 Sync 300
8:16 Async 0
8:16 Total 300
Total 3372
"""

V2_IO_STAT = """8:0 rbytes=1024 wbytes=2048 rios=10 wios=20 dbytes=0 dios=0
8:16 rbytes=100 wbytes=200 rios=1 wios=2 dbytes=0 dios=0
"""

PROC_STAT = """cpu  10 3 7 6 5 4 3 1 2 1
cpu0 5 1 3 3 2 2 1 0 1 0
intr 1000
ctxt 2000
"""

PROC_MEMINFO = """MemTotal:         376072 kB
MemFree:          125104 kB
MemAvailable:     340268 kB
Buffers:           22820 kB
Cached:           176324 kB
SwapCached:            0 kB
Active:           121540 kB
SwapTotal:       1101816 kB
SwapFree:        1100644 kB
Shmem:               548 kB
"""

PROC_DISKSTATS = """   8       0 sda 6431 7085 1119590 2468 40406 58628 2658512 32300 0 34672 34468 0 0 0 0
   8       1 sda1 6306 7085 1112082 2444 40406 58628 2658512 32300 0 34652 34404 0 0 0 0
"""

PROC_NET_DEV = """Inter-|   Receive                                                |  Transmit
 face |bytes    packets errs drop fifo frame compressed multicast|bytes    packets errs drop fifo colls carrier compressed
    lo:     560       8    0    0    0     0          0         0      560       8    0    0    0     0       0          0
  eth0:  254972     642    0    0    0     0          0         0    72219     524    0    0    0     0       0          0
  eth1:  354972     742    0    0    0     0          0         0    82219     624    0    0    0     0       0          0
"""


def write_files(root: Path, files: dict[str, str]) -> Path:
    """Write {relative path: content} below root, creating directories."""
    for relative, content in files.items():
        path = root / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content)
    return root


@pytest.fixture
def write_tree():
    """Helper to add or overwrite files in a fixture tree."""
    return write_files


@pytest.fixture
def v2_root(tmp_path: Path) -> Path:
    """A cgroup v2 tree with an unlimited CPU quota and no memory limit."""
    return write_files(
        tmp_path / "cgroup",
        {
            "cpu.stat": V2_CPU_STAT,
            "cpu.max": "max 100000\n",
            "memory.current": f"{64 * 1024 * 1024}\n",
            "memory.max": "max\n",
            "memory.stat": V2_MEMORY_STAT,
            "io.stat": V2_IO_STAT,
        },
    )


@pytest.fixture
def v1_root(tmp_path: Path) -> Path:
    """A cgroup v1 tree with cpuacct, cpu, memory and blkio controllers."""
    return write_files(
        tmp_path / "cgroup",
        {
            "cpuacct/cpuacct.stat": V1_CPUACCT_STAT,
            "cpuacct/cpuacct.usage": V1_CPUACCT_USAGE,
            "cpu/cpu.cfs_period_us": "100000\n",
            "cpu/cpu.cfs_quota_us": "-1\n",
            "memory/memory.limit_in_bytes": "524288000\n",
            "memory/memory.usage_in_bytes": "69148672\n",
            "memory/memory.stat": V1_MEMORY_STAT,
            "blkio/blkio.throttle.io_service_bytes": V1_BLKIO,
        },
    )


@pytest.fixture
def proc_root(tmp_path: Path) -> Path:
    """A procfs tree with stat, meminfo, diskstats, net/dev and loadavg."""
    return write_files(
        tmp_path / "proc",
        {
            "stat": PROC_STAT,
            "meminfo": PROC_MEMINFO,
            "diskstats": PROC_DISKSTATS,
            "net/dev": PROC_NET_DEV,
            "loadavg": "0.08 0.03 0.01 1/234 5678\n",
            "self/statm": "5000 1200 300 10 0 900 0\n",
            "self/cgroup": "0::/\n",
            "42/statm": "5000 250 300 10 0 900 0\n",
        },
    )
