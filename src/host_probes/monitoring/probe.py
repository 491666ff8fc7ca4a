"""Config-driven entry point to every reader.

SystemProbe resolves file locations from a ProbeConfig so callers never build
procfs or cgroup paths themselves. It holds no samples: keeping the previous
Measurement between sampling calls stays the caller's job.
"""

from __future__ import annotations

from host_probes.core.config import ProbeConfig
from host_probes.core.schemas import (
    CgroupVersion,
    DiskInodeUsage,
    DiskUsage,
    LoadAverage,
    ResourceDomain,
)
from host_probes.monitoring import disk_usage, process, procfs
from host_probes.monitoring.base import Measurement
from host_probes.monitoring.cgroups import detect_cgroup_version, in_container, read_container_stat


class SystemProbe:
    """Reads host and container counters from the configured roots.

    Example:
        probe = SystemProbe(load_config("probes.yaml"))
        first = probe.cpu()
        ...  # roughly a minute later
        per_minute = derive_rate(first, probe.cpu())
    """

    def __init__(self, config: ProbeConfig | None = None) -> None:
        self.config = config or ProbeConfig()

    # Host (procfs)

    def cpu(self) -> Measurement:
        return procfs.read_proc_stat(self.config.proc_root / "stat")

    def memory(self) -> Measurement:
        return procfs.read_proc_meminfo(self.config.proc_root / "meminfo")

    def disks(self) -> Measurement:
        return procfs.read_proc_diskstats(self.config.proc_root / "diskstats")

    def network(self) -> Measurement:
        return procfs.read_proc_net_dev(self.config.proc_root / "net" / "dev")

    def load_average(self) -> LoadAverage:
        return process.read_load_average(self.config.proc_root / "loadavg")

    def process_rss(self, pid: int | None = None) -> int:
        """Resident set size in kilobytes of a process (this one by default)."""
        if pid is None:
            return process.read_process_rss(self.config.proc_root / "self" / "statm")
        return process.read_process_rss_of(pid, self.config.proc_root)

    def disk_usage(self) -> list[DiskUsage]:
        return disk_usage.read_disk_usage()

    def disk_inode_usage(self) -> list[DiskInodeUsage]:
        return disk_usage.read_disk_inode_usage()

    # Container (cgroups)

    def in_container(self) -> bool:
        return in_container(self.config.proc_root / "self" / "cgroup")

    def cgroup_version(self, domain: ResourceDomain | str = ResourceDomain.CPU) -> CgroupVersion:
        return detect_cgroup_version(domain, self.config.cgroup_root)

    def container(self, domain: ResourceDomain | str) -> Measurement:
        """Read one container domain through the v2/v1 selector."""
        return read_container_stat(domain, self.config.cgroup_root, self.config.cpu_count)

    def container_cpu(self) -> Measurement:
        return self.container(ResourceDomain.CPU)

    def container_memory(self) -> Measurement:
        return self.container(ResourceDomain.MEMORY)

    def container_disks(self) -> Measurement:
        return self.container(ResourceDomain.DISK)
