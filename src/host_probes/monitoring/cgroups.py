"""Container stat reader that dispatches to the cgroup v1 or v2 backend.

Detection is a filesystem probe done on every call, never cached: the unified
hierarchy is checked first because hosts migrated to cgroup v2 can keep stale
v1 directories around.
"""

from __future__ import annotations

import logging
from pathlib import Path

from host_probes.core.constants import CONTAINER_CGROUP_MARKERS, DEFAULT_CGROUP_ROOT
from host_probes.core.exceptions import InvalidInputError, ProbeIOError, UnexpectedContentError
from host_probes.core.schemas import CgroupVersion, ResourceDomain
from host_probes.monitoring.base import Measurement
from host_probes.monitoring.cgroup_v1 import read_v1_blkio, read_v1_cpu, read_v1_memory
from host_probes.monitoring.cgroup_v2 import read_v2_cpu, read_v2_io, read_v2_memory

logger = logging.getLogger(__name__)

# File that only exists under the unified hierarchy, per domain
V2_MARKER_FILES = {
    ResourceDomain.CPU: "cpu.stat",
    ResourceDomain.MEMORY: "memory.current",
    ResourceDomain.DISK: "io.stat",
}

# Controller directory of the legacy hierarchy, per domain
V1_MARKER_DIRS = {
    ResourceDomain.CPU: "cpuacct",
    ResourceDomain.MEMORY: "memory",
    ResourceDomain.DISK: "blkio",
}


def _to_domain(domain: ResourceDomain | str) -> ResourceDomain:
    try:
        return ResourceDomain(domain)
    except ValueError as e:
        raise InvalidInputError(f"Unknown resource domain {domain!r}") from e


def _marker_paths(domain: ResourceDomain, cgroup_root: Path) -> tuple[Path, Path]:
    return cgroup_root / V2_MARKER_FILES[domain], cgroup_root / V1_MARKER_DIRS[domain]


def detect_cgroup_version(
    domain: ResourceDomain | str,
    cgroup_root: Path | str = DEFAULT_CGROUP_ROOT,
) -> CgroupVersion:
    """Decide which cgroup interface exposes accounting for a domain.

    Args:
        domain: Resource domain to probe
        cgroup_root: Mount point of the cgroup filesystem

    Returns:
        CgroupVersion.V2 if the unified marker file exists, else V1 if the
        controller directory exists

    Raises:
        InvalidInputError: If the domain is not cpu, memory or disk
        UnexpectedContentError: If neither is present
    """
    v2_marker, v1_marker = _marker_paths(_to_domain(domain), Path(cgroup_root))

    if v2_marker.exists():
        logger.debug(f"Found cgroup v2 marker {v2_marker}")
        return CgroupVersion.V2

    if v1_marker.is_dir():
        logger.debug(f"Found cgroup v1 controller directory {v1_marker}")
        return CgroupVersion.V1

    raise UnexpectedContentError(f"Directory `{v1_marker}` and file `{v2_marker}` not found")


def read_container_stat(
    domain: ResourceDomain | str,
    cgroup_root: Path | str = DEFAULT_CGROUP_ROOT,
    cpu_count: float | None = None,
) -> Measurement:
    """Read the current stats of the container for one domain.

    Args:
        domain: cpu, memory or disk
        cgroup_root: Mount point of the cgroup filesystem
        cpu_count: Explicit allotted core count (CPU domain only); when None the
            count is derived from the cgroup's quota and period

    Returns:
        Measurement from the matching backend: CgroupCpuStat, Memory, or
        {"container": SysDiskStat}

    Raises:
        InvalidInputError: If the domain is not cpu, memory or disk
        UnexpectedContentError: If the host exposes no cgroup accounting for the
            domain, or the files are malformed
        ProbeIOError: If a required file cannot be read
    """
    domain = _to_domain(domain)
    root = Path(cgroup_root)
    version = detect_cgroup_version(domain, root)
    logger.debug(f"Reading container {domain.value} stats through cgroup {version.value}")

    if version is CgroupVersion.V2:
        if domain is ResourceDomain.CPU:
            return read_v2_cpu(root / "cpu.stat", root / "cpu.max", cpu_count)
        if domain is ResourceDomain.MEMORY:
            return read_v2_memory(root)
        return read_v2_io(root / "io.stat")

    if domain is ResourceDomain.CPU:
        return read_v1_cpu(
            root / "cpuacct",
            root / "cpu" / "cpu.cfs_period_us",
            root / "cpu" / "cpu.cfs_quota_us",
            cpu_count,
        )
    if domain is ResourceDomain.MEMORY:
        return read_v1_memory(root / "memory")
    return read_v1_blkio(root / "blkio")


def in_container(cgroup_file: Path | str = "/proc/self/cgroup") -> bool:
    """Check whether this process runs inside a Docker, LXC or Kubernetes container.

    Args:
        cgroup_file: The process's cgroup membership file

    Returns:
        True if any membership path points at a container runtime; False when
        the file does not exist (non-Linux hosts)
    """
    path = Path(cgroup_file)
    try:
        content = path.read_text()
    except FileNotFoundError:
        return False
    except OSError as e:
        raise ProbeIOError(path, e) from e

    return any(marker in content for marker in CONTAINER_CGROUP_MARKERS)
