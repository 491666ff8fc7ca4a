"""Tests for the SystemProbe facade."""

from pathlib import Path
from unittest.mock import patch

import pytest

from host_probes.core.config import ProbeConfig
from host_probes.core.exceptions import InvalidInputError, UnexpectedContentError
from host_probes.core.schemas import CgroupCpuStat, CgroupVersion, ResourceDomain
from host_probes.monitoring.probe import SystemProbe
from host_probes.monitoring.rates import derive_rate


@pytest.fixture
def probe(proc_root: Path, v2_root: Path) -> SystemProbe:
    return SystemProbe(ProbeConfig(proc_root=proc_root, cgroup_root=v2_root))


class TestSystemProbe:
    """Tests for path resolution from ProbeConfig."""

    def test_default_config(self):
        probe = SystemProbe()
        assert probe.config.proc_root == Path("/proc")

    def test_host_readers(self, probe: SystemProbe):
        assert probe.cpu().stat.total == 39
        assert probe.memory().stat.used == 51824
        assert set(probe.disks().stat) == {"sda", "sda1"}
        assert set(probe.network().stat) == {"lo", "eth0", "eth1"}
        assert probe.load_average().one == pytest.approx(0.08)

    def test_process_rss(self, probe: SystemProbe):
        with patch("host_probes.monitoring.process.os.sysconf", return_value=4096):
            assert probe.process_rss() == 4800
            assert probe.process_rss(42) == 1000

    def test_in_container(self, probe: SystemProbe, proc_root: Path):
        assert probe.in_container() is False

        (proc_root / "self" / "cgroup").write_text("12:cpu:/docker/abc\n")
        assert probe.in_container() is True

    def test_container_readers(self, probe: SystemProbe):
        assert probe.cgroup_version() is CgroupVersion.V2
        assert probe.container_cpu().stat.total_usage == 171462000
        assert probe.container_memory().stat.used == 65536
        assert probe.container_disks().stat["container"].written == 2248

    def test_configured_cpu_count(self, proc_root: Path, v2_root: Path):
        """A configured CPU count overrides cpu.max."""
        probe = SystemProbe(ProbeConfig(proc_root=proc_root, cgroup_root=v2_root, cpu_count=2))

        assert probe.container(ResourceDomain.CPU).stat == CgroupCpuStat(
            total_usage=85731000, user=26896000, system=58835000
        )

    def test_container_rate(self, probe: SystemProbe, v2_root: Path):
        """Usage growing by one core-second gives one core-second per minute over 60s."""
        first = probe.container_cpu()
        (v2_root / "cpu.stat").write_text(
            "usage_usec 1171462\nuser_usec 1053792\nsystem_usec 117670\n"
        )
        second = probe.container_cpu()

        # Pin the window to exactly one minute
        second = type(second)(timestamp=first.timestamp + 60_000_000_000, stat=second.stat)
        rate = derive_rate(first, second)

        assert rate == CgroupCpuStat(total_usage=1_000_000_000, user=1_000_000_000, system=0)

    def test_no_cgroup(self, proc_root: Path, tmp_path: Path):
        probe = SystemProbe(ProbeConfig(proc_root=proc_root, cgroup_root=tmp_path / "none"))

        with pytest.raises(UnexpectedContentError):
            probe.container_memory()

    def test_disk_usage(self, probe: SystemProbe):
        with patch("host_probes.monitoring.disk_usage.read_disk_usage", return_value=[]) as m:
            assert probe.disk_usage() == []
        m.assert_called_once_with()

    def test_unknown_domain(self, probe: SystemProbe):
        with pytest.raises(InvalidInputError):
            probe.container("network")
