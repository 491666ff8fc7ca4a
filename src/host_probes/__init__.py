"""Host and container resource probes."""

from __future__ import annotations

from host_probes.core.config import ProbeConfig, load_config
from host_probes.core.exceptions import (
    InvalidInputError,
    ProbeError,
    ProbeIOError,
    UnexpectedContentError,
)
from host_probes.core.schemas import ResourceDomain
from host_probes.monitoring.base import Measurement
from host_probes.monitoring.cgroups import read_container_stat
from host_probes.monitoring.probe import SystemProbe
from host_probes.monitoring.rates import derive_rate, in_percentages, to_percentages

__version__ = "0.1.0"

__all__ = [
    "InvalidInputError",
    "Measurement",
    "ProbeConfig",
    "ProbeError",
    "ProbeIOError",
    "ResourceDomain",
    "SystemProbe",
    "UnexpectedContentError",
    "derive_rate",
    "in_percentages",
    "load_config",
    "read_container_stat",
    "to_percentages",
    "__version__",
]
