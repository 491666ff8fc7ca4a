"""Rate derivation and percentage helpers shared by every resource domain.

One generic algorithm turns two timestamped counter snapshots into "amount
accrued per minute", whatever the record type: it walks the pydantic fields of
the stat (or of each named stat in a disk/network mapping).

Functions:
    derive_rate: Per-minute rate between two measurements
    time_adjusted: Per-minute rate of a single counter
    to_percentages: Express each field relative to a total
    in_percentages: Typed percentage records for CPU and memory stats
    cpu_count_from_quota: Fractional core count from quota/period
    normalize_by_cpu_count: Divide a stat by an allotted core count
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from fractions import Fraction
from types import MappingProxyType
from typing import Any, TypeVar

from pydantic import BaseModel

from host_probes.core.constants import NANOS_PER_MINUTE
from host_probes.core.exceptions import InvalidInputError, UnexpectedContentError
from host_probes.core.schemas import (
    CgroupCpuStat,
    CgroupCpuStatPercentages,
    CpuStat,
    CpuStatPercentages,
    Memory,
    MemoryPercentages,
)
from host_probes.monitoring.base import Measurement

logger = logging.getLogger(__name__)

StatT = TypeVar("StatT", bound=BaseModel)


def calculate_time_difference(first_time: int, second_time: int) -> int:
    """Length of the window between two monotonic timestamps in nanoseconds.

    Raises:
        InvalidInputError: If the second timestamp is not after the first
    """
    if second_time <= first_time:
        raise InvalidInputError(
            f"time of next measurement ({second_time}) was not after "
            f"time of previous measurement ({first_time})"
        )
    return second_time - first_time


def time_adjusted(field_name: str, next_value: int, prev_value: int, time_difference: int) -> int:
    """Scale the growth of one counter to a 60 second window.

    The delta is multiplied by the minute length before dividing by the window,
    so no precision is lost before scaling; the result is truncated toward zero.

    Raises:
        UnexpectedContentError: If the counter went down (reset or wraparound)
    """
    if next_value < prev_value:
        raise UnexpectedContentError(
            f"{field_name} has a lower value ({next_value}) than in the "
            f"previous measurement ({prev_value})"
        )
    return (next_value - prev_value) * NANOS_PER_MINUTE // time_difference


def _stat_per_minute(prev: StatT, nxt: BaseModel, time_difference: int, label: str = "") -> StatT:
    if type(nxt) is not type(prev):
        raise UnexpectedContentError(
            f"{label or 'stat'} changed type between measurements: "
            f"{type(prev).__name__} -> {type(nxt).__name__}"
        )

    values: dict[str, Any] = {}
    for field_name in type(prev).model_fields:
        prev_value = getattr(prev, field_name)
        next_value = getattr(nxt, field_name)
        # Optional counters a backend could not report stay unknown.
        if prev_value is None or next_value is None:
            values[field_name] = None
            continue
        qualified = f"{label}.{field_name}" if label else field_name
        values[field_name] = time_adjusted(qualified, next_value, prev_value, time_difference)

    return type(prev).model_validate(values)


def derive_rate(prev: Measurement, next_measurement: Measurement) -> Any:
    """Calculate per-minute values from this measurement and a later one.

    It is advisable to take the next measurement roughly a minute after the
    previous one for the most reliable result.

    Args:
        prev: Earlier measurement
        next_measurement: Later measurement of the same domain

    Returns:
        A record of the same type as the measured stat (or a mapping of the same
        names, read-only, for disk/network measurements) holding amounts per
        60 seconds

    Raises:
        InvalidInputError: If timestamps are not increasing or the two
            measurements hold different kinds of stat
        UnexpectedContentError: If a counter decreased or a device/interface
            present before is missing from the next measurement
    """
    time_difference = calculate_time_difference(prev.timestamp, next_measurement.timestamp)

    if isinstance(prev.stat, Mapping):
        if not isinstance(next_measurement.stat, Mapping):
            raise InvalidInputError("Cannot compare a collection measurement with a single stat")
        rates: dict[str, BaseModel] = {}
        for name, stat in prev.stat.items():
            if name not in next_measurement.stat:
                raise UnexpectedContentError(f"{name} is not present in the next measurement")
            rates[name] = _stat_per_minute(stat, next_measurement.stat[name], time_difference, name)
        return MappingProxyType(rates)

    if isinstance(next_measurement.stat, Mapping) or type(prev.stat) is not type(
        next_measurement.stat
    ):
        raise InvalidInputError(
            f"Cannot compare {type(prev.stat).__name__} with "
            f"{type(next_measurement.stat).__name__}"
        )
    return _stat_per_minute(prev.stat, next_measurement.stat, time_difference)


def percentage_of(value: int, total: int) -> float:
    """Percentage of value in total; a zero total yields 0.0."""
    if total == 0:
        return 0.0
    return value / total * 100.0


def to_percentages(stat: BaseModel, total: str | int) -> dict[str, float | None]:
    """Express every field of a stat relative to a total.

    Args:
        stat: Counter record, normally a per-minute rate
        total: Name of the stat field holding the total (excluded from the
            output), or an explicit denominator (every field included)

    Returns:
        Mapping of field name to percentage; unknown (None) fields stay None
    """
    if isinstance(total, str):
        denominator = getattr(stat, total)
        if denominator is None:
            raise UnexpectedContentError(f"{total} is unknown, cannot derive percentages")
        skip = {total}
    else:
        denominator = total
        skip = set()

    result: dict[str, float | None] = {}
    for field_name in type(stat).model_fields:
        if field_name in skip:
            continue
        value = getattr(stat, field_name)
        result[field_name] = None if value is None else percentage_of(value, denominator)
    return result


def _memory_percentages(memory: Memory) -> MemoryPercentages:
    def share(value: int | None, basis: int | None) -> float | None:
        if value is None or basis is None:
            return None
        return percentage_of(value, basis)

    return MemoryPercentages(
        used=share(memory.used, memory.total),
        free=share(memory.free, memory.total),
        buffers=share(memory.buffers, memory.total),
        cached=share(memory.cached, memory.total),
        shmem=share(memory.shmem, memory.total),
        swap_used=share(memory.swap_used, memory.swap_total),
        swap_free=share(memory.swap_free, memory.swap_total),
    )


def in_percentages(
    stat: CpuStat | CgroupCpuStat | Memory,
) -> CpuStatPercentages | CgroupCpuStatPercentages | MemoryPercentages:
    """Calculate the weight of the various components in percentages.

    - CpuStat: relative to its own `total`
    - CgroupCpuStat: relative to one minute of one core (60s in nanoseconds);
      only meaningful on a per-minute rate
    - Memory: relative to `total`, swap fields relative to `swap_total`
    """
    if isinstance(stat, CpuStat):
        return CpuStatPercentages.model_validate(to_percentages(stat, "total"))
    if isinstance(stat, CgroupCpuStat):
        return CgroupCpuStatPercentages.model_validate(to_percentages(stat, NANOS_PER_MINUTE))
    if isinstance(stat, Memory):
        return _memory_percentages(stat)
    raise InvalidInputError(f"No percentage breakdown defined for {type(stat).__name__}")


def cpu_count_from_quota(quota: int, period: int) -> Fraction:
    """Number of (possibly fractional) cores a quota/period pair allows.

    Raises:
        UnexpectedContentError: If the period is zero
    """
    if period == 0:
        raise UnexpectedContentError("CPU period is zero, cannot derive CPU count")
    return Fraction(quota, period)


def _round_half_up(value: Fraction) -> int:
    return int((value * 2 + 1) // 2)


def normalize_by_cpu_count(stat: StatT, cpu_count: float | Fraction | None) -> StatT:
    """Divide every counter by the number of cores allotted to the cgroup.

    Converts usage across N allotted cores into a single-core equivalent,
    rounding to the nearest integer (halves away from zero). A missing, zero or
    negative count leaves the stat unchanged.
    """
    if cpu_count is None or cpu_count <= 0:
        return stat

    divisor = Fraction(cpu_count)
    values: dict[str, Any] = {}
    for field_name in type(stat).model_fields:
        value = getattr(stat, field_name)
        values[field_name] = None if value is None else _round_half_up(Fraction(value) / divisor)

    logger.debug(f"Normalized {type(stat).__name__} by CPU count {float(divisor)}")
    return type(stat).model_validate(values)
