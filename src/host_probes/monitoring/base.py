"""Measurement record and the file primitives every reader is built on.

All readers (procfs, cgroup v1, cgroup v2) turn a text source into a
Measurement: a monotonic timestamp plus one counter record (or a mapping of
device/interface name to counter records). Paths are always passed in, never
hard-coded here, so tests can point readers at fixture trees.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from pathlib import Path

from pydantic import BaseModel

from host_probes.core.exceptions import ProbeIOError, UnexpectedContentError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Measurement:
    """A counter snapshot taken at a certain time.

    Two measurements of the same domain, ordered by timestamp, are the only
    valid input to rate derivation. Callers keep the previous measurement
    between sampling calls; nothing here retains it.
    """

    # Monotonic clock in nanoseconds (time.monotonic_ns), immune to wall-clock
    # adjustments such as NTP steps.
    timestamp: int
    # One record for scalar domains (CPU, memory), or a read-only name -> record
    # mapping (MappingProxyType) for collection domains (disks, network interfaces).
    stat: BaseModel | Mapping[str, BaseModel]


def read_file(path: Path) -> str:
    """Read a whole text file.

    Raises:
        ProbeIOError: If the file cannot be opened or read
    """
    try:
        return path.read_text()
    except OSError as e:
        raise ProbeIOError(path, e) from e


def read_lines(path: Path) -> list[str]:
    """Read a text file as a list of lines without line endings."""
    return read_file(path).splitlines()


def read_first_line(path: Path) -> str:
    """Read the first line of a text file.

    Raises:
        ProbeIOError: If the file cannot be read
        UnexpectedContentError: If the file is empty
    """
    lines = read_lines(path)
    if not lines:
        raise UnexpectedContentError(f"{path} is empty")
    return lines[0]


def parse_u64(value: str) -> int:
    """Parse an unsigned decimal counter.

    Raises:
        UnexpectedContentError: If the value is not a plain non-negative integer
    """
    if not (value.isascii() and value.isdigit()):
        raise UnexpectedContentError(f"Could not parse {value!r} as an unsigned integer")
    return int(value)


def read_u64(path: Path) -> int:
    """Read a file holding a single unsigned integer (e.g. cpuacct.usage)."""
    return parse_u64(read_first_line(path).strip())


def parse_key_values(
    lines: Iterable[str],
    wanted: Iterable[str],
    required: Iterable[str],
    source: Path | str,
) -> dict[str, int]:
    """Collect `<key> <value>` counters from a flat stat file.

    Scans until every wanted key has been seen or the input ends. Keys that are
    not wanted are skipped so newer kernels adding fields do not break parsing.

    Args:
        lines: Lines of the stat file
        wanted: Keys to collect
        required: Subset of wanted keys that must be present
        source: File the lines came from, used in error messages

    Returns:
        Mapping of each key found to its value

    Raises:
        UnexpectedContentError: If a line is malformed, a wanted value is not
            numeric, or a required key is missing
    """
    wanted = set(wanted)
    result: dict[str, int] = {}

    for line in lines:
        segments = line.split()
        if not segments:
            continue
        if len(segments) < 2:
            raise UnexpectedContentError(f"Malformed line in {source}: {line!r}")
        key = segments[0]
        if key not in wanted:
            continue
        result[key] = parse_u64(segments[1])
        if len(result) == len(wanted):
            break

    missing = [key for key in required if key not in result]
    if missing:
        raise UnexpectedContentError(
            f"Did not encounter all expected fields in {source}: missing {', '.join(missing)}"
        )

    logger.debug(f"Parsed {source}: {result}")
    return result


def read_optional_u64(path: Path) -> int | None:
    """Read a single-integer file that may legitimately be absent.

    Only a missing file yields None; any other read failure propagates.
    """
    if not path.exists():
        logger.debug(f"Optional file not present: {path}")
        return None
    return read_u64(path)
