"""Filesystem usage from the `df` command.

`df -l` reports 1K blocks per local filesystem, `df -i` reports inodes. Both
share one columnar layout:

    Filesystem     1K-blocks    Used Available Use% Mounted on
    /dev/sda1         233191   17217    203533   8% /boot

Long device names make df wrap, putting the filesystem alone on one line and
the remaining five columns on the next.
"""

from __future__ import annotations

import logging
import subprocess

from host_probes.core.exceptions import ProbeIOError, UnexpectedContentError
from host_probes.core.schemas import DiskInodeUsage, DiskUsage
from host_probes.monitoring.base import parse_u64

logger = logging.getLogger(__name__)

DF_TIMEOUT_SECONDS = 10.0


def parse_df_output(output: str) -> list[list[str]]:
    """Split df output into rows of six columns, joining wrapped rows.

    Raises:
        UnexpectedContentError: If a row has an unexpected number of columns or
            a five-column row has no filesystem on the line before it
    """
    rows: list[list[str]] = []
    filesystem_on_previous_line: str | None = None

    for line in output.split("\n")[1:]:
        segments = line.split()

        if not segments:
            continue
        if len(segments) == 1:
            filesystem_on_previous_line = segments[0]
        elif len(segments) == 5:
            if filesystem_on_previous_line is None:
                raise UnexpectedContentError("filesystem expected on previous line")
            rows.append([filesystem_on_previous_line, *segments])
            filesystem_on_previous_line = None
        elif len(segments) == 6:
            rows.append(segments)
        else:
            raise UnexpectedContentError(f"Incorrect number of segments: {line!r}")

    return rows


def parse_percentage_segment(segment: str) -> int:
    """Parse a df percentage column such as "8%"."""
    if not segment.endswith("%"):
        raise UnexpectedContentError(f"Could not parse percentage segment {segment!r}")
    return parse_u64(segment[:-1])


def parse_filesystem(segment: str) -> str | None:
    return None if segment == "none" else segment


def _run_df(*args: str) -> str:
    command = ["df", *args]
    try:
        result = subprocess.run(
            command,
            capture_output=True,
            text=True,
            timeout=DF_TIMEOUT_SECONDS,
        )
    except OSError as e:
        raise ProbeIOError(" ".join(command), e) from e
    except subprocess.TimeoutExpired as e:
        raise ProbeIOError(" ".join(command), TimeoutError(f"timed out after {e.timeout}s")) from e

    # df exits non-zero when a single mount is unreadable but still prints the rest
    if result.returncode != 0:
        logger.debug(f"{' '.join(command)} exited with {result.returncode}: {result.stderr.strip()}")
    return result.stdout


def read_disk_usage() -> list[DiskUsage]:
    """Read the current block usage of all local filesystems (`df -l`)."""
    return [
        DiskUsage(
            filesystem=parse_filesystem(row[0]),
            one_k_blocks=parse_u64(row[1]),
            one_k_blocks_used=parse_u64(row[2]),
            one_k_blocks_free=parse_u64(row[3]),
            used_percentage=parse_percentage_segment(row[4]),
            mountpoint=row[5],
        )
        for row in parse_df_output(_run_df("-l"))
    ]


def read_disk_inode_usage() -> list[DiskInodeUsage]:
    """Read the current inode usage of all filesystems (`df -i`)."""
    return [
        DiskInodeUsage(
            filesystem=parse_filesystem(row[0]),
            inodes=parse_u64(row[1]),
            iused=parse_u64(row[2]),
            ifree=parse_u64(row[3]),
            iused_percentage=parse_percentage_segment(row[4]),
            mountpoint=row[5],
        )
        for row in parse_df_output(_run_df("-i"))
    ]
