"""Logging configuration for host-probes.

The library itself only emits records through module loggers; applications
embedding the probes call setup_logging once at startup.
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime
from pathlib import Path

from rich.logging import RichHandler

from host_probes.core.config import ProbeConfig

PLAIN_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class JsonFormatter(logging.Formatter):
    """One JSON object per record, for programmatic parsing."""

    def format(self, record: logging.LogRecord) -> str:
        log_obj = {
            "timestamp": datetime.now().isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            log_obj["exception"] = self.formatException(record.exc_info)
        return json.dumps(log_obj)


def setup_logging(
    level: str = "INFO",
    log_file: Path | None = None,
    json_format: bool = False,
) -> None:
    """Route probe logs to the console and optionally a file.

    The console gets rich output, or one JSON object per line when
    json_format is set (for log shippers reading stdout). The file, if any,
    always gets plain text.
    """
    handlers: list[logging.Handler] = []

    if json_format:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(JsonFormatter())
        handlers.append(handler)
    else:
        handlers.append(
            RichHandler(
                level=level.upper(),
                rich_tracebacks=True,
                markup=False,
                show_time=True,
                show_path=False,
            )
        )

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(logging.Formatter(PLAIN_FORMAT))
        handlers.append(file_handler)

    logging.basicConfig(
        level=getattr(logging, level.upper()),
        handlers=handlers,
        force=True,
    )


def setup_logging_from_config(config: ProbeConfig, log_file: Path | None = None) -> None:
    """Configure logging from the log_level/json_logs settings of a ProbeConfig."""
    setup_logging(config.log_level, log_file=log_file, json_format=config.json_logs)


def get_logger(name: str) -> logging.Logger:
    """Logger under the host_probes hierarchy (pass __name__)."""
    return logging.getLogger(name)
