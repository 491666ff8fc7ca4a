"""Utils module - Shared utilities."""

from __future__ import annotations

from host_probes.utils.logging import get_logger, setup_logging, setup_logging_from_config

__all__ = ["setup_logging", "setup_logging_from_config", "get_logger"]
