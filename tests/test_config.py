"""Tests for configuration loading and logging setup."""

import json
import logging
from pathlib import Path

import pytest
from pydantic import ValidationError
from rich.logging import RichHandler

from host_probes.core.config import ProbeConfig, load_config
from host_probes.utils.logging import (
    JsonFormatter,
    get_logger,
    setup_logging,
    setup_logging_from_config,
)


class TestProbeConfig:
    """Tests for ProbeConfig schema."""

    def test_defaults(self):
        config = ProbeConfig()
        assert config.proc_root == Path("/proc")
        assert config.cgroup_root == Path("/sys/fs/cgroup")
        assert config.cpu_count is None
        assert config.log_level == "INFO"
        assert config.json_logs is False

    def test_log_level_normalized(self):
        assert ProbeConfig(log_level="debug").log_level == "DEBUG"

    def test_invalid_log_level(self):
        with pytest.raises(ValidationError):
            ProbeConfig(log_level="verbose")

    @pytest.mark.parametrize("cpu_count", [0, -2])
    def test_cpu_count_must_be_positive(self, cpu_count):
        with pytest.raises(ValidationError):
            ProbeConfig(cpu_count=cpu_count)


class TestLoadConfig:
    """Tests for load_config."""

    def test_yaml(self, tmp_path: Path):
        path = tmp_path / "probes.yaml"
        path.write_text("proc_root: /host/proc\ncgroup_root: /host/cgroup\ncpu_count: 1.5\n")

        config = load_config(path)

        assert config.proc_root == Path("/host/proc")
        assert config.cgroup_root == Path("/host/cgroup")
        assert config.cpu_count == 1.5

    def test_json(self, tmp_path: Path):
        path = tmp_path / "probes.json"
        path.write_text(json.dumps({"log_level": "warning", "json_logs": True}))

        config = load_config(path)

        assert config.log_level == "WARNING"
        assert config.json_logs is True

    def test_empty_yaml_gives_defaults(self, tmp_path: Path):
        path = tmp_path / "probes.yml"
        path.write_text("")

        assert load_config(path) == ProbeConfig()

    def test_missing_file(self, tmp_path: Path):
        with pytest.raises(FileNotFoundError):
            load_config(tmp_path / "missing.yaml")

    def test_unsupported_format(self, tmp_path: Path):
        path = tmp_path / "probes.toml"
        path.write_text("")

        with pytest.raises(ValueError, match="Unsupported"):
            load_config(path)


class TestSetupLogging:
    """Tests for logging configuration."""

    def test_rich_console(self):
        setup_logging(level="debug")

        root = logging.getLogger()
        assert root.level == logging.DEBUG
        assert any(isinstance(h, RichHandler) for h in root.handlers)

    def test_rich_console_with_plain_log_file(self, tmp_path: Path):
        """The log file gets plain text whatever the console format."""
        log_file = tmp_path / "probes.log"

        setup_logging(level="INFO", log_file=log_file)
        logging.getLogger("host_probes.test").info("read cpu.stat")
        for handler in logging.getLogger().handlers:
            handler.flush()

        assert "host_probes.test - INFO - read cpu.stat" in log_file.read_text()

    def test_json_with_log_file(self, tmp_path: Path):
        log_file = tmp_path / "logs" / "probes.log"

        setup_logging(level="INFO", log_file=log_file, json_format=True)
        logging.getLogger("host_probes.test").info("sampled")

        root = logging.getLogger()
        assert any(isinstance(h.formatter, JsonFormatter) for h in root.handlers)
        assert not any(isinstance(h, RichHandler) for h in root.handlers)
        assert log_file.exists()

    def test_from_config(self):
        setup_logging_from_config(ProbeConfig(log_level="WARNING", json_logs=True))

        root = logging.getLogger()
        assert root.level == logging.WARNING
        assert any(isinstance(h.formatter, JsonFormatter) for h in root.handlers)

    def test_json_formatter(self):
        record = logging.LogRecord("host_probes", logging.INFO, __file__, 1, "hello %s", ("x",), None)

        payload = json.loads(JsonFormatter().format(record))

        assert payload["message"] == "hello x"
        assert payload["level"] == "INFO"
        assert payload["logger"] == "host_probes"

    def test_get_logger(self):
        assert get_logger("host_probes.monitoring").name == "host_probes.monitoring"
