import signal

import pytest

from sigprof.managers import ConfigManager
from sigprof.models.config import DEFAULT_ADDRESS, DEFAULT_TIMEOUT, ProfilerConfig
from sigprof.models.enums import LogLevel
from sigprof.models.errors import ConfigError


@pytest.fixture
def write_config(tmp_path):
    def write(text):
        path = tmp_path / "config.yaml"
        path.write_text(text, encoding="utf-8")
        return path
    return write


def test_full_section(write_config):
    path = write_config(
        "profiler:\n"
        "  signal: SIGTERM\n"
        "  address: 'localhost:7777'\n"
        "  timeout: 120\n"
        "  log_level: debug\n"
    )
    manager = ConfigManager(path)
    data = manager.load()

    assert data["address"] == "localhost:7777"
    assert manager.signal == signal.SIGTERM
    assert manager.address == "localhost:7777"
    assert manager.timeout == 120.0
    assert manager.log_level == LogLevel.DEBUG

    config = ProfilerConfig(**manager.profiler_kwargs())
    assert config.signal == signal.SIGTERM
    assert config.timeout == 120.0


def test_partial_section_keeps_defaults(write_config):
    manager = ConfigManager(write_config("profiler:\n  timeout: 30\n"))
    manager.load()

    assert manager.timeout == 30.0
    assert manager.address == DEFAULT_ADDRESS
    assert manager.signal is None
    assert "signal" not in manager.profiler_kwargs()
    assert manager.log_level == LogLevel.INFO


def test_missing_section(write_config):
    manager = ConfigManager(write_config("other: 1\n"))
    manager.load()
    assert manager.profiler_kwargs() == {"address": DEFAULT_ADDRESS, "timeout": DEFAULT_TIMEOUT}


def test_empty_file(write_config):
    manager = ConfigManager(write_config(""))
    assert manager.load() == {}


def test_no_path_means_defaults():
    manager = ConfigManager()
    assert manager.load() == {}
    assert manager.timeout == DEFAULT_TIMEOUT


def test_unknown_signal(write_config):
    manager = ConfigManager(write_config("profiler:\n  signal: SIGNOPE\n"))
    with pytest.raises(ConfigError) as exc_info:
        manager.load()
    assert exc_info.value.details["field"] == "signal"


@pytest.mark.parametrize("body", [
    "profiler:\n  timeout: -5\n",
    "profiler:\n  timeout: soon\n",
    "profiler:\n  address: nope\n",
    "profiler:\n  log_level: LOUD\n",
    "profiler: [1, 2]\n",
    "- a\n- b\n",
])
def test_invalid_values(write_config, body):
    with pytest.raises(ConfigError):
        ConfigManager(write_config(body)).load()


def test_malformed_yaml(write_config):
    with pytest.raises(ConfigError):
        ConfigManager(write_config("profiler: {timeout: [\n")).load()


def test_missing_file(tmp_path):
    with pytest.raises(ConfigError):
        ConfigManager(tmp_path / "absent.yaml").load()


def test_apply_ignores_none_overrides():
    manager = ConfigManager()
    manager.apply({"address": None, "timeout": 15, "signal": None, "log_level": "warning"})
    assert manager.address == DEFAULT_ADDRESS
    assert manager.timeout == 15.0
    assert manager.log_level == LogLevel.WARN
