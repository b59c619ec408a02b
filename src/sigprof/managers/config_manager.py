"""
Config Manager

Loads the `profiler:` section of a YAML file and turns it into
ProfilerConfig keyword arguments plus the runner's log level.

Example config.yaml:

    profiler:
      signal: SIGUSR2
      address: "localhost:6666"
      timeout: 300
      log_level: DEBUG
"""

from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml

from sigprof.models.config import DEFAULT_ADDRESS, DEFAULT_TIMEOUT, parse_address, parse_signal
from sigprof.models.enums import LogLevel, LogCategory
from sigprof.models.errors import ConfigError
from sigprof.utils.logger import get_logger

log = get_logger().for_category(LogCategory.CONFIG)

SECTION = "profiler"


class ConfigManager:
    """
    YAML configuration loader for the runner.

    Missing keys fall back to defaults; a missing `profiler:` section yields
    defaults only. Embedding applications are expected to build
    ProfilerConfig directly instead.

    Example:
        manager = ConfigManager("config/profiler.yaml")
        manager.load()
        config = ProfilerConfig(**manager.profiler_kwargs())
        configure_logger(manager.log_level)
    """

    def __init__(self, config_path: Optional[Union[str, Path]] = None):
        """
        Args:
            config_path: Path to the YAML file (None: defaults only)
        """
        self.config_path = Path(config_path) if config_path is not None else None
        self.data: Dict[str, Any] = {}
        self.signal = None
        self.address: str = DEFAULT_ADDRESS
        self.timeout: float = DEFAULT_TIMEOUT
        self.log_level: LogLevel = LogLevel.INFO

    def load(self) -> Dict[str, Any]:
        """
        Read and validate the configuration file.

        Returns:
            The raw `profiler:` section

        Raises:
            ConfigError: Unreadable file, malformed YAML, or invalid values
        """
        if self.config_path is None:
            log.debug("No config file given, using defaults")
            return self.data

        try:
            with open(self.config_path, "r", encoding="utf-8") as f:
                document = yaml.safe_load(f)
        except OSError as ex:
            log.error("Failed to read config file", path=str(self.config_path), error=str(ex))
            raise ConfigError("config_path", str(self.config_path), ex.strerror or str(ex)) from ex
        except yaml.YAMLError as ex:
            log.error("Malformed YAML", path=str(self.config_path), error=str(ex))
            raise ConfigError("config_path", str(self.config_path), "malformed YAML") from ex

        if document is None:
            document = {}
        if not isinstance(document, dict):
            raise ConfigError("config_path", str(self.config_path), "top level must be a mapping")

        section = document.get(SECTION) or {}
        if not isinstance(section, dict):
            raise ConfigError(SECTION, section, "must be a mapping")

        self.apply(section)
        self.data = section
        log.info(
            "Configuration loaded",
            path=str(self.config_path),
            signal=self.signal.name if self.signal is not None else "default",
            address=self.address,
            timeout=self.timeout,
        )
        return self.data

    def apply(self, values: Dict[str, Any]) -> None:
        """
        Validate and store values (also used for command line overrides).
        Keys set to None are ignored.

        Raises:
            ConfigError: Invalid value
        """
        unknown = set(values) - {"signal", "address", "timeout", "log_level"}
        if unknown:
            log.warn("Ignoring unknown config keys", keys=", ".join(sorted(unknown)))

        if values.get("signal") is not None:
            self.signal = parse_signal(values["signal"])

        if values.get("address") is not None:
            address = str(values["address"])
            parse_address(address)
            self.address = address

        if values.get("timeout") is not None:
            timeout = values["timeout"]
            if isinstance(timeout, bool):
                raise ConfigError("timeout", timeout, "expected seconds as a number")
            try:
                timeout = float(timeout)
            except (TypeError, ValueError):
                raise ConfigError("timeout", timeout, "expected seconds as a number")
            if timeout <= 0:
                raise ConfigError("timeout", timeout, "must be positive")
            self.timeout = timeout

        if values.get("log_level") is not None:
            name = str(values["log_level"]).strip().upper()
            if name == "WARNING":
                name = "WARN"
            try:
                self.log_level = LogLevel[name]
            except KeyError:
                raise ConfigError("log_level", values["log_level"], "expected DEBUG, INFO, WARN or ERROR")

    def profiler_kwargs(self) -> Dict[str, Any]:
        """Keyword arguments for ProfilerConfig."""
        kwargs: Dict[str, Any] = {"address": self.address, "timeout": self.timeout}
        if self.signal is not None:
            kwargs["signal"] = self.signal
        return kwargs
