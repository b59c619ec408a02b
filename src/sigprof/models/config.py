"""
Profiler configuration

ProfilerConfig is assembled once and frozen; the hook list is stored as a
tuple, so nothing can be changed after the profiler starts.

Example:
    config = ProfilerConfig(
        signal=signal.SIGUSR2,
        address="localhost:8080",
        timeout=300,
        hooks=(MyHook(),),
    )
    profiler = Profiler(config)
"""

from __future__ import annotations

import signal as _signal
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Callable, Optional, Tuple

from sigprof.models.errors import ConfigError

if TYPE_CHECKING:
    from sigprof.lifecycle.event_handler import EventHandler
    from sigprof.lifecycle.hooks import Hook
    from sigprof.runtime.vars import VarRegistry


DEFAULT_ADDRESS = ":6666"
DEFAULT_TIMEOUT = 10 * 60.0


def default_signal() -> _signal.Signals:
    """SIGUSR1 where the platform has it, otherwise SIGBREAK (Windows), otherwise SIGINT."""
    for name in ("SIGUSR1", "SIGBREAK"):
        sig = getattr(_signal, name, None)
        if sig is not None:
            return sig
    return _signal.SIGINT


def parse_signal(value: Any) -> _signal.Signals:
    """
    Convert a signal name ("SIGUSR2", "usr2") or number into signal.Signals.

    Raises:
        ConfigError: Unknown signal
    """
    if isinstance(value, _signal.Signals):
        return value
    if isinstance(value, int):
        try:
            return _signal.Signals(value)
        except ValueError:
            raise ConfigError("signal", value, "unknown signal number")
    if isinstance(value, str):
        name = value.strip().upper()
        if not name.startswith("SIG"):
            name = "SIG" + name
        try:
            return _signal.Signals[name]
        except KeyError:
            raise ConfigError("signal", value, "unknown signal name")
    raise ConfigError("signal", value, f"expected name or number, got {type(value).__name__}")


def parse_address(address: str) -> Tuple[str, int]:
    """
    Split a listen address into (host, port).

    Accepted forms: ":6666" (all interfaces), "localhost:6666",
    "127.0.0.1:6666", "[::1]:6666".

    Raises:
        ConfigError: Missing or invalid port
    """
    if not isinstance(address, str) or ":" not in address:
        raise ConfigError("address", address, "expected host:port")

    host, _, port_str = address.rpartition(":")
    if host.startswith("[") and host.endswith("]"):
        host = host[1:-1]
    elif ":" in host:
        raise ConfigError("address", address, "IPv6 hosts must be bracketed")

    try:
        port = int(port_str)
    except ValueError:
        raise ConfigError("address", address, "port is not a number")
    if not 0 <= port <= 65535:
        raise ConfigError("address", address, "port out of range")

    return host, port


def _default_event_handler() -> "EventHandler":
    from sigprof.lifecycle.event_handler import default_event_handler
    return default_event_handler()


def _default_vars() -> "VarRegistry":
    from sigprof.runtime.vars import VarRegistry
    return VarRegistry()


@dataclass(frozen=True)
class ProfilerConfig:
    """
    Immutable profiler configuration.

    Attributes:
        signal: OS signal that arms the debug endpoint
        address: Listen address of the debug endpoint
        timeout: Serving duration and shutdown drain deadline (seconds)
        hooks: PreStart/PostShutdown observers, run in this order
        event_handler: Receiver of profiler events
        vars: Variables published on /debug/vars
        app_factory: Builds the ASGI route table for each session
                     (default: api.main.create_app with vars)
    """
    signal: _signal.Signals = field(default_factory=default_signal)
    address: str = DEFAULT_ADDRESS
    timeout: float = DEFAULT_TIMEOUT
    hooks: Tuple["Hook", ...] = ()
    event_handler: "EventHandler" = field(default_factory=_default_event_handler)
    vars: "VarRegistry" = field(default_factory=_default_vars)
    app_factory: Optional[Callable[[], Any]] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "signal", parse_signal(self.signal))
        object.__setattr__(self, "hooks", tuple(self.hooks))

        parse_address(self.address)

        if isinstance(self.timeout, bool) or not isinstance(self.timeout, (int, float)):
            raise ConfigError("timeout", self.timeout, "expected seconds as a number")
        if self.timeout <= 0:
            raise ConfigError("timeout", self.timeout, "must be positive")
        object.__setattr__(self, "timeout", float(self.timeout))

        if not callable(self.event_handler):
            raise ConfigError("event_handler", self.event_handler, "must be callable")
        for hook in self.hooks:
            if not callable(getattr(hook, "pre_start", None)) or not callable(getattr(hook, "post_shutdown", None)):
                raise ConfigError("hooks", hook, "missing pre_start()/post_shutdown()")

    def build_app(self) -> Any:
        """Create a fresh, privately owned route table for one session."""
        if self.app_factory is not None:
            return self.app_factory()
        from sigprof.api.main import create_app
        return create_app(vars=self.vars)
