"""
sigprof - on-demand debug/profiling HTTP endpoint armed by an OS signal.

    from sigprof import Profiler, ProfilerConfig

    profiler = Profiler(ProfilerConfig(address="localhost:6666", timeout=300))
    profiler.start()
    ...
    await profiler.stop()
"""

from sigprof.api import create_app
from sigprof.lifecycle import Profiler, Hook, EventHandler, default_event_handler
from sigprof.models import EventType, HookPhase
from sigprof.models.config import ProfilerConfig, DEFAULT_ADDRESS, DEFAULT_TIMEOUT, default_signal
from sigprof.models.errors import (
    ProfilerError,
    ConfigError,
    BindError,
    ShutdownTimeoutError,
    InvalidParameterError,
)
from sigprof.runtime import VarRegistry

__version__ = "0.1.0"

__all__ = [
    "create_app",
    "Profiler",
    "ProfilerConfig",
    "Hook",
    "EventHandler",
    "EventType",
    "HookPhase",
    "default_event_handler",
    "default_signal",
    "DEFAULT_ADDRESS",
    "DEFAULT_TIMEOUT",
    "ProfilerError",
    "ConfigError",
    "BindError",
    "ShutdownTimeoutError",
    "InvalidParameterError",
    "VarRegistry",
]
