"""
Lifecycle subsystem
-------------------

Exports the public API for:
- the signal-armed debug endpoint (Profiler) and its building blocks
- hooks and the event handler
- the runner's graceful shutdown

External code should import from:
    from sigprof.lifecycle import Profiler, Hook, EventHandler
    from sigprof.lifecycle.handlers import ProfilerShutdownHandler
"""

from .api_server_wrapper import DebugServer
from .endpoint_session import EndpointSession
from .event_handler import EventHandler, default_event_handler
from .hooks import Hook, HookChain
from .profiler import Profiler
from .shutdown_coordinator import ShutdownCoordinator
from .shutdown_protocol import IShutdownHandler
from .signal_watcher import SignalWatcher
from . import handlers

__all__ = [
    "DebugServer",
    "EndpointSession",
    "EventHandler",
    "default_event_handler",
    "Hook",
    "HookChain",
    "Profiler",
    "ShutdownCoordinator",
    "IShutdownHandler",
    "SignalWatcher",
    "handlers",
]
