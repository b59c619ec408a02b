"""
Enums shared across the profiler package
"""

from enum import Enum, IntEnum, auto


class EventType(IntEnum):
    """
    Severity of an event emitted to the event handler.

    Kept as an IntEnum so integrators can compare severities
    (e.g. only forward events >= INFO).
    """
    DEBUG = 0
    INFO = 1
    ERROR = 2


class HookPhase(Enum):
    """Point in a session at which hooks are executed"""
    PRE_START = auto()
    POST_SHUTDOWN = auto()


class LogLevel(Enum):
    """Log severity levels"""
    DEBUG = auto()
    INFO = auto()
    WARN = auto()
    ERROR = auto()


class LogCategory(Enum):
    """Log categories for grouping related events"""
    CONFIG = auto()      # Configuration loading, validation
    SYSTEM = auto()      # Runner startup, shutdown
    SIGNAL = auto()      # Signal subscription / delivery
    PROFILER = auto()    # Events forwarded by the default event handler
    ENDPOINT = auto()    # Debug HTTP server bind / serve / shutdown
    HOOK = auto()        # PreStart / PostShutdown hook execution
    API = auto()         # Debug route handlers
    SHUTDOWN = auto()    # Shutdown coordinator and handlers

    GENERAL = auto()    # Default general category
