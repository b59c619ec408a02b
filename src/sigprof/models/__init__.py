"""
Models package - enums and configuration for the profiler

ProfilerConfig lives in models.config and is imported from there directly;
it depends on the lifecycle and api packages, which themselves use these enums.
"""

from .enums import EventType, HookPhase, LogLevel, LogCategory

__all__ = [
    'EventType',
    'HookPhase',
    'LogLevel',
    'LogCategory',
]
