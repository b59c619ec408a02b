from .profiler_shutdown_handler import ProfilerShutdownHandler

__all__ = [
    "ProfilerShutdownHandler",
]
