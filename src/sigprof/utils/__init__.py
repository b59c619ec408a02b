"""
Utility helpers for the profiler package
"""

from .logger import get_logger, configure_logger, Logger, BoundLogger

__all__ = [
    'get_logger',
    'configure_logger',
    'Logger',
    'BoundLogger',
]
