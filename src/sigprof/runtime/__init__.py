"""
Runtime introspection used by the debug routes
"""

from .vars import VarRegistry

__all__ = ["VarRegistry"]
