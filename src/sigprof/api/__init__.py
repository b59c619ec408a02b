"""
Debug HTTP surface served while the endpoint is armed
"""

from .main import create_app

__all__ = ["create_app"]
