"""
Variable registry for /debug/vars.

Each profiler owns its own registry; nothing is published process-wide.
Values may be plain JSON-serializable objects or zero-argument callables
evaluated at request time.

    registry = VarRegistry()
    registry.publish("requests", lambda: stats.requests)
    registry.publish("build", {"version": "1.4.2"})
"""

import gc
import sys
import threading
from typing import Any, Callable, Dict, Union

try:
    import resource
except ImportError:  # Windows
    resource = None

VarValue = Union[Callable[[], Any], Any]


class VarRegistry:
    """Thread-safe mapping of published variables."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._vars: Dict[str, VarValue] = {}

    def publish(self, name: str, value: VarValue) -> None:
        """
        Publish a variable.

        Raises:
            ValueError: name is empty or already published
        """
        if not name:
            raise ValueError("variable name must not be empty")
        with self._lock:
            if name in self._vars:
                raise ValueError(f"variable {name!r} already published")
            self._vars[name] = value

    def unpublish(self, name: str) -> None:
        with self._lock:
            self._vars.pop(name, None)

    def names(self) -> list:
        with self._lock:
            return sorted(self._vars)

    def snapshot(self) -> Dict[str, Any]:
        """Runtime variables followed by published ones, evaluated now."""
        with self._lock:
            published = dict(self._vars)

        result = runtime_vars()
        for name, value in sorted(published.items()):
            if callable(value):
                try:
                    value = value()
                except Exception as e:
                    value = {"error": repr(e)}
            result[name] = value
        return result


def runtime_vars() -> Dict[str, Any]:
    """Interpreter state always present on /debug/vars."""
    result: Dict[str, Any] = {
        "cmdline": list(sys.argv),
        "gc": {
            "counts": list(gc.get_count()),
            "thresholds": list(gc.get_threshold()),
            "stats": gc.get_stats(),
            "objects": len(gc.get_objects()),
        },
        "threads": threading.active_count(),
    }
    if resource is not None:
        usage = resource.getrusage(resource.RUSAGE_SELF)
        result["rusage"] = {
            "utime": usage.ru_utime,
            "stime": usage.ru_stime,
            "maxrss": usage.ru_maxrss,
        }
    return result
