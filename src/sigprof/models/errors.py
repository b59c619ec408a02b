"""
Profiler error taxonomy

Every error carries a machine-readable code, a human-readable message and a
details dict. Session-level errors (BindError, ShutdownTimeoutError) are never
raised to callers of Profiler.start()/stop(); they are reported through the
event handler. Route-level errors are converted to JSON responses by
api.middleware.error_handler.
"""

from typing import Optional


class ProfilerError(Exception):
    """Base class for profiler errors"""
    def __init__(
        self,
        code: str,
        message: str,
        details: Optional[dict] = None,
        status_code: int = 500
    ):
        self.code = code
        self.message = message
        self.details = details or {}
        self.status_code = status_code
        super().__init__(message)


class ConfigError(ProfilerError):
    """Configuration value is invalid"""
    def __init__(self, field: str, value, reason: str):
        super().__init__(
            code="CONFIG_ERROR",
            message=f"Invalid {field} {value!r}: {reason}",
            details={"field": field, "value": repr(value)},
        )


class BindError(ProfilerError):
    """Debug endpoint could not listen on its address"""
    def __init__(self, address: str, cause: OSError):
        super().__init__(
            code="BIND_ERROR",
            message=f"cannot listen on {address}: {cause.strerror or cause}",
            details={"address": address, "errno": cause.errno},
            status_code=503
        )
        self.__cause__ = cause


class ShutdownTimeoutError(ProfilerError):
    """Graceful drain of the debug endpoint exceeded its deadline"""
    def __init__(self, address: str, timeout: float):
        super().__init__(
            code="SHUTDOWN_TIMEOUT",
            message=f"debug endpoint {address} did not drain within {timeout}s",
            details={"address": address, "timeout": timeout},
        )


class InvalidParameterError(ProfilerError):
    """Query parameter of a debug route is invalid"""
    def __init__(self, name: str, value, reason: str):
        super().__init__(
            code="INVALID_PARAMETER",
            message=f"Invalid parameter '{name}': {reason}",
            details={"parameter": name, "value": value},
            status_code=400
        )
