"""
Error schemas - Pydantic models for debug route error responses
"""

from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, Dict, Any
from datetime import datetime, timezone


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ErrorDetail(BaseModel):
    """Detailed error information"""
    code: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error message")
    details: Optional[Dict[str, Any]] = Field(
        None,
        description="Additional context (parameter name, offending value, etc.)"
    )
    timestamp: datetime = Field(
        default_factory=_utcnow,
        description="When the error occurred"
    )


class ErrorResponse(BaseModel):
    """Debug route error response

    All debug route errors use this structure.
    """
    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "error": {
                    "code": "INVALID_PARAMETER",
                    "message": "Invalid parameter 'seconds': must be greater than 0 and at most 300",
                    "details": {"parameter": "seconds", "value": "0"},
                    "timestamp": "2025-11-26T10:30:00Z"
                },
                "request_id": "4f2a0c1e-0d5b-4f0e-9f53-0c8a9a1d2b7e"
            }
        }
    )

    error: ErrorDetail = Field(description="Error information")
    request_id: Optional[str] = Field(None, description="Request ID for logging/debugging")
