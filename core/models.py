# core/models.py
from pydantic import BaseModel, Field
from typing import Optional, Any
from enum import Enum


# --- Outcome Models ---

class StorageErrorKind(str, Enum):
    """Classification of a failed backend call."""
    NOT_FOUND = "not_found"
    AUTH_FAILURE = "auth_failure"
    NETWORK_ERROR = "network_error"
    UNKNOWN = "unknown"

class StorageResult(BaseModel):
    """
    Outcome of a single object store operation.

    `ok` tells whether the backend call(s) completed. A completed existence
    check for a missing key is `ok=True, value=False`, so callers can tell
    "object absent" apart from "request failed".
    """
    ok: bool
    value: Any | None = None
    error: Optional[StorageErrorKind] = None
    message: Optional[str] = None

    @classmethod
    def success(cls, value: Any = None) -> "StorageResult":
        return cls(ok=True, value=value)

    @classmethod
    def failure(cls, error: StorageErrorKind, message: Optional[str] = None) -> "StorageResult":
        return cls(ok=False, error=error, message=message)


# --- Storage Service Request/Response Models ---

class CopyRequest(BaseModel):
    """Server-side copy inside one bucket."""
    from_key: str
    to_key: str
    bucket: Optional[str] = None

class StorageResponse(BaseModel):
    """Standard response wrapper for the Storage Service."""
    status: str = Field(description="'success' or 'error'")
    data: Any | None = Field(default=None, description="The primary data payload (depends on the endpoint)")
    message: Optional[str] = Field(default=None, description="Optional status message or error details")
