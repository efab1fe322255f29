"""
Shared schema primitives used across the API.
"""
from typing import Any, Optional

from pydantic import BaseModel


class ErrorResponse(BaseModel):
    """Envelope of every 4xx/5xx body; ``details`` is omitted when empty."""
    code: str
    message: str
    details: Optional[dict[str, Any]] = None


class MessageResponse(BaseModel):
    """Outcome of an operation that returns no entity."""
    message: Optional[str] = None
