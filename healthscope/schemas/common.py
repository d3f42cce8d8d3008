"""
Pydantic schemas shared by the application endpoints.
"""

from typing import Any, Dict, Optional
from datetime import datetime
from pydantic import BaseModel, Field


# Health Check Schema
class HealthCheck(BaseModel):
    """Health check response schema."""

    status: str = "healthy"
    version: str
    timestamp: datetime = Field(default_factory=datetime.now)


# Error Schema
class ErrorResponse(BaseModel):
    """Error response schema."""

    error: str
    message: str
    details: Dict[str, Any] = Field(default_factory=dict)
    status_code: Optional[int] = None
