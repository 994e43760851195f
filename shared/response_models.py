"""
Common API response models.
"""

from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    """Standard API error response."""

    success: bool = Field(default=False, description="Always false for errors")
    error: str = Field(..., description="Error message")
    details: str | None = Field(None, description="Detailed error information")
    hint: str | None = Field(None, description="What the caller can do about it")
    error_code: str | None = Field(None, description="Error code for programmatic handling")


class HealthResponse(BaseModel):
    """Health check response model."""

    status: str = Field(..., description="Service status")
    timestamp: str = Field(..., description="Server time (ISO 8601, UTC)")
    service: str | None = Field(None, description="Service name")
    version: str | None = Field(None, description="Service version")
