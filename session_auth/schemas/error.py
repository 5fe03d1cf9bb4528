"""Standardized error response schema."""

from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    """Error body for every failed request (4xx and 5xx)."""

    message: str = Field(..., description="Human-readable message, safe to display")
    code: str = Field(..., description="Machine-readable error code")
