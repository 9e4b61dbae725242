from __future__ import annotations

from pydantic import BaseModel, Field


class GenerateRequest(BaseModel):
    """Documented request shape; the handler validates the raw body itself."""

    query: str = Field(..., description="Topic or question to study")


class ErrorResponse(BaseModel):
    error: str


class HealthResponse(BaseModel):
    status: str
    app: str
    version: str
