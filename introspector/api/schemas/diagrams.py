"""Diagram route response schemas."""

from typing import Optional
from pydantic import BaseModel, Field


class CaseResponse(BaseModel):
    """One entry of the case listing."""
    name: str = Field(..., description="Case name")
    text: Optional[str] = Field(None, description="Case description, omitted when absent")


class ReloadResponse(BaseModel):
    """Counts of the snapshot built by a reload."""
    cases: int = Field(0, description="Number of cases")
    components: int = Field(0, description="Number of components")
    calls: int = Field(0, description="Number of calls")
    notes: int = Field(0, description="Number of notes")


class HealthResponse(BaseModel):
    status: str = Field("ok", description="Service status")
