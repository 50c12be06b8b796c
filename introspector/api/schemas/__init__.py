"""Pydantic schemas for API request/response models."""

from .diagrams import CaseResponse, HealthResponse, ReloadResponse

__all__ = [
    'CaseResponse',
    'HealthResponse',
    'ReloadResponse',
]
