"""
Common schema types used across the API.
"""

from typing import Dict, Generic, Optional, TypeVar

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

T = TypeVar("T")


class CamelModel(BaseModel):
    """Base for response bodies: snake_case in Python, camelCase on the wire."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class ApiResponse(CamelModel, Generic[T]):
    """Standard success envelope."""

    success: bool = True
    message: str
    data: Optional[T] = None


class ErrorResponse(CamelModel):
    """Standard error envelope."""

    success: bool = False
    message: str
    error: str
    field: Optional[str] = None
    errors: Optional[Dict[str, str]] = None
    request_id: Optional[str] = None


class HealthResponse(CamelModel):
    """Health check response."""

    status: str = "ok"
    service: str
    environment: str
    version: str
    email_configured: bool
