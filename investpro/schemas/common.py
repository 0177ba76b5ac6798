"""
Shared response schemas.

Documents the error envelope in OpenAPI and provides the ``{field,
message}`` shape used both by request validation and by the company form
validator.
"""

from typing import List

from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    """Error envelope returned by every non-validation error handler."""

    error: bool = Field(default=True, description="Always ``true`` for errors")
    message: str = Field(
        ..., description="Human-readable error description", examples=["Company not found"]
    )


class FieldError(BaseModel):
    """Single field-level validation failure."""

    field: str = Field(..., examples=["contact_email"])
    message: str = Field(..., examples=["Please enter a valid email address"])


class ValidationResult(BaseModel):
    """Outcome of validating a whole form; errors are never raised."""

    is_valid: bool
    errors: List[FieldError] = Field(default_factory=list)


class ValidationErrorResponse(BaseModel):
    """Response body for 422 Unprocessable Entity."""

    error: bool = Field(default=True, description="Always ``true`` for errors")
    message: str = Field(default="Validation failed")
    details: List[FieldError] = Field(..., description="Per-field validation failures")
