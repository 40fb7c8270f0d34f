"""Pydantic models for calculation requests and responses."""
from pydantic import BaseModel, Field

GENERIC_ERROR_MESSAGE = "Invalid mathematical expression"


class CalculationRequest(BaseModel):
    """Represents a single calculation request sent to the server."""

    expression: str = Field(..., description="Arithmetic expression as a string")


class CalculationResult(BaseModel):
    """Represents the successful evaluation of a calculation request."""

    result: int | float = Field(..., description="Evaluated numeric result of the expression")


class CalculationError(BaseModel):
    """Represents a rejected calculation request."""

    error: str = Field(default=GENERIC_ERROR_MESSAGE, description="Client-facing error message")
