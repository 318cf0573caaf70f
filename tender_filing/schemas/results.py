"""Result envelope shared by every filing and document operation."""

from typing import Generic, Optional, TypeVar

from pydantic import BaseModel, Field

T = TypeVar("T")


class ErrorInfo(BaseModel):
    """Machine-readable code plus a human-readable message."""

    code: str = Field(..., description="Error code from the filing error taxonomy")
    message: str = Field(..., description="Human-readable explanation")


class ActionResult(BaseModel, Generic[T]):
    """``{success, data}`` on success, ``{success, error}`` on failure.

    A failed batch upload still carries ``data`` so callers can see which
    files were ingested before the failure.
    """

    success: bool
    data: Optional[T] = None
    error: Optional[ErrorInfo] = None
