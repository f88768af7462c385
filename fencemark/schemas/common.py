"""
Shared schema types.

Money and quantities are Decimal internally and serialized as JSON numbers.
Datetimes from clients may carry an offset; they are normalized to naive UTC
to match the storage convention.
"""
from datetime import datetime
from decimal import Decimal
from typing import Annotated, Optional
from pydantic import AfterValidator, BaseModel, PlainSerializer

from fencemark.utils.clock import as_naive_utc

Money = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]
Quantity = Money

UtcDateTime = Annotated[datetime, AfterValidator(as_naive_utc)]


class SuccessResponse(BaseModel):
    """Acknowledgment for deletes and state changes."""
    success: bool = True
    message: Optional[str] = None


class ErrorResponse(BaseModel):
    """Body of every 400 response."""
    error: str
