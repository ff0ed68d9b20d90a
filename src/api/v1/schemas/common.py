"""Common Pydantic schemas shared across the API."""

from decimal import Decimal
from typing import Annotated, Any

from pydantic import BaseModel, PlainSerializer

from domain.entities.billing_period import BillingPeriod

# Money goes over the wire as a JSON number, not pydantic's default string
Money = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]


def normalize_period(value: str) -> str:
    """Accept ``YYYY-MM`` or ``Month YYYY`` and return the canonical ``YYYY-MM``."""
    return BillingPeriod.parse(value).label


class ErrorResponse(BaseModel):
    """Standardized error response."""

    error_code: str
    message: str
    details: Any | None = None
