"""Pydantic schemas for BillInstance API."""

from datetime import date, datetime
from decimal import Decimal
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from api.v1.schemas.common import Money, normalize_period


class BillInstanceCreate(BaseModel):
    """Schema for recording a bill instance."""

    period: str = Field(..., description="Billing month as YYYY-MM")
    amount: Decimal = Field(..., ge=0, max_digits=12, decimal_places=2)
    due_date: date
    description: str | None = Field(None, max_length=1000)

    @field_validator("period")
    @classmethod
    def validate_period(cls, v: str) -> str:
        return normalize_period(v)


class BillInstanceUpdate(BaseModel):
    """Schema for updating a bill instance (all fields optional)."""

    period: str | None = None
    amount: Decimal | None = Field(None, ge=0, max_digits=12, decimal_places=2)
    due_date: date | None = None
    description: str | None = Field(None, max_length=1000)
    is_paid: bool | None = None

    @field_validator("period")
    @classmethod
    def validate_period(cls, v: str | None) -> str | None:
        return normalize_period(v) if v is not None else None


class BillInstanceResponse(BaseModel):
    """Schema for BillInstance response."""

    model_config = ConfigDict(
        from_attributes=True,
        json_schema_extra={
            "example": {
                "id": "789e4567-e89b-12d3-a456-426614174000",
                "bill_id": "456e4567-e89b-12d3-a456-426614174000",
                "period": "2024-11",
                "amount": 50.0,
                "due_date": "2024-12-01",
                "description": "Electricity's monthly instance for November 2024",
                "is_paid": False,
                "created_at": "2024-12-01T00:01:00",
                "updated_at": "2024-12-01T00:01:00",
            }
        },
    )

    id: UUID
    bill_id: UUID
    period: str
    amount: Money
    due_date: date
    description: str | None
    is_paid: bool
    created_at: datetime
    updated_at: datetime


class BillInstanceWithNamesResponse(BillInstanceResponse):
    """Bill instance labelled with its bill and profile, for calendar views."""

    bill_name: str
    profile_id: UUID | None
    profile_name: str
    profile_color: str


class BillInstanceListResponse(BaseModel):
    """Schema for list of bill instances."""

    data: list[BillInstanceResponse]


class BillInstanceWithNamesListResponse(BaseModel):
    """Schema for list of labelled bill instances."""

    data: list[BillInstanceWithNamesResponse]
    meta: dict[str, Any] = Field(default_factory=dict)


class BillInstanceDetailResponse(BaseModel):
    """Schema for single bill instance."""

    data: BillInstanceResponse
