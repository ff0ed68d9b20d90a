"""Pydantic schemas for Bill API."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class EBillSchema(BaseModel):
    """Online account used to pay a bill."""

    model_config = ConfigDict(from_attributes=True)

    link: str = Field(..., min_length=1, max_length=2048)
    username: str = Field("", max_length=255)
    password: str = Field("", max_length=1024)


class BillCreate(BaseModel):
    """Schema for creating a Bill under a profile."""

    name: str = Field(..., min_length=1, max_length=255)
    e_bill: EBillSchema | None = None
    due_day: int | None = Field(None, ge=1, le=31)


class BillUpdate(BaseModel):
    """Schema for updating a Bill.

    Sending ``null`` for ``e_bill`` or ``due_day`` clears the value; leaving
    the key out keeps it.
    """

    name: str | None = Field(None, min_length=1, max_length=255)
    e_bill: EBillSchema | None = None
    due_day: int | None = Field(None, ge=1, le=31)


class BillResponse(BaseModel):
    """Schema for Bill response."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    profile_id: UUID
    name: str
    e_bill: EBillSchema | None = None
    due_day: int | None = None
    instance_count: int = 0
    created_at: datetime
    updated_at: datetime


class BillListResponse(BaseModel):
    """Schema for list of Bills."""

    data: list[BillResponse]


class BillDetailResponse(BaseModel):
    """Schema for single Bill."""

    data: BillResponse
