"""Pydantic schemas for Profile API."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

HEX_COLOR = r"^#[0-9A-Fa-f]{6}$"


class AddressSchema(BaseModel):
    """Postal address of a profile."""

    model_config = ConfigDict(from_attributes=True)

    street: str = Field(..., min_length=1, max_length=255)
    city: str = Field(..., min_length=1, max_length=100)
    country: str = Field(..., min_length=1, max_length=100)


class ProfileCreate(BaseModel):
    """Schema for creating a Profile."""

    name: str = Field(..., min_length=1, max_length=255)
    address: AddressSchema
    color: str = Field("#3B82F6", pattern=HEX_COLOR)

    @field_validator("color")
    @classmethod
    def validate_color(cls, v: str) -> str:
        return v.upper()


class ProfileUpdate(BaseModel):
    """Schema for updating a Profile (all fields optional)."""

    name: str | None = Field(None, min_length=1, max_length=255)
    address: AddressSchema | None = None
    color: str | None = Field(None, pattern=HEX_COLOR)


class ProfileResponse(BaseModel):
    """Schema for Profile response."""

    model_config = ConfigDict(
        from_attributes=True,
        json_schema_extra={
            "example": {
                "id": "123e4567-e89b-12d3-a456-426614174000",
                "name": "Lake House",
                "address": {"street": "1 Shore Rd", "city": "Oslo", "country": "Norway"},
                "color": "#10B981",
                "bill_count": 3,
                "created_at": "2024-11-01T10:00:00",
                "updated_at": "2024-11-01T10:00:00",
            }
        },
    )

    id: UUID
    name: str
    address: AddressSchema
    color: str
    bill_count: int = 0
    created_at: datetime
    updated_at: datetime


class ProfileListResponse(BaseModel):
    """Schema for list of Profiles."""

    data: list[ProfileResponse]


class ProfileDetailResponse(BaseModel):
    """Schema for single Profile."""

    data: ProfileResponse
