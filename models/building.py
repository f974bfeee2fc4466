# models/building.py

from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field, field_validator


# -------------------------------------------------
# Shared fields
# -------------------------------------------------
class BuildingBase(BaseModel):
    name: str = Field(..., min_length=1)
    address: str = Field(..., min_length=1)
    city: str = Field(..., min_length=1)
    postal_code: str = Field(..., min_length=1)
    tax_id: Optional[str] = None
    construction_year: Optional[int] = Field(None, ge=1900)
    floors: Optional[int] = Field(None, ge=1)
    apartment_count: int = Field(..., ge=1)
    is_active: bool = True


# -------------------------------------------------
# Create
# -------------------------------------------------
class BuildingCreate(BuildingBase):
    """
    No ID supplied: Supabase generates UUID.
    """
    pass


# -------------------------------------------------
# Read (Supabase → API response)
# -------------------------------------------------
class BuildingRead(BuildingBase):
    id: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    deleted_at: Optional[datetime] = None

    # Normalize UUID → str always
    @field_validator("id", mode="before")
    @classmethod
    def normalize_id(cls, v):
        return str(v)


# -------------------------------------------------
# Update (PATCH)
# -------------------------------------------------
class BuildingUpdate(BaseModel):
    name: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    postal_code: Optional[str] = None
    tax_id: Optional[str] = None
    construction_year: Optional[int] = Field(None, ge=1900)
    floors: Optional[int] = Field(None, ge=1)
    apartment_count: Optional[int] = Field(None, ge=1)
    is_active: Optional[bool] = None
