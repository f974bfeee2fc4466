# models/apartment.py

from typing import Dict, Optional
from pydantic import BaseModel, Field


# Share columns, one per expense category (each 0–100 %)
SHARE_FIELDS = (
    "share_common",
    "share_elevator",
    "share_heating",
    "share_special",
    "share_owner",
    "share_other",
)


class ApartmentShares(BaseModel):
    share_common: float = Field(0, ge=0, le=100)      # common charges
    share_elevator: float = Field(0, ge=0, le=100)
    share_heating: float = Field(0, ge=0, le=100)
    share_special: float = Field(0, ge=0, le=100)
    share_owner: float = Field(0, ge=0, le=100)       # owner-borne expenses
    share_other: float = Field(0, ge=0, le=100)


class ApartmentCreate(ApartmentShares):
    building_id: str
    number: str = Field(..., min_length=1)
    floor: int
    square_meters: float = Field(..., ge=0)
    owner_id: Optional[str] = None
    is_occupied: bool = True
    has_heating: bool = True


class ApartmentUpdate(BaseModel):
    number: Optional[str] = None
    floor: Optional[int] = None
    square_meters: Optional[float] = Field(None, ge=0)
    share_common: Optional[float] = Field(None, ge=0, le=100)
    share_elevator: Optional[float] = Field(None, ge=0, le=100)
    share_heating: Optional[float] = Field(None, ge=0, le=100)
    share_special: Optional[float] = Field(None, ge=0, le=100)
    share_owner: Optional[float] = Field(None, ge=0, le=100)
    share_other: Optional[float] = Field(None, ge=0, le=100)
    owner_id: Optional[str] = None
    is_occupied: Optional[bool] = None
    has_heating: Optional[bool] = None


class ShareTotals(BaseModel):
    """
    Per-category share sums across a building's apartments.
    Each category is expected to total 100; nothing enforces it.
    """

    building_id: str
    apartment_count: int
    totals: Dict[str, float]
    balanced: Dict[str, bool]


def share_totals(building_id: str, apartments: list, tolerance: float = 0.01) -> ShareTotals:
    totals = {
        field: round(sum(float(a.get(field) or 0) for a in apartments), 4)
        for field in SHARE_FIELDS
    }
    return ShareTotals(
        building_id=building_id,
        apartment_count=len(apartments),
        totals=totals,
        balanced={field: abs(total - 100) <= tolerance for field, total in totals.items()},
    )
