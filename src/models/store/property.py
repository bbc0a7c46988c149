"""Pydantic models for property and room type rows."""

from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from src.models.statuses import PropertyStatus
from src.models.store.fields import parse_amount


class Property(BaseModel):
    """Owned hotel / listing (``hotels`` table)."""

    id: str
    owner_id: Optional[str] = None
    name: str = ""
    city: Optional[str] = None
    state: Optional[str] = None
    property_type: Optional[str] = None
    status: PropertyStatus = PropertyStatus.ACTIVE
    rating: Optional[float] = None
    price: Decimal = Field(default=Decimal("0"))
    original_price: Decimal = Field(default=Decimal("0"))

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    @field_validator("price", "original_price", mode="before")
    @classmethod
    def parse_price(cls, v):
        return parse_amount(v)

    @field_validator("status", mode="before")
    @classmethod
    def parse_status(cls, v):
        """Unknown or missing statuses read as pending approval."""
        if v is None:
            return PropertyStatus.PENDING_APPROVAL
        try:
            return PropertyStatus(str(v).strip().lower())
        except ValueError:
            return PropertyStatus.PENDING_APPROVAL

    @property
    def location(self) -> str:
        """City and state joined for display."""
        return ", ".join(part for part in (self.city, self.state) if part)


class RoomType(BaseModel):
    """Room type (``room_types`` table). Belongs to exactly one property."""

    id: str
    property_id: Optional[str] = None
    name: str = ""
    base_rate: Decimal = Field(default=Decimal("0"))
    total_rooms: Optional[int] = None

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    @field_validator("base_rate", mode="before")
    @classmethod
    def parse_base_rate(cls, v):
        return parse_amount(v)

    @property
    def room_count(self) -> int:
        """Room count used for capacity; missing or zero counts as one room."""
        return self.total_rooms or 1
