"""Pydantic model for guest rows."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, field_validator

from src.models.statuses import GuestStatus

ID_TYPES = {
    "passport": "Passport",
    "driving-license": "Driving License",
    "national-id": "National ID",
    "aadhaar": "Aadhaar Card",
}


class Guest(BaseModel):
    """Guest row (``guests`` table). Email is unique across the table."""

    id: str
    name: str = ""
    email: str = ""
    phone: Optional[str] = None
    nationality: Optional[str] = None
    id_type: Optional[str] = None
    id_number: Optional[str] = None
    address: Optional[str] = None
    emergency_contact: Optional[str] = None
    emergency_phone: Optional[str] = None
    special_requests: Optional[str] = None
    notes: Optional[str] = None
    status: GuestStatus = GuestStatus.NEW
    created_at: Optional[datetime] = None

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    @field_validator("status", mode="before")
    @classmethod
    def parse_status(cls, v):
        try:
            return GuestStatus(v)
        except ValueError:
            return GuestStatus.NEW

    @field_validator("name", "email", mode="before")
    @classmethod
    def parse_text(cls, v):
        return v or ""
