"""Pydantic models for the owner account rows."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict


class OwnerProfile(BaseModel):
    """Owner profile and branding (``hotel_owners`` table, keyed by auth user id)."""

    id: str
    email: Optional[str] = None
    full_name: Optional[str] = None
    phone: Optional[str] = None
    mobile: Optional[str] = None
    company_name: Optional[str] = None
    business_name: Optional[str] = None
    logo_url: Optional[str] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(extra="allow", populate_by_name=True)


class OwnerKyc(BaseModel):
    """Payout bank / PAN details (``owner_kyc`` table, one row per owner)."""

    user_id: str
    bank_name: Optional[str] = None
    bank_account_number: Optional[str] = None
    ifsc_code: Optional[str] = None
    pan_number: Optional[str] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(extra="allow", populate_by_name=True)
