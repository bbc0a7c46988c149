"""Report models for the home dashboard and the property listings."""

from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from src.models.report.booking import RecentBooking
from src.models.store import Property

ZERO = Decimal("0")


class DashboardStats(BaseModel):
    total_bookings: int = Field(default=0, alias="totalBookings")
    total_revenue: Decimal = Field(default=ZERO, alias="totalRevenue")
    check_ins_today: int = Field(default=0, alias="checkInsToday")
    check_outs_today: int = Field(default=0, alias="checkOutsToday")
    pending_check_ins: int = Field(default=0, alias="pendingCheckIns")
    pending_check_outs: int = Field(default=0, alias="pendingCheckOuts")
    booking_growth: Decimal = Field(default=ZERO, alias="bookingGrowth")
    revenue_growth: Decimal = Field(default=ZERO, alias="revenueGrowth")

    model_config = ConfigDict(populate_by_name=True)


class DashboardReport(BaseModel):
    """Output of the dashboard pipeline."""

    business_name: str = Field(default="", alias="businessName")
    logo_url: str = Field(default="", alias="logoUrl")
    stats: DashboardStats = Field(default_factory=DashboardStats)
    recent_bookings: list[RecentBooking] = Field(
        default_factory=list, alias="recentBookings"
    )

    model_config = ConfigDict(populate_by_name=True)


class PropertyListing(BaseModel):
    """A property with its room capacity."""

    hotel: Property = Field(alias="property")
    room_type_count: int = Field(default=0, alias="roomTypeCount")
    total_rooms: int = Field(default=0, alias="totalRooms")
    occupied_rooms: int = Field(default=0, alias="occupiedRooms")

    model_config = ConfigDict(populate_by_name=True)


class PropertyStats(BaseModel):
    total_properties: int = Field(default=0, alias="totalProperties")
    active_properties: int = Field(default=0, alias="activeProperties")
    total_rooms: int = Field(default=0, alias="totalRooms")
    available_rooms: int = Field(default=0, alias="availableRooms")
    occupancy_rate: Decimal = Field(default=ZERO, alias="occupancyRate")

    model_config = ConfigDict(populate_by_name=True)


class PropertiesReport(BaseModel):
    """Output of the properties pipeline."""

    properties: list[PropertyListing] = Field(default_factory=list)
    stats: PropertyStats = Field(default_factory=PropertyStats)
    status_filter: Optional[str] = Field(default=None, alias="statusFilter")

    model_config = ConfigDict(populate_by_name=True)
