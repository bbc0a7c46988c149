"""Data transformation package."""

from src.transformers.booking_stitcher import BookingStitcher
from src.transformers.filters import filter_bookings, filter_guests, filter_properties
from src.transformers.formatting import format_money, format_percent, format_rating
from src.transformers.guest_stitcher import GuestStitcher
from src.transformers.metric_calculator import MetricCalculator, growth_rate, ratio
from src.transformers.monthly_aggregator import MONTHS, MonthlyAggregator, aggregate_finances

__all__ = [
    "BookingStitcher",
    "GuestStitcher",
    "MonthlyAggregator",
    "MONTHS",
    "aggregate_finances",
    "MetricCalculator",
    "ratio",
    "growth_rate",
    "filter_bookings",
    "filter_guests",
    "filter_properties",
    "format_money",
    "format_percent",
    "format_rating",
]
