from . import (
    booking_engine,
    booking_filters,
    booking_queries,
)
from .booking_engine import BookingQueryEngine

__all__ = [
    "booking_engine",
    "booking_filters",
    "booking_queries",
    "BookingQueryEngine",
]
