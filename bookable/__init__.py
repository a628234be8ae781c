"""Classification and overlap queries over time-bound bookings."""

import logging

from .config import get_settings
from .core.exceptions import BookingQueryError, InvalidIntervalError, UnparsableInstantError

__version__ = "1.0.0"


def configure_logging() -> None:
    logging.basicConfig(level=get_settings().log_level)


__all__ = [
    "BookingQueryError",
    "InvalidIntervalError",
    "UnparsableInstantError",
    "configure_logging",
    "get_settings",
]
