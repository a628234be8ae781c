from .owner import OwnerRef
from .booking import Booking, BookingState
