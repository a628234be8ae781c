from .booking import Booking
