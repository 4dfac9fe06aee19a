from .booking_window import *
