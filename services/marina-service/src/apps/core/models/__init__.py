# services/marina-service/src/apps/core/models/__init__.py
"""
Marina Service Models
"""

from .club import Club, Berth
from .tariff import Tariff, TariffBerth
from .booking_rule import BookingRule
from .booking import Booking
from .payment import Payment

__all__ = [
    'Club',
    'Berth',
    'Tariff',
    'TariffBerth',
    'BookingRule',
    'Booking',
    'Payment',
]
