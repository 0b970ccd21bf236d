# services/marina-service/src/apps/core/services/__init__.py
"""
Marina Service Business Logic
"""

from ..exceptions import (
    MarinaServiceError,
    NotFoundError,
    ClubNotFoundError,
    BerthNotFoundError,
    TariffNotFoundError,
    RuleNotFoundError,
    BookingNotFoundError,
    PaymentNotFoundError,
    RuleConfigurationError,
    PriceableOnlyWhenMonthsNonEmpty,
    BookingPeriodOutOfRange,
    BookingValidationError,
    MissingTariffSelection,
    TariffNotApplicable,
    BerthUnavailable,
    BerthAlreadyBooked,
    BookingStateError,
    TariffInUseError,
    PaymentStateError,
    PaymentConcurrencyError,
)
from .rule_service import RuleService, ResolvedRules
from .availability_service import AvailabilityService, is_bookable
from .pricing_service import PricingService, PriceQuote, LineItem, compute_price
from .tariff_service import TariffService
from .payment_service import PaymentService
from .booking_service import BookingService


__all__ = [
    # Services
    'RuleService',
    'AvailabilityService',
    'PricingService',
    'TariffService',
    'PaymentService',
    'BookingService',

    # Values
    'ResolvedRules',
    'PriceQuote',
    'LineItem',
    'is_bookable',
    'compute_price',

    # Exceptions
    'MarinaServiceError',
    'NotFoundError',
    'ClubNotFoundError',
    'BerthNotFoundError',
    'TariffNotFoundError',
    'RuleNotFoundError',
    'BookingNotFoundError',
    'PaymentNotFoundError',
    'RuleConfigurationError',
    'PriceableOnlyWhenMonthsNonEmpty',
    'BookingPeriodOutOfRange',
    'BookingValidationError',
    'MissingTariffSelection',
    'TariffNotApplicable',
    'BerthUnavailable',
    'BerthAlreadyBooked',
    'BookingStateError',
    'TariffInUseError',
    'PaymentStateError',
    'PaymentConcurrencyError',
]
