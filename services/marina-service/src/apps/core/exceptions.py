# services/marina-service/src/apps/core/exceptions.py
"""
Marina Service Exceptions

Domain errors raised by the booking and pricing engine. Every error is
client-visible: views translate it into a response using ``status_code``
and ``error_code``; nothing here is retried automatically.
"""


class MarinaServiceError(Exception):
    """Base exception for marina service errors."""

    status_code = 400
    error_code = 'marina_error'

    def __init__(self, message: str = None, **extra):
        self.message = message or self.__class__.__doc__.strip()
        self.extra = extra
        super().__init__(self.message)


# =============================================================================
# Lookups
# =============================================================================

class NotFoundError(MarinaServiceError):
    """Object not found."""
    status_code = 404
    error_code = 'not_found'


class ClubNotFoundError(NotFoundError):
    """Club not found."""


class BerthNotFoundError(NotFoundError):
    """Berth not found."""


class TariffNotFoundError(NotFoundError):
    """Tariff not found."""


class RuleNotFoundError(NotFoundError):
    """Booking rule not found."""


class BookingNotFoundError(NotFoundError):
    """Booking not found."""


class PaymentNotFoundError(NotFoundError):
    """Payment not found."""


# =============================================================================
# Rules and Pricing
# =============================================================================

class RuleConfigurationError(MarinaServiceError):
    """Booking rule parameters do not match the rule type."""
    status_code = 422
    error_code = 'rule_configuration_error'

    def __init__(self, message: str = None, rule_id=None):
        self.rule_id = rule_id
        if rule_id is not None and message:
            message = f"Rule {rule_id}: {message}"
        super().__init__(message, rule_id=rule_id)


class PriceableOnlyWhenMonthsNonEmpty(MarinaServiceError):
    """Tariff resolves to no chargeable months."""
    status_code = 422
    error_code = 'no_chargeable_months'


class BookingPeriodOutOfRange(MarinaServiceError):
    """Requested booking duration is outside the allowed period."""
    error_code = 'booking_period_out_of_range'


# =============================================================================
# Booking Creation
# =============================================================================

class BookingValidationError(MarinaServiceError):
    """Booking validation failed."""
    error_code = 'validation_error'


class MissingTariffSelection(MarinaServiceError):
    """Berth has tariffs but none was selected."""
    error_code = 'missing_tariff_selection'


class TariffNotApplicable(MarinaServiceError):
    """Tariff is not linked to the berth."""
    error_code = 'tariff_not_applicable'


class BerthUnavailable(MarinaServiceError):
    """Berth is not available for booking."""
    status_code = 409
    error_code = 'berth_unavailable'


class BerthAlreadyBooked(MarinaServiceError):
    """Berth already has a live booking."""
    status_code = 409
    error_code = 'berth_already_booked'


# =============================================================================
# State Machines
# =============================================================================

class BookingStateError(MarinaServiceError):
    """Invalid booking state transition."""
    status_code = 409
    error_code = 'invalid_booking_state'


class TariffInUseError(MarinaServiceError):
    """Tariff is referenced by bookings and cannot be deleted."""
    status_code = 409
    error_code = 'tariff_in_use'


class PaymentStateError(MarinaServiceError):
    """Invalid payment state transition."""
    status_code = 409
    error_code = 'invalid_payment_state'


class PaymentConcurrencyError(MarinaServiceError):
    """Payment was modified by another request."""
    status_code = 409
    error_code = 'payment_modified'
