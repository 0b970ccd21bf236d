# services/marina-service/src/apps/api/serializers/__init__.py
"""
Marina API Serializers
"""

from .tariff_serializers import (
    ClubSerializer,
    BerthSerializer,
    BerthAvailabilitySerializer,
    TariffSerializer,
    TariffCreateSerializer,
    TariffUpdateSerializer,
)

from .rule_serializers import (
    BookingRuleSerializer,
    BookingRuleCreateSerializer,
    BookingRuleUpdateSerializer,
)

from .booking_serializers import (
    BookingSerializer,
    BookingListSerializer,
    BookingCreateSerializer,
    BookingCancelSerializer,
    QuoteRequestSerializer,
    PriceQuoteSerializer,
)

from .payment_serializers import (
    PaymentSerializer,
    MarkPaidSerializer,
    RefundSerializer,
    PaymentScheduleSerializer,
)

__all__ = [
    'ClubSerializer',
    'BerthSerializer',
    'BerthAvailabilitySerializer',
    'TariffSerializer',
    'TariffCreateSerializer',
    'TariffUpdateSerializer',
    'BookingRuleSerializer',
    'BookingRuleCreateSerializer',
    'BookingRuleUpdateSerializer',
    'BookingSerializer',
    'BookingListSerializer',
    'BookingCreateSerializer',
    'BookingCancelSerializer',
    'QuoteRequestSerializer',
    'PriceQuoteSerializer',
    'PaymentSerializer',
    'MarkPaidSerializer',
    'RefundSerializer',
    'PaymentScheduleSerializer',
]
