# services/marina-service/src/apps/api/views/__init__.py
"""
Marina API Views
"""

from .club_views import (
    ClubViewSet,
    BerthViewSet,
)

from .tariff_views import (
    TariffViewSet,
)

from .rule_views import (
    BookingRuleViewSet,
)

from .booking_views import (
    BookingViewSet,
    QuoteView,
)

from .payment_views import (
    PaymentViewSet,
)


__all__ = [
    # Clubs and berths
    'ClubViewSet',
    'BerthViewSet',

    # Tariffs
    'TariffViewSet',

    # Rules
    'BookingRuleViewSet',

    # Bookings
    'BookingViewSet',
    'QuoteView',

    # Payments
    'PaymentViewSet',
]
