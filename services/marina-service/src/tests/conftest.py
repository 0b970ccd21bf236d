# services/marina-service/src/tests/conftest.py
"""
Pytest Configuration and Fixtures

Provides common fixtures for marina service tests.
"""

from datetime import date, timedelta
from decimal import Decimal

import pytest
from django.utils import timezone
from rest_framework.test import APIClient

from shared.common.authentication import generate_access_token
from shared.common.permissions import Roles


SEASON = 2030


@pytest.fixture
def api_client():
    """Provide API client for testing."""
    return APIClient()


@pytest.fixture
def owner_id():
    """User id of the club owner."""
    return 100


@pytest.fixture
def vessel_owner_id():
    """User id of a vessel owner."""
    return 200


@pytest.fixture
def today():
    return timezone.localdate()


@pytest.fixture
def auth_client():
    """Factory for API clients carrying a signed access token."""

    def _auth_client(user_id, roles):
        client = APIClient()
        token = generate_access_token(user_id, roles)
        client.credentials(HTTP_AUTHORIZATION=f'Bearer {token}')
        return client

    return _auth_client


@pytest.fixture
def owner_client(auth_client, owner_id):
    return auth_client(owner_id, [Roles.CLUB_OWNER])


@pytest.fixture
def vessel_owner_client(auth_client, vessel_owner_id):
    return auth_client(vessel_owner_id, [Roles.VESSEL_OWNER])


@pytest.fixture
def admin_client(auth_client):
    return auth_client(1, [Roles.ADMIN])


# =============================================================================
# Model factories
# =============================================================================

@pytest.fixture
def club(owner_id):
    """A club whose navigation season runs May through September."""
    from apps.core.models import Club

    return Club.objects.create(
        name='North Harbour Yacht Club',
        owner_id=owner_id,
        season=SEASON,
        rental_months=[5, 6, 7, 8, 9],
        base_price=Decimal('1000.00'),
    )


@pytest.fixture
def create_berth(club):
    """Factory fixture for creating berths."""
    from apps.core.models import Berth

    counter = {'n': 0}

    def _create_berth(**kwargs):
        counter['n'] += 1
        defaults = {
            'club': club,
            'number': f'A-{counter["n"]}',
            'length': Decimal('12.00'),
            'width': Decimal('4.00'),
        }
        defaults.update(kwargs)

        return Berth.objects.create(**defaults)

    return _create_berth


@pytest.fixture
def berth(create_berth):
    return create_berth()


@pytest.fixture
def create_tariff(club):
    """Factory fixture for creating tariffs linked to berths."""
    from apps.core.models import Tariff, TariffBerth

    def _create_tariff(berths=(), **kwargs):
        defaults = {
            'club': club,
            'name': 'Summer Monthly',
            'tariff_type': Tariff.TariffType.MONTHLY_PAYMENT,
            'amount': Decimal('10000.00'),
            'season': SEASON,
            'months': [6, 7, 8],
        }
        defaults.update(kwargs)

        tariff = Tariff.objects.create(**defaults)
        for berth in berths:
            TariffBerth.objects.create(tariff=tariff, berth=berth)
        return tariff

    return _create_tariff


@pytest.fixture
def monthly_tariff(create_tariff, berth):
    """10000 per month for June, July and August."""
    return create_tariff(berths=[berth])


@pytest.fixture
def season_tariff(create_tariff, berth):
    """One lump sum of 150000 for the season."""
    from apps.core.models import Tariff

    return create_tariff(
        berths=[berth],
        name='Full Season',
        tariff_type=Tariff.TariffType.SEASON_PAYMENT,
        amount=Decimal('150000.00'),
        months=[],
    )


@pytest.fixture
def create_rule(club):
    """Factory fixture for creating booking rules without validation."""
    from apps.core.models import BookingRule

    def _create_rule(rule_type, parameters=None, **kwargs):
        defaults = {
            'club': club,
            'rule_type': rule_type,
            'parameters': parameters if parameters is not None else {},
        }
        defaults.update(kwargs)

        return BookingRule.objects.create(**defaults)

    return _create_rule


@pytest.fixture
def season_dates():
    """A booking period covering the whole season."""
    return date(SEASON, 5, 1), date(SEASON, 9, 30)


@pytest.fixture
def create_booking(club, berth, vessel_owner_id, season_dates):
    """Factory fixture for creating bookings directly."""
    from apps.core.models import Booking

    def _create_booking(**kwargs):
        start_date, end_date = season_dates
        defaults = {
            'club': club,
            'berth': berth,
            'vessel_id': 1,
            'vessel_owner_id': vessel_owner_id,
            'start_date': start_date,
            'end_date': end_date,
            'status': Booking.Status.PENDING,
            'base_price': Decimal('30000.00'),
            'total_price': Decimal('30000.00'),
        }
        defaults.update(kwargs)

        return Booking.objects.create(**defaults)

    return _create_booking


@pytest.fixture
def create_payment(create_booking, vessel_owner_id, today):
    """Factory fixture for creating payments; creates a booking when none is given."""
    from apps.core.models import Payment

    def _create_payment(booking=None, **kwargs):
        defaults = {
            'booking': booking or create_booking(),
            'payer_id': vessel_owner_id,
            'amount': Decimal('10000.00'),
            'payment_type': Payment.PaymentType.MONTHLY,
            'due_date': today + timedelta(days=30),
            'status': Payment.Status.PENDING,
        }
        defaults.update(kwargs)

        return Payment.objects.create(**defaults)

    return _create_payment
