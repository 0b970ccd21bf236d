# services/marina-service/src/tests/unit/test_bookings.py
"""
Unit Tests for Booking Lifecycle and Availability

Tests for booking creation, confirmation and status transitions.
"""

from datetime import date, timedelta
from decimal import Decimal
from unittest.mock import patch

import pytest
from django.db import IntegrityError, transaction

from apps.core.events import EventType
from apps.core.models import Booking, BookingRule, Payment
from apps.core.services import (
    AvailabilityService,
    BookingService,
    is_bookable,
    BerthAlreadyBooked,
    BerthNotFoundError,
    BerthUnavailable,
    BookingNotFoundError,
    BookingPeriodOutOfRange,
    BookingStateError,
    BookingValidationError,
    MissingTariffSelection,
    PriceableOnlyWhenMonthsNonEmpty,
    RuleConfigurationError,
)


RuleType = BookingRule.RuleType


@pytest.mark.django_db
class TestAvailability:
    """Tests for the availability checker."""

    def setup_method(self):
        self.service = AvailabilityService()

    def test_free_berth_is_bookable(self, berth):
        result = self.service.check_berth(berth)

        assert result == {
            'berth_id': berth.id,
            'bookable': True,
            'status': 'available',
            'live_booking_ids': [],
        }

    @pytest.mark.parametrize('status,bookable,label', [
        (Booking.Status.PENDING, False, 'pending'),
        (Booking.Status.CONFIRMED, False, 'booked'),
        (Booking.Status.ACTIVE, False, 'booked'),
        (Booking.Status.COMPLETED, True, 'available'),
        (Booking.Status.CANCELLED, True, 'available'),
    ])
    def test_live_bookings_block_the_berth(self, berth, create_booking, status, bookable, label):
        create_booking(status=status)

        result = self.service.check_berth(berth)

        assert result['bookable'] is bookable
        assert result['status'] == label

    def test_closed_berth(self, create_berth):
        berth = create_berth(is_available=False)

        assert is_bookable(berth, []) is False
        assert self.service.check_berth(berth)['status'] == 'unavailable'

    def test_bookings_of_other_berths_are_ignored(self, berth, create_berth, create_booking):
        other = create_berth()
        booking = create_booking(berth=other)

        assert is_bookable(berth, [booking]) is True

    def test_club_availability(self, club, berth, create_berth, create_booking):
        taken = create_berth()
        booking = create_booking(berth=taken, status=Booking.Status.CONFIRMED)

        results = {r['berth_id']: r for r in self.service.get_club_availability(club)}

        assert results[berth.id]['bookable'] is True
        assert results[taken.id]['bookable'] is False
        assert results[taken.id]['live_booking_ids'] == [booking.id]

    def test_get_missing_berth(self):
        with pytest.raises(BerthNotFoundError):
            self.service.get_berth(99999)


@pytest.mark.django_db
class TestCreateBooking:
    """Tests for BookingService.create_booking."""

    def setup_method(self):
        self.service = BookingService()

    def _create(self, club, berth, vessel_owner_id, season_dates, **kwargs):
        start_date, end_date = season_dates
        params = {
            'club': club,
            'berth': berth,
            'vessel_id': 7,
            'vessel_owner_id': vessel_owner_id,
            'start_date': start_date,
            'end_date': end_date,
        }
        params.update(kwargs)
        return self.service.create_booking(**params)

    def test_create_booking_success(
        self, club, berth, monthly_tariff, vessel_owner_id, season_dates
    ):
        booking = self._create(club, berth, vessel_owner_id, season_dates, tariff=monthly_tariff)

        assert booking.status == Booking.Status.PENDING
        assert booking.total_price == Decimal('30000.00')
        assert [line['month'] for line in booking.price_breakdown] == [6, 7, 8]

        payments = list(booking.payments.order_by('payment_order'))
        assert [p.payment_month for p in payments] == [6, 7, 8]
        assert all(p.payer_id == vessel_owner_id for p in payments)
        assert all(p.status == Payment.Status.PENDING for p in payments)

    def test_create_booking_with_deposit(
        self, club, berth, season_tariff, create_rule, vessel_owner_id, season_dates
    ):
        rule = create_rule(RuleType.REQUIRE_DEPOSIT, {'deposit_amount': 20000})

        booking = self._create(club, berth, vessel_owner_id, season_dates, tariff=season_tariff)

        assert booking.total_price == Decimal('170000.00')
        assert booking.deposit_amount == Decimal('20000.00')
        assert booking.applied_rule_ids == [rule.id]

        deposit, full = booking.payments.order_by('payment_order')
        assert deposit.payment_type == Payment.PaymentType.DEPOSIT
        assert deposit.amount == Decimal('20000.00')
        assert full.payment_type == Payment.PaymentType.FULL
        assert full.amount == Decimal('150000.00')

    def test_second_booking_of_berth_fails(
        self, club, berth, monthly_tariff, vessel_owner_id, season_dates
    ):
        self._create(club, berth, vessel_owner_id, season_dates, tariff=monthly_tariff)

        with pytest.raises(BerthAlreadyBooked):
            self._create(club, berth, vessel_owner_id + 1, season_dates, tariff=monthly_tariff)

        assert Booking.objects.filter(berth=berth).count() == 1

    def test_race_lost_at_insert(
        self, club, berth, monthly_tariff, vessel_owner_id, season_dates
    ):
        """Both writers saw a free berth; the live booking constraint decides."""
        first = self._create(club, berth, vessel_owner_id, season_dates, tariff=monthly_tariff)

        with patch.object(AvailabilityService, 'get_live_bookings', return_value=[]):
            with pytest.raises(BerthAlreadyBooked):
                self._create(
                    club, berth, vessel_owner_id + 1, season_dates, tariff=monthly_tariff
                )

        live = Booking.objects.filter(berth=berth, status__in=Booking.get_live_statuses())
        assert list(live) == [first]
        assert Payment.objects.filter(booking__berth=berth).count() == 3

    def test_rebook_after_cancellation(
        self, club, berth, monthly_tariff, vessel_owner_id, season_dates
    ):
        first = self._create(club, berth, vessel_owner_id, season_dates, tariff=monthly_tariff)
        self.service.cancel_booking(first.id)

        second = self._create(club, berth, vessel_owner_id, season_dates, tariff=monthly_tariff)

        assert second.status == Booking.Status.PENDING

    def test_closed_berth(self, club, create_berth, vessel_owner_id, season_dates):
        berth = create_berth(is_available=False)

        with pytest.raises(BerthUnavailable):
            self._create(club, berth, vessel_owner_id, season_dates)

    def test_missing_tariff_selection(
        self, club, berth, monthly_tariff, vessel_owner_id, season_dates
    ):
        with pytest.raises(MissingTariffSelection):
            self._create(club, berth, vessel_owner_id, season_dates)

        assert not Booking.objects.exists()

    def test_period_out_of_range(
        self, club, berth, monthly_tariff, create_rule, vessel_owner_id
    ):
        create_rule(RuleType.MIN_BOOKING_PERIOD, {'min_period': 60})

        with pytest.raises(BookingPeriodOutOfRange):
            self._create(
                club, berth, vessel_owner_id,
                (date(2030, 6, 1), date(2030, 6, 30)),
                tariff=monthly_tariff,
            )

    def test_end_before_start(self, club, berth, vessel_owner_id):
        with pytest.raises(BookingValidationError):
            self._create(
                club, berth, vessel_owner_id,
                (date(2030, 6, 10), date(2030, 6, 1)),
            )

    def test_no_chargeable_months(
        self, club, berth, monthly_tariff, create_rule, vessel_owner_id, season_dates
    ):
        create_rule(RuleType.REQUIRE_PAYMENT_MONTHS, {'months': [12]})

        with pytest.raises(PriceableOnlyWhenMonthsNonEmpty):
            self._create(club, berth, vessel_owner_id, season_dates, tariff=monthly_tariff)

        assert not Booking.objects.exists()

    def test_malformed_rule_blocks_booking(
        self, club, berth, monthly_tariff, create_rule, vessel_owner_id, season_dates
    ):
        create_rule(RuleType.MAX_BOOKING_PERIOD, {'max_period': 'forever'})

        with pytest.raises(RuleConfigurationError):
            self._create(club, berth, vessel_owner_id, season_dates, tariff=monthly_tariff)

    def test_daily_rate_booking(self, club, create_berth, vessel_owner_id):
        berth = create_berth(price_per_day=Decimal('300.00'))

        booking = self._create(
            club, berth, vessel_owner_id,
            (date(2030, 6, 1), date(2030, 6, 10)),
        )

        assert booking.tariff is None
        assert booking.total_price == Decimal('3000.00')
        payment = booking.payments.get()
        assert payment.payment_type == Payment.PaymentType.DAILY
        assert payment.due_date == date(2030, 5, 18)

    def test_created_event_after_commit(
        self, club, berth, monthly_tariff, vessel_owner_id, season_dates,
        django_capture_on_commit_callbacks
    ):
        from apps.core.events import event_publisher

        with patch.object(event_publisher, 'publish') as publish:
            with django_capture_on_commit_callbacks(execute=True):
                booking = self._create(
                    club, berth, vessel_owner_id, season_dates, tariff=monthly_tariff
                )

        publish.assert_called_once()
        event_type, payload = publish.call_args[0]
        assert event_type == EventType.BOOKING_CREATED
        assert payload['booking_id'] == booking.id


@pytest.mark.django_db
class TestLiveBookingConstraint:
    """The database refuses a second live booking for a berth."""

    def test_duplicate_live_booking(self, berth, create_booking):
        create_booking(status=Booking.Status.CONFIRMED)

        with pytest.raises(IntegrityError):
            with transaction.atomic():
                create_booking(status=Booking.Status.PENDING)

    def test_terminal_bookings_do_not_count(self, berth, create_booking):
        create_booking(status=Booking.Status.CANCELLED)
        create_booking(status=Booking.Status.COMPLETED)
        create_booking(status=Booking.Status.PENDING)

        assert Booking.objects.filter(berth=berth).count() == 3


@pytest.mark.django_db
class TestBookingTransitions:
    """Tests for confirmation, cancellation, activation and completion."""

    def setup_method(self):
        self.service = BookingService()

    def test_confirms_when_required_payments_paid(self, create_booking, create_payment):
        booking = create_booking()
        create_payment(booking=booking, status=Payment.Status.PAID)
        create_payment(booking=booking, status=Payment.Status.PAID, payment_order=2)

        booking = self.service.on_payment_status_changed(booking)

        assert booking.status == Booking.Status.CONFIRMED
        assert booking.confirmed_at is not None

    def test_confirmation_is_idempotent(self, create_booking, create_payment):
        booking = create_booking()
        create_payment(booking=booking, status=Payment.Status.PAID)

        first = self.service.on_payment_status_changed(booking)
        confirmed_at = first.confirmed_at
        second = self.service.on_payment_status_changed(booking)

        assert second.status == Booking.Status.CONFIRMED
        assert second.confirmed_at == confirmed_at

    def test_stays_pending_with_open_required_payment(self, create_booking, create_payment):
        booking = create_booking()
        create_payment(booking=booking, status=Payment.Status.PAID)
        create_payment(booking=booking, payment_order=2)

        booking = self.service.on_payment_status_changed(booking)

        assert booking.status == Booking.Status.PENDING

    def test_optional_payments_do_not_block(self, create_booking, create_payment):
        booking = create_booking()
        create_payment(booking=booking, status=Payment.Status.PAID)
        create_payment(
            booking=booking,
            payment_type=Payment.PaymentType.DEPOSIT,
            payment_order=0,
            is_required=False,
        )

        booking = self.service.on_payment_status_changed(booking)

        assert booking.status == Booking.Status.CONFIRMED

    def test_no_required_payments_never_confirms(self, create_booking):
        booking = self.service.on_payment_status_changed(create_booking())

        assert booking.status == Booking.Status.PENDING

    def test_cancelled_booking_is_not_confirmed(self, create_booking, create_payment):
        booking = create_booking(status=Booking.Status.CANCELLED)
        create_payment(booking=booking, status=Payment.Status.PAID)

        booking = self.service.on_payment_status_changed(booking)

        assert booking.status == Booking.Status.CANCELLED

    def test_cancel(self, create_booking):
        booking = create_booking()

        cancelled = self.service.cancel_booking(booking.id, cancelled_by_id=5, reason='Sold boat')

        assert cancelled.status == Booking.Status.CANCELLED
        assert cancelled.cancelled_by_id == 5
        assert cancelled.cancellation_reason == 'Sold boat'

    def test_cancel_closes_open_payments(self, create_booking, create_payment, today):
        from apps.core.services import PaymentService

        booking = create_booking()
        paid = create_payment(booking=booking, status=Payment.Status.PAID)
        late = create_payment(
            booking=booking,
            payment_order=2,
            due_date=today - timedelta(days=10),
        )
        upcoming = create_payment(booking=booking, payment_order=3)

        self.service.cancel_booking(booking.id)

        payment_service = PaymentService()
        late = payment_service.get_payment(late.id, as_of=today)
        assert late.status == Payment.Status.REFUNDED
        assert late.penalty == Decimal('0.00')
        upcoming.refresh_from_db()
        assert upcoming.status == Payment.Status.REFUNDED
        paid.refresh_from_db()
        assert paid.status == Payment.Status.PAID
        assert payment_service.get_overdue_payments(club_id=booking.club_id, as_of=today) == []

    def test_cannot_cancel_twice(self, create_booking):
        booking = create_booking(status=Booking.Status.CANCELLED)

        with pytest.raises(BookingStateError):
            self.service.cancel_booking(booking.id)

    def test_activate_and_complete(self, create_booking):
        booking = create_booking(status=Booking.Status.CONFIRMED)

        booking = self.service.activate_booking(booking.id)
        assert booking.status == Booking.Status.ACTIVE
        assert booking.activated_at is not None

        booking = self.service.complete_booking(booking.id)
        assert booking.status == Booking.Status.COMPLETED
        assert booking.completed_at is not None

    def test_activate_requires_confirmation(self, create_booking):
        booking = create_booking()

        with pytest.raises(BookingStateError):
            self.service.activate_booking(booking.id)

    def test_complete_requires_active(self, create_booking):
        booking = create_booking(status=Booking.Status.CONFIRMED)

        with pytest.raises(BookingStateError):
            self.service.complete_booking(booking.id)

    def test_missing_booking(self):
        with pytest.raises(BookingNotFoundError):
            self.service.get_booking(99999)
