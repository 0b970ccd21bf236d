# services/marina-service/src/apps/core/services/booking_service.py
"""
Booking Service

Booking lifecycle: creation against an available berth, confirmation once
the required payments are paid, and the administrative transitions.
"""

import logging
from datetime import date
from typing import List

from django.db import IntegrityError, transaction
from django.utils import timezone

from apps.core.events import EventType, publish_booking_event
from apps.core.models import Berth, Booking, Club, Tariff
from ..exceptions import (
    BerthAlreadyBooked,
    BerthUnavailable,
    BookingNotFoundError,
    BookingStateError,
    PriceableOnlyWhenMonthsNonEmpty,
)
from .availability_service import AvailabilityService, is_bookable
from .payment_service import PaymentService
from .pricing_service import (
    PricingService,
    booking_days,
    compute_daily_price,
    compute_price,
    validate_period,
)
from .rule_service import RuleService

logger = logging.getLogger(__name__)


class BookingService:
    """
    Service for managing bookings.

    Handles:
    - Booking creation (availability, rules, pricing, payment schedule)
    - Confirmation when required payments are paid
    - Cancel / activate / complete
    """

    def __init__(self):
        self.rule_service = RuleService()
        self.availability_service = AvailabilityService()
        self.pricing_service = PricingService(self.rule_service)
        self.payment_service = PaymentService()

    # ==========================================================================
    # Creation
    # ==========================================================================

    @transaction.atomic
    def create_booking(
        self,
        club: Club,
        berth: Berth,
        vessel_id: int,
        vessel_owner_id: int,
        start_date: date,
        end_date: date,
        tariff: Tariff = None,
        auto_renewal: bool = False,
        notes: str = None,
        today: date = None,
    ) -> Booking:
        """
        Create a PENDING booking and its scheduled payments.

        The availability read is advisory; the live booking constraint on
        the bookings table decides between concurrent writers, and the loser
        gets BerthAlreadyBooked.

        Raises:
            BookingValidationError: Bad dates or berth/club mismatch
            BerthUnavailable: Berth is administratively closed
            BerthAlreadyBooked: Berth has a live booking
            MissingTariffSelection: Berth has tariffs and none was selected
            TariffNotApplicable: Tariff is not linked to the berth
            BookingPeriodOutOfRange: Duration breaks a period rule
            PriceableOnlyWhenMonthsNonEmpty: Monthly tariff has no chargeable months
            RuleConfigurationError: An applicable rule is malformed
        """
        days = booking_days(start_date, end_date)

        # Serializes check+create per berth where the database supports it
        berth = Berth.objects.select_for_update().get(pk=berth.pk)

        if not berth.is_available:
            raise BerthUnavailable(f"Berth {berth.id} is not available for booking")

        live = self.availability_service.get_live_bookings(berth)
        if not is_bookable(berth, live):
            raise BerthAlreadyBooked(
                f"Berth {berth.id} already has a live booking",
                berth_id=berth.id,
            )

        tariff = self.pricing_service.select_tariff(club, berth, tariff)
        resolved = self.rule_service.resolve_rules(club, tariff)
        validate_period(days, resolved, club)

        if tariff is not None:
            quote = compute_price(club, berth, tariff, resolved)
        else:
            quote = compute_daily_price(club, berth, days, resolved)

        if not quote.priceable:
            raise PriceableOnlyWhenMonthsNonEmpty(
                f"Tariff {tariff.id} has no chargeable months for club {club.id}",
                tariff_id=tariff.id,
            )

        try:
            with transaction.atomic():
                booking = Booking.objects.create(
                    club=club,
                    berth=berth,
                    tariff=tariff,
                    vessel_id=vessel_id,
                    vessel_owner_id=vessel_owner_id,
                    start_date=start_date,
                    end_date=end_date,
                    status=Booking.Status.PENDING,
                    base_price=quote.base_price,
                    deposit_amount=quote.deposit_amount,
                    total_price=quote.total_price,
                    price_breakdown=quote.breakdown_json(),
                    applied_rule_ids=list(quote.applied_rule_ids),
                    auto_renewal=auto_renewal,
                    notes=notes,
                )
        except IntegrityError:
            if Booking.objects.filter(
                berth_id=berth.id,
                status__in=Booking.get_live_statuses(),
            ).exists():
                logger.warning(f"Lost booking race for berth {berth.id}")
                raise BerthAlreadyBooked(
                    f"Berth {berth.id} already has a live booking",
                    berth_id=berth.id,
                )
            raise

        self.payment_service.schedule_payments(booking, quote, vessel_owner_id, today)

        logger.info(
            f"Created booking {booking.id} for berth {berth.id}: "
            f"{booking.total_price} ({len(quote.monthly_breakdown)} lines)"
        )
        publish_booking_event(EventType.BOOKING_CREATED, booking)
        return booking

    # ==========================================================================
    # Reads
    # ==========================================================================

    def get_booking(self, booking_id: int) -> Booking:
        """Get a booking by ID."""
        try:
            return Booking.objects.select_related('club', 'berth', 'tariff').get(id=booking_id)
        except Booking.DoesNotExist:
            raise BookingNotFoundError(f"Booking {booking_id} not found")

    def list_bookings(
        self,
        club_id: int = None,
        berth_id: int = None,
        vessel_owner_id: int = None,
        status: str = None,
    ) -> List[Booking]:
        queryset = Booking.objects.select_related('berth')

        if club_id:
            queryset = queryset.filter(club_id=club_id)
        if berth_id:
            queryset = queryset.filter(berth_id=berth_id)
        if vessel_owner_id:
            queryset = queryset.filter(vessel_owner_id=vessel_owner_id)
        if status:
            queryset = queryset.filter(status=status)

        return list(queryset.order_by('-created_at'))

    # ==========================================================================
    # Status Transitions
    # ==========================================================================

    def on_payment_status_changed(self, booking: Booking) -> Booking:
        """
        Confirm a PENDING booking once all its required payments are paid.

        Safe to call any number of times; anything but a PENDING booking
        with every required payment paid is left untouched.
        """
        if not self.payment_service.are_required_payments_paid(booking):
            return booking

        now = timezone.now()
        updated = Booking.objects.filter(
            pk=booking.pk,
            status=Booking.Status.PENDING,
        ).update(
            status=Booking.Status.CONFIRMED,
            confirmed_at=now,
            updated_at=now,
        )
        booking.refresh_from_db()

        if updated:
            logger.info(f"Confirmed booking {booking.id}: required payments paid")
            publish_booking_event(EventType.BOOKING_CONFIRMED, booking)
        return booking

    @transaction.atomic
    def cancel_booking(
        self,
        booking_id: int,
        cancelled_by_id: int = None,
        reason: str = None,
    ) -> Booking:
        """Cancel a pending or confirmed booking."""
        booking = self._lock(booking_id)

        if not booking.can_cancel:
            raise BookingStateError(f"Cannot cancel booking in {booking.status} status")

        booking.cancel(cancelled_by_id=cancelled_by_id, reason=reason)
        self.payment_service.void_open_payments(booking, notes='Booking cancelled')

        logger.info(f"Cancelled booking {booking.id}")
        publish_booking_event(EventType.BOOKING_CANCELLED, booking)
        return booking

    @transaction.atomic
    def activate_booking(self, booking_id: int) -> Booking:
        """Mark a confirmed booking as active."""
        booking = self._lock(booking_id)

        if not booking.can_activate:
            raise BookingStateError(f"Cannot activate booking in {booking.status} status")

        booking.activate()

        logger.info(f"Activated booking {booking.id}")
        publish_booking_event(EventType.BOOKING_ACTIVATED, booking)
        return booking

    @transaction.atomic
    def complete_booking(self, booking_id: int) -> Booking:
        """Complete an active booking."""
        booking = self._lock(booking_id)

        if not booking.can_complete:
            raise BookingStateError(f"Cannot complete booking in {booking.status} status")

        booking.complete()

        logger.info(f"Completed booking {booking.id}")
        publish_booking_event(EventType.BOOKING_COMPLETED, booking)
        return booking

    def _lock(self, booking_id: int) -> Booking:
        try:
            return Booking.objects.select_for_update().get(id=booking_id)
        except Booking.DoesNotExist:
            raise BookingNotFoundError(f"Booking {booking_id} not found")
