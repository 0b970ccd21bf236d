# services/marina-service/src/apps/core/services/payment_service.py
"""
Payment Service

Payment schedule, overdue detection and penalty accrual.

Overdue status and penalties are evaluated lazily: every read of a past-due
open payment recomputes them and persists the result. Every write is a
version-guarded update so two requests cannot both settle the same payment.
"""

import logging
from datetime import date, timedelta
from decimal import Decimal
from typing import Any, Dict, List, Optional

from django.conf import settings
from django.db import transaction
from django.db.models import QuerySet
from django.utils import timezone

from apps.core.events import EventType, publish_payment_event
from apps.core.models import Booking, Payment
from ..exceptions import (
    PaymentConcurrencyError,
    PaymentNotFoundError,
    PaymentStateError,
)
from .pricing_service import LineItem, PriceQuote

logger = logging.getLogger(__name__)


class PaymentService:
    """
    Service for booking payments.

    Handles:
    - Payment scheduling for new bookings
    - Lazy overdue/penalty refresh on read
    - Settlement (paid, refunded) and booking confirmation hand-off
    """

    @property
    def penalty_daily_rate(self) -> Decimal:
        return Decimal(str(getattr(settings, 'MARINA_PENALTY_DAILY_RATE', '0.005')))

    @property
    def deposit_required(self) -> bool:
        return getattr(settings, 'MARINA_DEPOSIT_REQUIRED_FOR_CONFIRMATION', True)

    # ==========================================================================
    # Scheduling
    # ==========================================================================

    def schedule_payments(
        self,
        booking: Booking,
        quote: PriceQuote,
        payer_id: int,
        today: date = None,
    ) -> List[Payment]:
        """
        Create the payments of a new booking.

        One payment per quote line, plus a deposit payment (order 0, due
        today) when the quote carries a deposit. Non-deposit payments are
        always required for confirmation; the deposit follows
        MARINA_DEPOSIT_REQUIRED_FOR_CONFIRMATION.
        """
        today = today or timezone.localdate()
        currency = getattr(settings, 'MARINA_DEFAULT_CURRENCY', Payment.Currency.RUB)
        payments = []

        if quote.deposit_amount > 0:
            payments.append(Payment(
                booking=booking,
                payer_id=payer_id,
                amount=quote.deposit_amount,
                currency=currency,
                payment_type=Payment.PaymentType.DEPOSIT,
                payment_order=0,
                is_required=self.deposit_required,
                due_date=today,
            ))

        for order, item in enumerate(quote.monthly_breakdown, start=1):
            payments.append(Payment(
                booking=booking,
                payer_id=payer_id,
                amount=item.amount,
                currency=currency,
                payment_type=item.payment_type,
                payment_order=order,
                payment_month=item.month,
                is_required=True,
                due_date=self._due_date(booking, item, today),
            ))

        Payment.objects.bulk_create(payments)
        logger.info(f"Scheduled {len(payments)} payments for booking {booking.id}")
        return list(booking.payments.order_by('payment_order'))

    def _due_date(self, booking: Booking, item: LineItem, today: date) -> date:
        if item.month is not None:
            lead = getattr(settings, 'MARINA_MONTHLY_PAYMENT_LEAD_DAYS', 7)
            due = date(booking.club.season, item.month, 1) - timedelta(days=lead)
        else:
            lead = getattr(settings, 'MARINA_SEASON_PAYMENT_LEAD_DAYS', 14)
            due = booking.start_date - timedelta(days=lead)
        return max(due, today)

    # ==========================================================================
    # Reads (with lazy overdue refresh)
    # ==========================================================================

    def refresh_overdue(self, payment: Payment, as_of: date = None) -> Payment:
        """
        Bring a payment's overdue status and penalty up to date.

        Never raises on a lost race: the row is re-read instead.
        """
        as_of = as_of or timezone.localdate()
        if not payment.is_open or as_of <= payment.due_date:
            return payment

        penalty = payment.calculate_penalty(as_of, self.penalty_daily_rate)
        if payment.status == Payment.Status.OVERDUE and payment.penalty == penalty:
            return payment

        became_overdue = payment.status == Payment.Status.PENDING
        if not payment.update_if_current(status=Payment.Status.OVERDUE, penalty=penalty):
            payment.refresh_from_db()
            return payment

        if became_overdue:
            logger.info(
                f"Payment {payment.id} overdue by {payment.days_overdue(as_of)} days, "
                f"penalty {penalty}"
            )
            publish_payment_event(EventType.PAYMENT_OVERDUE, payment)
        return payment

    def refresh_overdue_queryset(self, queryset: QuerySet, as_of: date = None) -> int:
        """Refresh every open past-due payment in ``queryset``; returns how many."""
        as_of = as_of or timezone.localdate()
        stale = queryset.filter(
            status__in=[Payment.Status.PENDING, Payment.Status.OVERDUE],
            due_date__lt=as_of,
        )
        count = 0
        for payment in stale:
            self.refresh_overdue(payment, as_of)
            count += 1
        return count

    def get_payment(self, payment_id: int, as_of: date = None) -> Payment:
        """Get a payment by ID, refreshed."""
        try:
            payment = Payment.objects.select_related('booking', 'booking__club').get(id=payment_id)
        except Payment.DoesNotExist:
            raise PaymentNotFoundError(f"Payment {payment_id} not found")
        return self.refresh_overdue(payment, as_of)

    def list_payments(
        self,
        booking_id: int = None,
        club_id: int = None,
        payer_id: int = None,
        status: str = None,
        as_of: date = None,
    ) -> List[Payment]:
        """List payments; overdue refresh happens before the status filter."""
        queryset = Payment.objects.all()

        if booking_id:
            queryset = queryset.filter(booking_id=booking_id)
        if club_id:
            queryset = queryset.filter(booking__club_id=club_id)
        if payer_id:
            queryset = queryset.filter(payer_id=payer_id)

        self.refresh_overdue_queryset(queryset, as_of)

        if status:
            queryset = queryset.filter(status=status)

        return list(queryset.order_by('booking_id', 'payment_order'))

    def get_overdue_payments(self, club_id: int = None, as_of: date = None) -> List[Payment]:
        """All overdue payments, optionally of one club."""
        return self.list_payments(
            club_id=club_id,
            status=Payment.Status.OVERDUE,
            as_of=as_of,
        )

    def are_required_payments_paid(self, booking: Booking) -> bool:
        """
        True iff the booking has required payments and all of them are paid.
        """
        statuses = list(
            booking.payments.filter(is_required=True).values_list('status', flat=True)
        )
        return bool(statuses) and all(s == Payment.Status.PAID for s in statuses)

    def get_payment_schedule(self, booking: Booking, as_of: date = None) -> Dict[str, Any]:
        """Payments of a booking with running totals."""
        payments = self.list_payments(booking_id=booking.id, as_of=as_of)

        total_amount = sum((p.amount for p in payments), Decimal('0.00'))
        paid_amount = sum(
            (p.amount for p in payments if p.status == Payment.Status.PAID),
            Decimal('0.00'),
        )
        remaining_amount = sum((p.amount_due for p in payments), Decimal('0.00'))
        total_penalty = sum(
            (p.penalty + p.settled_penalty for p in payments),
            Decimal('0.00'),
        )
        open_payments = sorted(
            (p for p in payments if p.is_open),
            key=lambda p: (p.due_date, p.payment_order),
        )

        return {
            'booking_id': booking.id,
            'payments': payments,
            'total_amount': total_amount,
            'paid_amount': paid_amount,
            'remaining_amount': remaining_amount,
            'total_penalty': total_penalty,
            'next_payment_due': open_payments[0] if open_payments else None,
        }

    # ==========================================================================
    # Settlement
    # ==========================================================================

    @transaction.atomic
    def mark_paid(
        self,
        payment_id: int,
        transaction_id: str = None,
        paid_date: date = None,
        method: str = None,
    ) -> Payment:
        """
        Record a payment as paid and let the booking re-check confirmation.

        The penalty owed at this moment moves to ``settled_penalty``. Calling
        it again on a paid payment only updates the bookkeeping fields.

        Raises:
            PaymentStateError: If the payment was refunded
            PaymentConcurrencyError: If another request changed it meanwhile
        """
        from .booking_service import BookingService

        payment = self.get_payment(payment_id)

        if payment.status == Payment.Status.PAID:
            fields = {}
            if transaction_id:
                fields['transaction_id'] = transaction_id
            if paid_date:
                fields['paid_date'] = paid_date
            if fields and not payment.update_if_current(**fields):
                raise PaymentConcurrencyError(f"Payment {payment.id} was modified concurrently")
            BookingService().on_payment_status_changed(payment.booking)
            return payment

        if not payment.is_open:
            raise PaymentStateError(
                f"Cannot mark payment {payment.id} paid in {payment.status} status"
            )

        updated = payment.update_if_current(
            status=Payment.Status.PAID,
            paid_date=paid_date or timezone.localdate(),
            transaction_id=transaction_id,
            method=method or payment.method,
            settled_penalty=payment.penalty,
            penalty=Decimal('0.00'),
        )
        if not updated:
            raise PaymentConcurrencyError(f"Payment {payment.id} was modified concurrently")

        logger.info(
            f"Payment {payment.id} paid: {payment.amount} {payment.currency}"
            f" (penalty {payment.settled_penalty})"
        )
        publish_payment_event(EventType.PAYMENT_PAID, payment)

        BookingService().on_payment_status_changed(payment.booking)
        return payment

    @transaction.atomic
    def mark_refunded(self, payment_id: int, notes: str = None) -> Payment:
        """
        Record a refund.

        Raises:
            PaymentStateError: If the payment is already refunded
            PaymentConcurrencyError: If another request changed it meanwhile
        """
        from .booking_service import BookingService

        payment = self.get_payment(payment_id)

        if payment.status == Payment.Status.REFUNDED:
            raise PaymentStateError(f"Payment {payment.id} is already refunded")

        fields = {'status': Payment.Status.REFUNDED, 'penalty': Decimal('0.00')}
        if notes:
            fields['notes'] = notes
        if not payment.update_if_current(**fields):
            raise PaymentConcurrencyError(f"Payment {payment.id} was modified concurrently")

        logger.info(f"Payment {payment.id} refunded")
        publish_payment_event(EventType.PAYMENT_REFUNDED, payment)

        BookingService().on_payment_status_changed(payment.booking)
        return payment

    @transaction.atomic
    def void_open_payments(self, booking: Booking, notes: str = None) -> List[Payment]:
        """
        Close the open payments of a cancelled booking.

        PENDING and OVERDUE payments become REFUNDED with no penalty, so they
        no longer accrue or show up as overdue. Paid payments are untouched.
        """
        voided = []
        for payment in booking.payments.filter(
            status__in=[Payment.Status.PENDING, Payment.Status.OVERDUE],
        ):
            fields = {'status': Payment.Status.REFUNDED, 'penalty': Decimal('0.00')}
            if notes:
                fields['notes'] = notes
            if not payment.update_if_current(**fields):
                raise PaymentConcurrencyError(f"Payment {payment.id} was modified concurrently")
            publish_payment_event(EventType.PAYMENT_REFUNDED, payment)
            voided.append(payment)

        if voided:
            logger.info(f"Voided {len(voided)} open payments of booking {booking.id}")
        return voided
