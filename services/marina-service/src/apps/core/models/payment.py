# services/marina-service/src/apps/core/models/payment.py
"""
Payment Model

Scheduled payments of a booking, with overdue penalty accrual.
"""

from datetime import date
from decimal import Decimal, ROUND_HALF_UP

from django.db import models

from shared.common.mixins import TimestampMixin, VersionedMixin
from .booking import Booking


class Payment(TimestampMixin, VersionedMixin):
    """
    Scheduled booking payment.

    ``penalty`` accrues only while the payment is overdue. Once paid, the
    last computed penalty is kept in ``settled_penalty`` and ``penalty``
    returns to zero. All state changes go through version-guarded updates.
    """

    class Status(models.TextChoices):
        PENDING = 'pending', 'Pending'
        PAID = 'paid', 'Paid'
        OVERDUE = 'overdue', 'Overdue'
        REFUNDED = 'refunded', 'Refunded'

    class PaymentType(models.TextChoices):
        DEPOSIT = 'deposit', 'Deposit'
        FULL = 'full', 'Full Season'
        MONTHLY = 'monthly', 'Monthly'
        DAILY = 'daily', 'Daily Rate'

    class Method(models.TextChoices):
        CASH = 'cash', 'Cash'
        CARD = 'card', 'Card'
        BANK_TRANSFER = 'bank_transfer', 'Bank Transfer'
        ONLINE = 'online', 'Online'

    class Currency(models.TextChoices):
        RUB = 'RUB', 'Russian Ruble'
        USD = 'USD', 'US Dollar'
        EUR = 'EUR', 'Euro'

    booking = models.ForeignKey(
        Booking,
        on_delete=models.CASCADE,
        related_name='payments'
    )
    payer_id = models.BigIntegerField(db_index=True)

    amount = models.DecimalField(max_digits=12, decimal_places=2)
    currency = models.CharField(
        max_length=3,
        choices=Currency.choices,
        default=Currency.RUB
    )
    method = models.CharField(
        max_length=20,
        choices=Method.choices,
        blank=True,
        null=True
    )

    # Schedule
    payment_type = models.CharField(
        max_length=20,
        choices=PaymentType.choices
    )
    payment_order = models.PositiveSmallIntegerField(default=1)
    payment_month = models.PositiveSmallIntegerField(blank=True, null=True)
    is_required = models.BooleanField(
        default=True,
        help_text="Must be paid before the booking is confirmed"
    )
    due_date = models.DateField(db_index=True)

    status = models.CharField(
        max_length=20,
        choices=Status.choices,
        default=Status.PENDING,
        db_index=True
    )
    paid_date = models.DateField(blank=True, null=True)
    transaction_id = models.CharField(max_length=255, blank=True, null=True)

    penalty = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal('0.00')
    )
    settled_penalty = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal('0.00'),
        help_text="Penalty owed at the moment the payment was settled"
    )

    notes = models.TextField(blank=True, null=True)

    class Meta:
        db_table = 'payments'
        ordering = ['booking', 'payment_order']
        indexes = [
            models.Index(fields=['booking', 'status']),
            models.Index(fields=['status', 'due_date']),
        ]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(penalty=0) | models.Q(status='overdue'),
                name='penalty_only_when_overdue'
            ),
        ]

    def __str__(self):
        return f"Payment {self.pk}: {self.amount} {self.currency} ({self.status})"

    # ==========================================================================
    # Properties
    # ==========================================================================

    @property
    def is_open(self) -> bool:
        """Still expecting money."""
        return self.status in [self.Status.PENDING, self.Status.OVERDUE]

    @property
    def amount_due(self) -> Decimal:
        if not self.is_open:
            return Decimal('0.00')
        return self.amount + self.penalty

    def days_overdue(self, as_of: date) -> int:
        if as_of <= self.due_date:
            return 0
        return (as_of - self.due_date).days

    def calculate_penalty(self, as_of: date, daily_rate: Decimal) -> Decimal:
        """Simple interest on the amount for each day past the due date."""
        penalty = self.amount * daily_rate * self.days_overdue(as_of)
        return penalty.quantize(Decimal('0.01'), rounding=ROUND_HALF_UP)
