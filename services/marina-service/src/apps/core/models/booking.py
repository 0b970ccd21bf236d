# services/marina-service/src/apps/core/models/booking.py
"""
Booking Model

Berth reservations for a club season.
"""

from decimal import Decimal

from django.db import models
from django.db.models import Q
from django.utils import timezone

from shared.common.mixins import TimestampMixin
from .club import Berth, Club
from .tariff import Tariff


LIVE_STATUSES = ('pending', 'confirmed', 'active')


class Booking(TimestampMixin):
    """
    Berth booking.

    At most one live booking (pending, confirmed or active) may exist per
    berth; the partial unique constraint below enforces it in storage.
    """

    class Status(models.TextChoices):
        PENDING = 'pending', 'Pending'
        CONFIRMED = 'confirmed', 'Confirmed'
        ACTIVE = 'active', 'Active'
        COMPLETED = 'completed', 'Completed'
        CANCELLED = 'cancelled', 'Cancelled'

    club = models.ForeignKey(
        Club,
        on_delete=models.PROTECT,
        related_name='bookings'
    )
    berth = models.ForeignKey(
        Berth,
        on_delete=models.PROTECT,
        related_name='bookings'
    )
    tariff = models.ForeignKey(
        Tariff,
        on_delete=models.PROTECT,
        related_name='bookings',
        blank=True,
        null=True
    )

    # External references
    vessel_id = models.BigIntegerField(db_index=True)
    vessel_owner_id = models.BigIntegerField(db_index=True)

    # Period (inclusive)
    start_date = models.DateField()
    end_date = models.DateField()

    status = models.CharField(
        max_length=20,
        choices=Status.choices,
        default=Status.PENDING,
        db_index=True
    )

    # Price snapshot of the accepted quote
    base_price = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal('0.00')
    )
    deposit_amount = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal('0.00')
    )
    total_price = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal('0.00')
    )
    price_breakdown = models.JSONField(default=list, blank=True)
    applied_rule_ids = models.JSONField(default=list, blank=True)

    auto_renewal = models.BooleanField(default=False)
    notes = models.TextField(blank=True, null=True)
    contract_path = models.CharField(max_length=500, blank=True, null=True)

    # Transitions
    confirmed_at = models.DateTimeField(blank=True, null=True)
    activated_at = models.DateTimeField(blank=True, null=True)
    completed_at = models.DateTimeField(blank=True, null=True)
    cancelled_at = models.DateTimeField(blank=True, null=True)
    cancelled_by_id = models.BigIntegerField(blank=True, null=True)
    cancellation_reason = models.TextField(blank=True, null=True)

    class Meta:
        db_table = 'bookings'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['club', 'status']),
            models.Index(fields=['berth', 'status']),
            models.Index(fields=['vessel_owner_id', 'status']),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=['berth'],
                condition=Q(status__in=LIVE_STATUSES),
                name='one_live_booking_per_berth'
            ),
            models.CheckConstraint(
                condition=Q(end_date__gte=models.F('start_date')),
                name='valid_booking_dates'
            ),
        ]

    def __str__(self):
        return f"Booking {self.pk}: berth {self.berth_id} {self.start_date} - {self.end_date}"

    # ==========================================================================
    # Properties
    # ==========================================================================

    @property
    def duration_days(self) -> int:
        """Inclusive number of days booked."""
        return (self.end_date - self.start_date).days + 1

    @property
    def is_live(self) -> bool:
        return self.status in LIVE_STATUSES

    @property
    def can_cancel(self) -> bool:
        return self.status in [self.Status.PENDING, self.Status.CONFIRMED]

    @property
    def can_activate(self) -> bool:
        return self.status == self.Status.CONFIRMED

    @property
    def can_complete(self) -> bool:
        return self.status == self.Status.ACTIVE

    @classmethod
    def get_live_statuses(cls) -> list:
        return [cls.Status.PENDING, cls.Status.CONFIRMED, cls.Status.ACTIVE]

    # ==========================================================================
    # Status Transitions
    # ==========================================================================

    def activate(self):
        """Mark the booking as in use."""
        if not self.can_activate:
            raise ValueError(f"Cannot activate booking in {self.status} status")

        self.status = self.Status.ACTIVE
        self.activated_at = timezone.now()
        self.save(update_fields=['status', 'activated_at', 'updated_at'])

    def complete(self):
        """Close out the booking."""
        if not self.can_complete:
            raise ValueError(f"Cannot complete booking in {self.status} status")

        self.status = self.Status.COMPLETED
        self.completed_at = timezone.now()
        self.save(update_fields=['status', 'completed_at', 'updated_at'])

    def cancel(self, cancelled_by_id: int = None, reason: str = None):
        """Cancel the booking."""
        if not self.can_cancel:
            raise ValueError(f"Cannot cancel booking in {self.status} status")

        self.status = self.Status.CANCELLED
        self.cancelled_at = timezone.now()
        self.cancelled_by_id = cancelled_by_id
        self.cancellation_reason = reason
        self.save(update_fields=[
            'status', 'cancelled_at', 'cancelled_by_id',
            'cancellation_reason', 'updated_at',
        ])
