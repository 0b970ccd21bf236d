# services/marina-service/src/apps/core/models/club.py
"""
Club and Berth Models

Read models for the yacht club calendar and its mooring slots. Clubs and
berths are maintained by club management (Django admin); the booking engine
only reads them.
"""

from decimal import Decimal
from typing import FrozenSet, Optional

from django.core.exceptions import ValidationError
from django.db import models

from shared.common.mixins import ActiveMixin, TimestampMixin


def validate_month_list(value):
    """Validate a JSON list of calendar months."""
    if value is None:
        return
    if not isinstance(value, list):
        raise ValidationError('Months must be a list.')
    for month in value:
        if isinstance(month, bool) or not isinstance(month, int) or not 1 <= month <= 12:
            raise ValidationError(f'Invalid month: {month!r}')
    if len(set(value)) != len(value):
        raise ValidationError('Months must not repeat.')


class Club(TimestampMixin, ActiveMixin):
    """
    Yacht club.

    ``rental_months`` is the navigation season (months 1..12). Null means the
    club does not restrict which months can be rented.
    """

    name = models.CharField(max_length=255)
    description = models.TextField(blank=True, null=True)
    address = models.CharField(max_length=500, blank=True, null=True)
    owner_id = models.BigIntegerField(
        db_index=True,
        help_text="User id of the club owner"
    )

    # Season
    season = models.PositiveIntegerField(
        help_text="Calendar year this configuration applies to"
    )
    rental_months = models.JSONField(
        blank=True,
        null=True,
        validators=[validate_month_list],
        help_text="Months of the navigation season (1-12); null = unrestricted"
    )

    # Rental limits (days)
    min_rental_period = models.PositiveIntegerField(default=0)
    max_rental_period = models.PositiveIntegerField(default=365)

    # Prices
    base_price = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal('0.00'),
        help_text="Default daily rate for berths without a tariff"
    )
    min_price_per_month = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal('0.00')
    )

    class Meta:
        db_table = 'clubs'
        ordering = ['name']

    def __str__(self):
        return f"{self.name} ({self.season})"

    @property
    def rental_month_set(self) -> Optional[FrozenSet[int]]:
        if self.rental_months is None:
            return None
        return frozenset(self.rental_months)


class Berth(TimestampMixin):
    """
    A single mooring slot within a club.

    ``is_available`` is an administrative flag, independent of bookings.
    """

    club = models.ForeignKey(
        Club,
        on_delete=models.CASCADE,
        related_name='berths'
    )
    number = models.CharField(max_length=50)

    # Max vessel dimensions (meters)
    length = models.DecimalField(max_digits=6, decimal_places=2)
    width = models.DecimalField(max_digits=6, decimal_places=2)

    price_per_day = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        blank=True,
        null=True
    )
    is_available = models.BooleanField(default=True, db_index=True)
    notes = models.TextField(blank=True, null=True)

    class Meta:
        db_table = 'berths'
        ordering = ['club', 'number']
        constraints = [
            models.UniqueConstraint(
                fields=['club', 'number'],
                name='unique_berth_number_per_club'
            ),
        ]

    def __str__(self):
        return f"Berth {self.number} ({self.club_id})"
