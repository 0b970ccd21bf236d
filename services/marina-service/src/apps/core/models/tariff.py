# services/marina-service/src/apps/core/models/tariff.py
"""
Tariff Models

Club-defined pricing schemes attachable to one or more berths.
"""

from decimal import Decimal
from typing import FrozenSet

from django.core.exceptions import ValidationError
from django.db import models

from shared.common.mixins import TimestampMixin
from .club import Berth, Club, validate_month_list


def validate_monthly_amounts(value):
    """Validate a JSON map of month -> amount."""
    if value is None:
        return
    if not isinstance(value, dict):
        raise ValidationError('Monthly amounts must be an object.')
    for month, amount in value.items():
        if not str(month).isdigit() or not 1 <= int(month) <= 12:
            raise ValidationError(f'Invalid month: {month!r}')
        try:
            if Decimal(str(amount)) < 0:
                raise ValidationError(f'Negative amount for month {month}.')
        except ArithmeticError:
            raise ValidationError(f'Invalid amount for month {month}.')


class Tariff(TimestampMixin):
    """
    Pricing scheme: a season lump sum or a flat monthly rate.

    For monthly tariffs ``months`` lists the calendar months the rate
    applies to; season tariffs ignore it.
    """

    class TariffType(models.TextChoices):
        SEASON_PAYMENT = 'season_payment', 'Season Payment'
        MONTHLY_PAYMENT = 'monthly_payment', 'Monthly Payment'

    club = models.ForeignKey(
        Club,
        on_delete=models.CASCADE,
        related_name='tariffs'
    )
    name = models.CharField(max_length=255)
    tariff_type = models.CharField(
        max_length=30,
        choices=TariffType.choices,
        default=TariffType.SEASON_PAYMENT
    )
    amount = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        help_text="Per season for season tariffs, per month for monthly tariffs"
    )
    season = models.PositiveIntegerField()
    months = models.JSONField(
        default=list,
        blank=True,
        validators=[validate_month_list]
    )
    monthly_amounts = models.JSONField(
        blank=True,
        null=True,
        validators=[validate_monthly_amounts],
        help_text="Optional per-month overrides of the flat monthly amount"
    )

    berths = models.ManyToManyField(
        Berth,
        through='TariffBerth',
        related_name='tariffs',
        blank=True
    )

    class Meta:
        db_table = 'tariffs'
        ordering = ['club', 'name']
        indexes = [
            models.Index(fields=['club', 'season']),
        ]

    def __str__(self):
        return f"{self.name} ({self.get_tariff_type_display()})"

    @property
    def is_monthly(self) -> bool:
        return self.tariff_type == self.TariffType.MONTHLY_PAYMENT

    @property
    def month_set(self) -> FrozenSet[int]:
        return frozenset(self.months or [])

    def amount_for_month(self, month: int) -> Decimal:
        """Monthly rate for a calendar month, honoring per-month overrides."""
        overrides = self.monthly_amounts or {}
        if str(month) in overrides:
            return Decimal(str(overrides[str(month)]))
        return self.amount


class TariffBerth(models.Model):
    """Link between a tariff and a berth it prices."""

    tariff = models.ForeignKey(
        Tariff,
        on_delete=models.CASCADE,
        related_name='tariff_berths'
    )
    berth = models.ForeignKey(
        Berth,
        on_delete=models.CASCADE,
        related_name='tariff_berths'
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'tariff_berths'
        constraints = [
            models.UniqueConstraint(
                fields=['tariff', 'berth'],
                name='unique_tariff_berth'
            ),
        ]

    def __str__(self):
        return f"{self.tariff_id} -> {self.berth_id}"
