# services/marina-service/src/apps/core/models/booking_rule.py
"""
Booking Rule Model

Policy overrides (deposit, required months, min/max duration) scoped to a
club or to one of its tariffs.
"""

from django.core.exceptions import ValidationError
from django.db import models
from django.db.models import Q

from shared.common.mixins import TimestampMixin
from ..exceptions import RuleConfigurationError
from ..rule_parameters import RuleParameters, parse_rule_parameters
from .club import Club
from .tariff import Tariff


class BookingRule(TimestampMixin):
    """
    Booking rule.

    A rule with ``tariff`` set applies only to bookings priced under that
    tariff; a rule without one applies to every tariff of the club.
    ``parameters`` is JSON whose shape is fixed by ``rule_type``; use
    ``typed_parameters`` to read it.
    """

    class RuleType(models.TextChoices):
        REQUIRE_PAYMENT_MONTHS = 'require_payment_months', 'Require Payment Months'
        MIN_BOOKING_PERIOD = 'min_booking_period', 'Minimum Booking Period'
        MAX_BOOKING_PERIOD = 'max_booking_period', 'Maximum Booking Period'
        REQUIRE_DEPOSIT = 'require_deposit', 'Require Deposit'
        CUSTOM = 'custom', 'Custom'

    club = models.ForeignKey(
        Club,
        on_delete=models.CASCADE,
        related_name='booking_rules'
    )
    tariff = models.ForeignKey(
        Tariff,
        on_delete=models.CASCADE,
        related_name='booking_rules',
        blank=True,
        null=True,
        help_text="Null applies the rule to all tariffs of the club"
    )

    rule_type = models.CharField(
        max_length=50,
        choices=RuleType.choices
    )
    description = models.TextField(blank=True, null=True)
    parameters = models.JSONField(default=dict, blank=True)

    class Meta:
        db_table = 'booking_rules'
        ordering = ['id']
        indexes = [
            models.Index(fields=['club', 'tariff']),
        ]

    def __str__(self):
        return f"{self.get_rule_type_display()} ({self.club_id})"

    def clean(self):
        super().clean()
        if self.tariff_id and self.club_id and self.tariff.club_id != self.club_id:
            raise ValidationError({'tariff': 'Tariff belongs to another club.'})
        try:
            self.typed_parameters
        except RuleConfigurationError as e:
            raise ValidationError({'parameters': e.message})

    @property
    def typed_parameters(self) -> RuleParameters:
        """Parameters parsed into the variant for this rule type."""
        return parse_rule_parameters(self.rule_type, self.parameters, rule_id=self.pk)

    @classmethod
    def get_applicable_rules(cls, club_id: int, tariff_id: int = None):
        """
        Rules of a club that apply to a tariff, ordered by id.

        Without a tariff only the club-wide rules apply.
        """
        scope = Q(tariff__isnull=True)
        if tariff_id is not None:
            scope |= Q(tariff_id=tariff_id)
        return cls.objects.filter(club_id=club_id).filter(scope).order_by('id')
