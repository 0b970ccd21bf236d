# services/marina-service/src/apps/core/services/tariff_service.py
"""
Tariff Service

Manages club tariffs and the berths they price.
"""

import logging
from decimal import Decimal
from typing import Iterable, List, Optional

from django.core.exceptions import ValidationError
from django.db import transaction
from django.db.models import ProtectedError

from apps.core.models import Berth, Club, Tariff, TariffBerth
from apps.core.models.tariff import validate_monthly_amounts
from apps.core.rule_parameters import parse_month_set
from ..exceptions import (
    BookingValidationError,
    RuleConfigurationError,
    TariffInUseError,
    TariffNotFoundError,
)

logger = logging.getLogger(__name__)


class TariffService:
    """
    Service for tariffs.

    Handles:
    - Tariff CRUD
    - Tariff/berth links
    """

    @transaction.atomic
    def create_tariff(
        self,
        club: Club,
        name: str,
        tariff_type: str,
        amount: Decimal,
        season: int,
        months: List[int] = None,
        monthly_amounts: dict = None,
        berth_ids: Iterable[int] = None,
    ) -> Tariff:
        """Create a tariff and link it to berths of the same club."""
        months = self._clean_months(tariff_type, months)
        monthly_amounts = self._clean_monthly_amounts(monthly_amounts)

        tariff = Tariff.objects.create(
            club=club,
            name=name,
            tariff_type=tariff_type,
            amount=amount,
            season=season,
            months=months,
            monthly_amounts=monthly_amounts,
        )

        if berth_ids:
            self.set_berths(tariff, berth_ids)

        logger.info(f"Created tariff {tariff.id} ({tariff_type}) for club {club.id}")
        return tariff

    def get_tariff(self, tariff_id: int) -> Tariff:
        """Get a tariff by ID."""
        try:
            return Tariff.objects.select_related('club').get(id=tariff_id)
        except Tariff.DoesNotExist:
            raise TariffNotFoundError(f"Tariff {tariff_id} not found")

    def list_tariffs(self, club_id: int, season: int = None) -> List[Tariff]:
        queryset = Tariff.objects.filter(club_id=club_id)
        if season:
            queryset = queryset.filter(season=season)
        return list(queryset.order_by('name'))

    @transaction.atomic
    def update_tariff(self, tariff_id: int, berth_ids: Iterable[int] = None, **kwargs) -> Tariff:
        """Update a tariff; ``berth_ids`` replaces the berth links when given."""
        tariff = self.get_tariff(tariff_id)

        allowed_fields = [
            'name', 'tariff_type', 'amount', 'season',
            'months', 'monthly_amounts',
        ]

        for field, value in kwargs.items():
            if field in allowed_fields:
                setattr(tariff, field, value)

        tariff.months = self._clean_months(tariff.tariff_type, tariff.months)
        tariff.monthly_amounts = self._clean_monthly_amounts(tariff.monthly_amounts)
        tariff.save()

        if berth_ids is not None:
            self.set_berths(tariff, berth_ids)

        logger.info(f"Updated tariff {tariff.id}")
        return tariff

    def delete_tariff(self, tariff_id: int):
        """Delete a tariff; tariffs with bookings are protected."""
        tariff = self.get_tariff(tariff_id)
        try:
            tariff.delete()
        except ProtectedError:
            raise TariffInUseError(
                f"Tariff {tariff_id} is used by bookings",
                tariff_id=tariff_id,
            )
        logger.info(f"Deleted tariff {tariff_id}")

    # ==========================================================================
    # Berth links
    # ==========================================================================

    def set_berths(self, tariff: Tariff, berth_ids: Iterable[int]):
        """Replace the berths linked to a tariff."""
        berth_ids = sorted(set(berth_ids))
        berths = list(Berth.objects.filter(id__in=berth_ids, club_id=tariff.club_id))
        if len(berths) != len(berth_ids):
            found = {b.id for b in berths}
            missing = [b for b in berth_ids if b not in found]
            raise BookingValidationError(
                f"Berths {missing} do not belong to club {tariff.club_id}"
            )

        TariffBerth.objects.filter(tariff=tariff).exclude(berth_id__in=berth_ids).delete()
        existing = set(
            TariffBerth.objects.filter(tariff=tariff).values_list('berth_id', flat=True)
        )
        TariffBerth.objects.bulk_create([
            TariffBerth(tariff=tariff, berth=berth)
            for berth in berths
            if berth.id not in existing
        ])

    def tariffs_for_berth(self, berth: Berth) -> List[Tariff]:
        """Tariffs a booking of this berth may select."""
        return list(Tariff.objects.filter(tariff_berths__berth=berth).order_by('id'))

    def _clean_months(self, tariff_type: str, months: Optional[List[int]]) -> List[int]:
        if tariff_type == Tariff.TariffType.SEASON_PAYMENT:
            return months or []
        try:
            return sorted(parse_month_set(months))
        except RuleConfigurationError as e:
            raise BookingValidationError(f"Monthly tariff: {e.message}")

    def _clean_monthly_amounts(self, monthly_amounts: Optional[dict]) -> Optional[dict]:
        """Validated overrides keyed by month as a string ("7"), amounts as strings."""
        if not monthly_amounts:
            return None
        try:
            validate_monthly_amounts(monthly_amounts)
        except ValidationError as e:
            raise BookingValidationError(f"Monthly amounts: {e.messages[0]}")
        return {
            str(int(month)): str(Decimal(str(amount)))
            for month, amount in monthly_amounts.items()
        }
