# services/marina-service/src/apps/core/services/pricing_service.py
"""
Pricing Service

Computes price quotes for berth bookings.

``compute_price`` and ``compute_daily_price`` are pure functions of their
inputs; they touch no storage and may run concurrently. The service class
only gathers those inputs (applicable tariff, resolved rules) from the
database.
"""

import calendar
import logging
from dataclasses import dataclass
from datetime import date
from decimal import Decimal, ROUND_HALF_UP
from typing import List, Optional, Tuple

from apps.core.models import Berth, Club, Payment, Tariff, TariffBerth
from ..exceptions import (
    BookingPeriodOutOfRange,
    BookingValidationError,
    MissingTariffSelection,
    TariffNotApplicable,
)
from .rule_service import ResolvedRules, RuleService

logger = logging.getLogger(__name__)

CENT = Decimal('0.01')


def _money(value: Decimal) -> Decimal:
    return Decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class LineItem:
    """One chargeable unit of a quote; each becomes one scheduled payment."""
    label: str
    amount: Decimal
    payment_type: str
    month: Optional[int] = None

    def to_json(self) -> dict:
        return {
            'month': self.month,
            'label': self.label,
            'amount': str(self.amount),
            'payment_type': self.payment_type,
        }


@dataclass(frozen=True)
class PriceQuote:
    base_price: Decimal
    deposit_amount: Decimal
    total_price: Decimal
    monthly_breakdown: Tuple[LineItem, ...]
    applied_rule_ids: Tuple[int, ...]
    priceable: bool = True
    club_id: Optional[int] = None
    berth_id: Optional[int] = None
    tariff_id: Optional[int] = None

    def breakdown_json(self) -> List[dict]:
        return [item.to_json() for item in self.monthly_breakdown]


# =============================================================================
# Price functions
# =============================================================================

def _with_deposit(
    base_price: Decimal,
    items: Tuple[LineItem, ...],
    resolved_rules: ResolvedRules,
    priceable: bool,
    club: Club,
    berth: Berth,
    tariff: Optional[Tariff],
) -> PriceQuote:
    deposit = Decimal('0.00')
    if resolved_rules.deposit is not None:
        deposit = _money(resolved_rules.deposit.amount_for(base_price))

    return PriceQuote(
        base_price=_money(base_price),
        deposit_amount=deposit,
        total_price=_money(base_price + deposit),
        monthly_breakdown=items,
        applied_rule_ids=resolved_rules.applied_rule_ids,
        priceable=priceable,
        club_id=club.id,
        berth_id=berth.id,
        tariff_id=tariff.id if tariff is not None else None,
    )


def compute_price(
    club: Club,
    berth: Berth,
    tariff: Tariff,
    resolved_rules: ResolvedRules,
) -> PriceQuote:
    """
    Price a booking under a tariff.

    Season tariffs charge ``tariff.amount`` once. Monthly tariffs charge each
    month of club season ∩ tariff months ∩ required months (when a rule sets
    them), in calendar order. An empty month set yields an unpriceable quote
    with a zero base price.
    """
    if tariff.tariff_type == Tariff.TariffType.SEASON_PAYMENT:
        base_price = _money(tariff.amount)
        items = (
            LineItem(
                label=f"Season {tariff.season}",
                amount=base_price,
                payment_type=Payment.PaymentType.FULL,
            ),
        )
        return _with_deposit(base_price, items, resolved_rules, True, club, berth, tariff)

    months = tariff.month_set
    if club.rental_month_set is not None:
        months = months & club.rental_month_set
    if resolved_rules.required_months is not None:
        months = months & resolved_rules.required_months

    items = tuple(
        LineItem(
            label=calendar.month_name[month],
            amount=_money(tariff.amount_for_month(month)),
            payment_type=Payment.PaymentType.MONTHLY,
            month=month,
        )
        for month in sorted(months)
    )
    base_price = sum((item.amount for item in items), Decimal('0.00'))
    return _with_deposit(base_price, items, resolved_rules, bool(items), club, berth, tariff)


def compute_daily_price(
    club: Club,
    berth: Berth,
    days: int,
    resolved_rules: ResolvedRules,
) -> PriceQuote:
    """Price a booking of a berth with no tariffs by its daily rate."""
    rate = berth.price_per_day if berth.price_per_day is not None else club.base_price
    base_price = _money(rate * days)
    items = (
        LineItem(
            label=f"{days} days at {_money(rate)}",
            amount=base_price,
            payment_type=Payment.PaymentType.DAILY,
        ),
    )
    return _with_deposit(base_price, items, resolved_rules, True, club, berth, None)


def validate_period(days: int, resolved_rules: ResolvedRules, club: Club = None):
    """
    Check a booking duration against the resolved period rules.

    A bound with no rule falls back to the club's rental period limits.

    Raises:
        BookingPeriodOutOfRange: If ``days`` is outside the inclusive range
    """
    min_period = resolved_rules.min_period
    max_period = resolved_rules.max_period
    if club is not None:
        if min_period is None and club.min_rental_period:
            min_period = club.min_rental_period
        if max_period is None and club.max_rental_period:
            max_period = club.max_rental_period

    if min_period is not None and days < min_period:
        raise BookingPeriodOutOfRange(
            f"Booking of {days} days is shorter than the minimum of {min_period} days",
            min_period=min_period,
            max_period=max_period,
        )
    if max_period is not None and days > max_period:
        raise BookingPeriodOutOfRange(
            f"Booking of {days} days is longer than the maximum of {max_period} days",
            min_period=min_period,
            max_period=max_period,
        )


def booking_days(start_date: date, end_date: date) -> int:
    """Inclusive day count of a booking period."""
    if start_date is None or end_date is None:
        raise BookingValidationError("Start and end dates are required")
    if end_date < start_date:
        raise BookingValidationError("End date must not be before start date")
    return (end_date - start_date).days + 1


class PricingService:
    """
    Service for price quotes.

    Quotes are recomputed on every call and never cached.
    """

    def __init__(self, rule_service: RuleService = None):
        self.rule_service = rule_service or RuleService()

    def get_berth_tariff_ids(self, berth: Berth) -> List[int]:
        return list(
            TariffBerth.objects.filter(berth_id=berth.id)
            .order_by('tariff_id')
            .values_list('tariff_id', flat=True)
        )

    def select_tariff(self, club: Club, berth: Berth, tariff: Tariff = None) -> Optional[Tariff]:
        """
        Validate the price basis for a berth.

        Returns the tariff to price with, or None for daily-rate pricing.

        Raises:
            BookingValidationError: If the berth is not in the club
            MissingTariffSelection: If the berth has tariffs and none was given
            TariffNotApplicable: If the tariff is not linked to the berth
        """
        if berth.club_id != club.id:
            raise BookingValidationError(
                f"Berth {berth.id} does not belong to club {club.id}"
            )

        tariff_ids = self.get_berth_tariff_ids(berth)
        if tariff is None:
            if tariff_ids:
                raise MissingTariffSelection(
                    f"Berth {berth.id} has tariffs; one must be selected",
                    tariff_ids=tariff_ids,
                )
            return None

        if tariff.club_id != club.id or tariff.id not in tariff_ids:
            raise TariffNotApplicable(
                f"Tariff {tariff.id} is not available for berth {berth.id}",
                tariff_ids=tariff_ids,
            )
        return tariff

    def quote(
        self,
        club: Club,
        berth: Berth,
        tariff: Tariff = None,
        start_date: date = None,
        end_date: date = None,
    ) -> PriceQuote:
        """
        Quote a prospective booking.

        Dates are needed for daily-rate pricing and for period validation;
        a tariff quote without dates skips the period check.
        """
        tariff = self.select_tariff(club, berth, tariff)
        resolved = self.rule_service.resolve_rules(club, tariff)

        days = None
        if start_date is not None or end_date is not None:
            days = booking_days(start_date, end_date)
            validate_period(days, resolved, club)

        if tariff is not None:
            return compute_price(club, berth, tariff, resolved)

        if days is None:
            raise BookingValidationError(
                "Start and end dates are required to price a berth without tariffs"
            )
        return compute_daily_price(club, berth, days, resolved)
