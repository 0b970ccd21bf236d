# services/marina-service/src/tests/unit/test_pricing.py
"""
Unit Tests for Pricing

Tests for price computation, tariff selection and period validation.
"""

from datetime import date
from decimal import Decimal

import pytest

from apps.core.models import BookingRule, Payment, Tariff
from apps.core.services import (
    PricingService,
    ResolvedRules,
    RuleService,
    compute_price,
    BookingPeriodOutOfRange,
    BookingValidationError,
    MissingTariffSelection,
    TariffNotApplicable,
)
from apps.core.services.pricing_service import (
    booking_days,
    compute_daily_price,
    validate_period,
)


RuleType = BookingRule.RuleType


@pytest.mark.django_db
class TestComputePrice:
    """Tests for compute_price."""

    def test_monthly_tariff_charges_each_season_month(self, club, berth, monthly_tariff):
        quote = compute_price(club, berth, monthly_tariff, ResolvedRules())

        assert [item.month for item in quote.monthly_breakdown] == [6, 7, 8]
        assert [item.label for item in quote.monthly_breakdown] == ['June', 'July', 'August']
        assert quote.base_price == Decimal('30000.00')
        assert quote.deposit_amount == Decimal('0.00')
        assert quote.total_price == Decimal('30000.00')
        assert quote.priceable is True

    def test_required_months_rule_narrows_months(
        self, club, berth, monthly_tariff, create_rule
    ):
        rule = create_rule(RuleType.REQUIRE_PAYMENT_MONTHS, {'months': [7]})
        resolved = RuleService().resolve_rules(club, monthly_tariff)

        quote = compute_price(club, berth, monthly_tariff, resolved)

        assert len(quote.monthly_breakdown) == 1
        assert quote.monthly_breakdown[0].month == 7
        assert quote.total_price == Decimal('10000.00')
        assert quote.applied_rule_ids == (rule.id,)

    def test_season_tariff_with_fixed_deposit(self, club, berth, season_tariff, create_rule):
        create_rule(RuleType.REQUIRE_DEPOSIT, {'deposit_amount': 20000})
        resolved = RuleService().resolve_rules(club, season_tariff)

        quote = compute_price(club, berth, season_tariff, resolved)

        assert quote.base_price == Decimal('150000.00')
        assert quote.deposit_amount == Decimal('20000.00')
        assert quote.total_price == Decimal('170000.00')
        assert len(quote.monthly_breakdown) == 1
        assert quote.monthly_breakdown[0].payment_type == Payment.PaymentType.FULL

    def test_percentage_deposit(self, club, berth, monthly_tariff, create_rule):
        create_rule(RuleType.REQUIRE_DEPOSIT, {'deposit_percentage': '12.5'})
        resolved = RuleService().resolve_rules(club, monthly_tariff)

        quote = compute_price(club, berth, monthly_tariff, resolved)

        assert quote.deposit_amount == Decimal('3750.00')
        assert quote.total_price == Decimal('33750.00')

    def test_club_season_limits_tariff_months(self, club, berth, create_tariff):
        tariff = create_tariff(berths=[berth], months=[3, 4, 5, 6])

        quote = compute_price(club, berth, tariff, ResolvedRules())

        assert [item.month for item in quote.monthly_breakdown] == [5, 6]

    def test_unrestricted_club_season(self, club, berth, create_tariff):
        club.rental_months = None
        club.save()
        tariff = create_tariff(berths=[berth], months=[1, 12])

        quote = compute_price(club, berth, tariff, ResolvedRules())

        assert [item.month for item in quote.monthly_breakdown] == [1, 12]

    def test_monthly_amount_overrides(self, club, berth, create_tariff):
        tariff = create_tariff(
            berths=[berth],
            monthly_amounts={'7': '12500.00'},
        )

        quote = compute_price(club, berth, tariff, ResolvedRules())

        amounts = {item.month: item.amount for item in quote.monthly_breakdown}
        assert amounts == {
            6: Decimal('10000.00'),
            7: Decimal('12500.00'),
            8: Decimal('10000.00'),
        }
        assert quote.total_price == Decimal('32500.00')

    def test_empty_month_set_is_not_priceable(self, club, berth, monthly_tariff, create_rule):
        create_rule(RuleType.REQUIRE_PAYMENT_MONTHS, {'months': [9]})
        resolved = RuleService().resolve_rules(club, monthly_tariff)

        quote = compute_price(club, berth, monthly_tariff, resolved)

        assert quote.priceable is False
        assert quote.monthly_breakdown == ()
        assert quote.base_price == Decimal('0.00')

    def test_price_is_deterministic(self, club, berth, monthly_tariff, create_rule):
        create_rule(RuleType.REQUIRE_DEPOSIT, {'deposit_amount': 500})
        service = RuleService()

        first = compute_price(club, berth, monthly_tariff, service.resolve_rules(club, monthly_tariff))
        second = compute_price(club, berth, monthly_tariff, service.resolve_rules(club, monthly_tariff))

        assert first == second

    def test_breakdown_json(self, club, berth, monthly_tariff):
        quote = compute_price(club, berth, monthly_tariff, ResolvedRules())

        assert quote.breakdown_json()[0] == {
            'month': 6,
            'label': 'June',
            'amount': '10000.00',
            'payment_type': 'monthly',
        }


@pytest.mark.django_db
class TestDailyPricing:
    """Tests for berths priced by their daily rate."""

    def test_berth_rate(self, club, create_berth):
        berth = create_berth(price_per_day=Decimal('250.00'))

        quote = compute_daily_price(club, berth, 10, ResolvedRules())

        assert quote.base_price == Decimal('2500.00')
        assert quote.tariff_id is None
        assert quote.monthly_breakdown[0].payment_type == Payment.PaymentType.DAILY

    def test_falls_back_to_club_base_price(self, club, berth):
        quote = compute_daily_price(club, berth, 3, ResolvedRules())

        assert quote.base_price == Decimal('3000.00')


class TestPeriodValidation:
    """Tests for booking_days and validate_period."""

    def test_booking_days_is_inclusive(self):
        assert booking_days(date(2030, 6, 1), date(2030, 6, 1)) == 1
        assert booking_days(date(2030, 6, 1), date(2030, 6, 30)) == 30

    def test_end_before_start(self):
        with pytest.raises(BookingValidationError):
            booking_days(date(2030, 6, 2), date(2030, 6, 1))

    def test_bounds_are_inclusive(self):
        resolved = ResolvedRules(min_period=7, max_period=30)

        validate_period(7, resolved)
        validate_period(30, resolved)

    def test_out_of_range(self):
        resolved = ResolvedRules(min_period=7, max_period=30)

        with pytest.raises(BookingPeriodOutOfRange) as exc_info:
            validate_period(6, resolved)
        assert exc_info.value.extra == {'min_period': 7, 'max_period': 30}

        with pytest.raises(BookingPeriodOutOfRange):
            validate_period(31, resolved)

    @pytest.mark.django_db
    def test_club_limits_apply_without_rules(self, club):
        club.min_rental_period = 14
        club.max_rental_period = 60

        with pytest.raises(BookingPeriodOutOfRange):
            validate_period(10, ResolvedRules(), club)
        with pytest.raises(BookingPeriodOutOfRange):
            validate_period(61, ResolvedRules(), club)

        validate_period(10, ResolvedRules(min_period=7), club)


@pytest.mark.django_db
class TestPricingService:
    """Tests for tariff selection and quotes."""

    def setup_method(self):
        self.service = PricingService()

    def test_missing_tariff_selection(self, club, berth, monthly_tariff):
        with pytest.raises(MissingTariffSelection) as exc_info:
            self.service.select_tariff(club, berth)

        assert exc_info.value.extra['tariff_ids'] == [monthly_tariff.id]

    def test_tariff_not_linked_to_berth(self, club, berth, create_berth, create_tariff):
        other_berth = create_berth()
        tariff = create_tariff(berths=[other_berth])

        with pytest.raises(TariffNotApplicable):
            self.service.select_tariff(club, berth, tariff)

    def test_berth_without_tariffs_uses_daily_rate(self, club, berth):
        assert self.service.select_tariff(club, berth) is None

    def test_berth_of_another_club(self, club, berth, owner_id):
        from apps.core.models import Club

        other = Club.objects.create(name='Other', owner_id=owner_id, season=2030)

        with pytest.raises(BookingValidationError):
            self.service.select_tariff(other, berth)

    def test_quote_with_tariff(self, club, berth, monthly_tariff):
        quote = self.service.quote(club, berth, monthly_tariff)

        assert quote.total_price == Decimal('30000.00')
        assert quote.tariff_id == monthly_tariff.id

    def test_quote_checks_period_when_dates_given(self, club, berth, monthly_tariff, create_rule):
        create_rule(RuleType.MIN_BOOKING_PERIOD, {'min_period': 30})

        with pytest.raises(BookingPeriodOutOfRange):
            self.service.quote(
                club, berth, monthly_tariff,
                start_date=date(2030, 6, 1),
                end_date=date(2030, 6, 10),
            )

    def test_daily_quote_needs_dates(self, club, berth):
        with pytest.raises(BookingValidationError):
            self.service.quote(club, berth)

        quote = self.service.quote(
            club, berth,
            start_date=date(2030, 6, 1),
            end_date=date(2030, 6, 5),
        )
        assert quote.total_price == Decimal('5000.00')


@pytest.mark.django_db
class TestTariffService:
    """Tests for tariff writes."""

    def setup_method(self):
        from apps.core.services import TariffService

        self.service = TariffService()

    def test_monthly_amount_keys_are_normalized(self, club, berth):
        tariff = self.service.create_tariff(
            club=club,
            name='Summer',
            tariff_type=Tariff.TariffType.MONTHLY_PAYMENT,
            amount=Decimal('10000.00'),
            season=2030,
            months=[6, 7, 8],
            monthly_amounts={7: Decimal('12500.00')},
            berth_ids=[berth.id],
        )

        tariff.refresh_from_db()
        assert tariff.monthly_amounts == {'7': '12500.00'}
        assert tariff.amount_for_month(7) == Decimal('12500.00')

        quote = compute_price(club, berth, tariff, ResolvedRules())
        assert quote.total_price == Decimal('32500.00')

    @pytest.mark.parametrize('monthly_amounts', [
        {'13': '100.00'},
        {'7': 'lots'},
        {'7': '-1.00'},
    ])
    def test_bad_monthly_amounts_rejected(self, club, monthly_amounts):
        with pytest.raises(BookingValidationError):
            self.service.create_tariff(
                club=club,
                name='Broken',
                tariff_type=Tariff.TariffType.MONTHLY_PAYMENT,
                amount=Decimal('10000.00'),
                season=2030,
                months=[6, 7],
                monthly_amounts=monthly_amounts,
            )

        assert not Tariff.objects.filter(name='Broken').exists()

    def test_update_validates_monthly_amounts(self, monthly_tariff):
        with pytest.raises(BookingValidationError):
            self.service.update_tariff(monthly_tariff.id, monthly_amounts={'x': '1'})

        tariff = self.service.update_tariff(monthly_tariff.id, monthly_amounts={6: 9000})
        assert tariff.monthly_amounts == {'6': '9000'}
