# services/marina-service/src/apps/core/services/rule_service.py
"""
Rule Service

Manages booking rules and resolves the rules that apply to a tariff.
"""

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import FrozenSet, Iterable, List, Optional, Tuple

from django.db import transaction

from apps.core.models import BookingRule, Club, Tariff
from apps.core.rule_parameters import (
    CustomRule,
    MaxBookingPeriod,
    MinBookingPeriod,
    RequireDeposit,
    RequirePaymentMonths,
    parse_rule_parameters,
)
from ..exceptions import RuleConfigurationError, RuleNotFoundError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResolvedRules:
    """
    Typed view of every rule that applies to one club/tariff pair.

    ``required_months`` of None means no month restriction; ``deposit`` is
    the winning REQUIRE_DEPOSIT variant, if any.
    """

    deposit: Optional[RequireDeposit] = None
    deposit_rule_id: Optional[int] = None
    required_months: Optional[FrozenSet[int]] = None
    min_period: Optional[int] = None
    max_period: Optional[int] = None
    custom_rules: Tuple[BookingRule, ...] = ()
    applied_rule_ids: Tuple[int, ...] = ()

    @property
    def deposit_amount(self) -> Optional[Decimal]:
        """Fixed deposit, or None when there is none or it is a percentage."""
        if self.deposit is None:
            return None
        return self.deposit.deposit_amount


class RuleService:
    """
    Service for booking rules.

    Handles:
    - Rule CRUD with typed parameter validation
    - Rule resolution for pricing and period checks
    """

    # ==========================================================================
    # Rule CRUD
    # ==========================================================================

    @transaction.atomic
    def create_rule(
        self,
        club: Club,
        rule_type: str,
        parameters=None,
        tariff: Tariff = None,
        description: str = None,
    ) -> BookingRule:
        """
        Create a booking rule.

        Raises:
            RuleConfigurationError: If the parameters do not fit the rule type
                or the tariff belongs to another club
        """
        if parameters is None:
            parameters = {}
        parse_rule_parameters(rule_type, parameters)
        self._check_tariff_scope(club, tariff)

        rule = BookingRule.objects.create(
            club=club,
            tariff=tariff,
            rule_type=rule_type,
            parameters=parameters,
            description=description,
        )

        logger.info(f"Created booking rule {rule.id}: {rule_type} for club {club.id}")
        return rule

    def get_rule(self, rule_id: int) -> BookingRule:
        """Get a rule by ID."""
        try:
            return BookingRule.objects.select_related('club', 'tariff').get(id=rule_id)
        except BookingRule.DoesNotExist:
            raise RuleNotFoundError(f"Rule {rule_id} not found")

    def list_rules(
        self,
        club_id: int,
        tariff_id: int = None,
        rule_type: str = None,
    ) -> List[BookingRule]:
        """List rules of a club, optionally only those scoped to a tariff."""
        queryset = BookingRule.objects.filter(club_id=club_id)

        if tariff_id:
            queryset = queryset.filter(tariff_id=tariff_id)

        if rule_type:
            queryset = queryset.filter(rule_type=rule_type)

        return list(queryset.order_by('id'))

    @transaction.atomic
    def update_rule(self, rule_id: int, **kwargs) -> BookingRule:
        """Update a booking rule; type and parameters are re-validated together."""
        rule = self.get_rule(rule_id)

        allowed_fields = ['rule_type', 'parameters', 'description', 'tariff']

        for field, value in kwargs.items():
            if field in allowed_fields:
                setattr(rule, field, value)

        if rule.parameters is None:
            rule.parameters = {}

        parse_rule_parameters(rule.rule_type, rule.parameters, rule_id=rule.id)
        self._check_tariff_scope(rule.club, rule.tariff)
        rule.save()

        logger.info(f"Updated booking rule {rule.id}")
        return rule

    def delete_rule(self, rule_id: int):
        """Delete a booking rule."""
        rule = self.get_rule(rule_id)
        rule.delete()
        logger.info(f"Deleted booking rule {rule_id}")

    def _check_tariff_scope(self, club: Club, tariff: Optional[Tariff]):
        if tariff is not None and tariff.club_id != club.id:
            raise RuleConfigurationError(
                f"Tariff {tariff.id} does not belong to club {club.id}"
            )

    # ==========================================================================
    # Resolution
    # ==========================================================================

    def resolve_rules(self, club: Club, tariff: Tariff = None) -> ResolvedRules:
        """
        Resolve the rules that apply to bookings of ``club`` under ``tariff``.

        Club-wide rules (no tariff) always apply; tariff rules only for
        their own tariff.
        """
        rules = BookingRule.get_applicable_rules(
            club.id,
            tariff.id if tariff is not None else None,
        )
        return self.resolve_from_rules(rules)

    def resolve_from_rules(self, rules: Iterable[BookingRule]) -> ResolvedRules:
        """
        Fold a set of rules into ResolvedRules.

        Rules are visited by ascending id. The first deposit rule wins and
        later ones are ignored. Required-month rules intersect. Period rules
        keep the tightest bound. Any rule whose parameters do not parse
        raises RuleConfigurationError.
        """
        deposit = None
        deposit_rule_id = None
        required_months = None
        min_period = None
        max_period = None
        custom_rules = []
        applied = []

        for rule in sorted(rules, key=lambda r: r.pk or 0):
            params = rule.typed_parameters

            if isinstance(params, RequireDeposit):
                if deposit is not None:
                    logger.warning(
                        f"Rule {rule.pk} ignored: deposit already set by rule {deposit_rule_id}"
                    )
                    continue
                deposit = params
                deposit_rule_id = rule.pk

            elif isinstance(params, RequirePaymentMonths):
                if required_months is None:
                    required_months = params.months
                else:
                    required_months = required_months & params.months

            elif isinstance(params, MinBookingPeriod):
                if min_period is None or params.min_period > min_period:
                    min_period = params.min_period

            elif isinstance(params, MaxBookingPeriod):
                if max_period is None or params.max_period < max_period:
                    max_period = params.max_period

            elif isinstance(params, CustomRule):
                custom_rules.append(rule)

            applied.append(rule.pk)

        return ResolvedRules(
            deposit=deposit,
            deposit_rule_id=deposit_rule_id,
            required_months=required_months,
            min_period=min_period,
            max_period=max_period,
            custom_rules=tuple(custom_rules),
            applied_rule_ids=tuple(sorted(applied)),
        )
