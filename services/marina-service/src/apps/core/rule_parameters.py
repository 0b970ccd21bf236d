# services/marina-service/src/apps/core/rule_parameters.py
"""
Typed Booking Rule Parameters

Booking rules store their parameters as JSON. This module turns that JSON
into one frozen dataclass per rule type so the evaluator never has to guess
at the shape of a parameter map. Anything that does not parse raises
RuleConfigurationError naming the rule.
"""

from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, FrozenSet, Optional, Union

from .exceptions import RuleConfigurationError


REQUIRE_PAYMENT_MONTHS = 'require_payment_months'
MIN_BOOKING_PERIOD = 'min_booking_period'
MAX_BOOKING_PERIOD = 'max_booking_period'
REQUIRE_DEPOSIT = 'require_deposit'
CUSTOM = 'custom'


@dataclass(frozen=True)
class RequirePaymentMonths:
    months: FrozenSet[int]


@dataclass(frozen=True)
class MinBookingPeriod:
    min_period: int


@dataclass(frozen=True)
class MaxBookingPeriod:
    max_period: int


@dataclass(frozen=True)
class RequireDeposit:
    """Exactly one of ``deposit_amount`` and ``deposit_percentage`` is set."""
    deposit_amount: Optional[Decimal] = None
    deposit_percentage: Optional[Decimal] = None

    def amount_for(self, base_price: Decimal) -> Decimal:
        if self.deposit_amount is not None:
            return self.deposit_amount
        return (base_price * self.deposit_percentage / Decimal('100')).quantize(
            Decimal('0.01')
        )


@dataclass(frozen=True)
class CustomRule:
    data: Dict[str, Any] = field(default_factory=dict)


RuleParameters = Union[
    RequirePaymentMonths,
    MinBookingPeriod,
    MaxBookingPeriod,
    RequireDeposit,
    CustomRule,
]


# =============================================================================
# Parsing
# =============================================================================

def parse_month_set(value, rule_id=None, key: str = 'months') -> FrozenSet[int]:
    """Parse a list of calendar months (1..12, no duplicates)."""
    if not isinstance(value, (list, tuple)) or not value:
        raise RuleConfigurationError(
            f"'{key}' must be a non-empty list of months", rule_id=rule_id
        )
    months = []
    for month in value:
        if isinstance(month, bool) or not isinstance(month, int) or not 1 <= month <= 12:
            raise RuleConfigurationError(
                f"'{key}' contains invalid month {month!r}", rule_id=rule_id
            )
        months.append(month)
    if len(set(months)) != len(months):
        raise RuleConfigurationError(
            f"'{key}' contains duplicate months", rule_id=rule_id
        )
    return frozenset(months)


def _parse_period(raw: dict, key: str, rule_id) -> int:
    value = raw.get(key)
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        raise RuleConfigurationError(
            f"'{key}' must be a positive number of days", rule_id=rule_id
        )
    return value


def _parse_decimal(value, key: str, rule_id) -> Decimal:
    if isinstance(value, bool) or not isinstance(value, (int, float, str, Decimal)):
        raise RuleConfigurationError(f"'{key}' must be a number", rule_id=rule_id)
    try:
        result = Decimal(str(value))
    except InvalidOperation:
        raise RuleConfigurationError(f"'{key}' must be a number", rule_id=rule_id)
    if not result.is_finite():
        raise RuleConfigurationError(f"'{key}' must be a number", rule_id=rule_id)
    return result


def _parse_deposit(raw: dict, rule_id) -> RequireDeposit:
    has_amount = raw.get('deposit_amount') is not None
    has_percentage = raw.get('deposit_percentage') is not None
    if has_amount == has_percentage:
        raise RuleConfigurationError(
            "exactly one of 'deposit_amount' or 'deposit_percentage' is required",
            rule_id=rule_id,
        )

    if has_amount:
        amount = _parse_decimal(raw['deposit_amount'], 'deposit_amount', rule_id)
        if amount < 0:
            raise RuleConfigurationError(
                "'deposit_amount' must not be negative", rule_id=rule_id
            )
        return RequireDeposit(deposit_amount=amount.quantize(Decimal('0.01')))

    percentage = _parse_decimal(raw['deposit_percentage'], 'deposit_percentage', rule_id)
    if not Decimal('0') < percentage <= Decimal('100'):
        raise RuleConfigurationError(
            "'deposit_percentage' must be greater than 0 and at most 100",
            rule_id=rule_id,
        )
    return RequireDeposit(deposit_percentage=percentage)


_ALLOWED_KEYS = {
    REQUIRE_PAYMENT_MONTHS: {'months'},
    MIN_BOOKING_PERIOD: {'min_period'},
    MAX_BOOKING_PERIOD: {'max_period'},
    REQUIRE_DEPOSIT: {'deposit_amount', 'deposit_percentage'},
}


def parse_rule_parameters(rule_type: str, raw, rule_id=None) -> RuleParameters:
    """
    Parse a rule's JSON parameters into its typed variant.

    Args:
        rule_type: One of the BookingRule.RuleType values
        raw: Decoded JSON parameters (dict, or None for custom rules)
        rule_id: Rule id reported in errors

    Raises:
        RuleConfigurationError: If the parameters do not fit the rule type
    """
    if rule_type == CUSTOM:
        if raw is None:
            return CustomRule()
        if not isinstance(raw, dict):
            raise RuleConfigurationError(
                'custom rule parameters must be an object', rule_id=rule_id
            )
        return CustomRule(data=dict(raw))

    if rule_type not in _ALLOWED_KEYS:
        raise RuleConfigurationError(
            f"unknown rule type {rule_type!r}", rule_id=rule_id
        )
    if not isinstance(raw, dict):
        raise RuleConfigurationError('parameters must be an object', rule_id=rule_id)

    unknown = set(raw) - _ALLOWED_KEYS[rule_type]
    if unknown:
        raise RuleConfigurationError(
            f"unexpected parameters for {rule_type}: {', '.join(sorted(unknown))}",
            rule_id=rule_id,
        )

    if rule_type == REQUIRE_PAYMENT_MONTHS:
        return RequirePaymentMonths(months=parse_month_set(raw.get('months'), rule_id))
    if rule_type == MIN_BOOKING_PERIOD:
        return MinBookingPeriod(min_period=_parse_period(raw, 'min_period', rule_id))
    if rule_type == MAX_BOOKING_PERIOD:
        return MaxBookingPeriod(max_period=_parse_period(raw, 'max_period', rule_id))
    return _parse_deposit(raw, rule_id)
