"""
Fee calculation for a payment amount against a scheme.

All arithmetic is ``Decimal`` in currency units. No rounding is applied
here; quantising for display is the caller's concern.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal

from app.scheme_engine.exceptions import AmountOutOfLimitsError, InvalidAmountError
from app.scheme_engine.record import SchemeKind, SchemeRecord, to_decimal

ZERO = Decimal("0")


@dataclass(frozen=True)
class FeeCalculation:
    base_amount: Decimal
    total_fee: Decimal
    breakdown: dict[str, Decimal] = field(default_factory=dict)
    final_amount: Decimal = ZERO


def ensure_positive(amount) -> Decimal:
    """Coerce *amount* to Decimal and reject non-positive values."""
    value = to_decimal(amount)
    if value is None or value <= 0:
        raise InvalidAmountError(value)
    return value


def within_limits(record: SchemeRecord, amount: Decimal) -> bool:
    """True if *amount* is inside the scheme's (inclusive) min/max bounds."""
    limits = record.limits
    if limits.min_amount is not None and amount < limits.min_amount:
        return False
    if limits.max_amount is not None and amount > limits.max_amount:
        return False
    return True


def check_limits(record: SchemeRecord, amount: Decimal) -> None:
    """Raise AmountOutOfLimitsError when *amount* is outside the limits."""
    if not within_limits(record, amount):
        raise AmountOutOfLimitsError(
            amount, record.limits.min_amount, record.limits.max_amount,
        )


def calculate(
    record: SchemeRecord,
    amount,
    source_currency: str | None = None,
    target_currency: str | None = None,
) -> FeeCalculation:
    """
    Compute the fee breakdown and final amount for *amount*.

    Components (only configured ones appear in the breakdown):
    - ``flat_fee``: the scheme's fixed fee
    - ``percentage_fee``: amount * percentage_fee
    - ``fx_spread_fee``: amount * spread, for FX schemes when both
      currencies are supplied

    Raises InvalidAmountError for amount <= 0 and AmountOutOfLimitsError
    when the amount falls outside the scheme's limits.
    """
    amount = ensure_positive(amount)
    check_limits(record, amount)

    breakdown: dict[str, Decimal] = {}

    if record.fees.flat_fee is not None:
        breakdown["flat_fee"] = record.fees.flat_fee

    if record.fees.percentage_fee is not None:
        breakdown["percentage_fee"] = amount * record.fees.percentage_fee

    if (
        record.kind == SchemeKind.FX
        and record.spread is not None
        and source_currency
        and target_currency
    ):
        breakdown["fx_spread_fee"] = amount * record.spread

    total_fee = sum(breakdown.values(), ZERO)

    return FeeCalculation(
        base_amount=amount,
        total_fee=total_fee,
        breakdown=breakdown,
        final_amount=amount + total_fee,
    )
