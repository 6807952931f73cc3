"""
Compatibility check — can a scheme carry a specific payment instruction?

Every check runs and every failing reason is collected, so one call
surfaces all problems:

  1. currency support  — both currencies in {currency, target_currency}
  2. fx capability     — a currency change needs ``supports_fx``
  3. amount limits     — same bounds as fee calculation, no fees computed
  4. operational       — availability at the given instant
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from app.scheme_engine.availability import evaluate
from app.scheme_engine.config import (
    REASON_CURRENCY,
    REASON_FX,
    REASON_LIMITS,
    REASON_NOT_OPERATIONAL,
)
from app.scheme_engine.fees import ensure_positive, within_limits
from app.scheme_engine.record import SchemeRecord


@dataclass(frozen=True)
class Compatibility:
    compatible: bool
    reasons: list[str] = field(default_factory=list)


def is_compatible(
    record: SchemeRecord,
    source_currency: str,
    target_currency: str,
    amount,
    at: datetime,
) -> Compatibility:
    """Decide whether *record* can carry the instruction, with reasons."""
    amount = ensure_positive(amount)
    source = source_currency.upper()
    target = target_currency.upper()
    reasons: list[str] = []

    supported = record.supported_currencies
    for currency in dict.fromkeys((source, target)):
        if currency not in supported:
            reasons.append(REASON_CURRENCY.format(
                currency=currency, supported=", ".join(sorted(supported)),
            ))

    if source != target and not record.supports_fx:
        reasons.append(REASON_FX.format(source=source, target=target))

    if not within_limits(record, amount):
        reasons.append(REASON_LIMITS.format(
            amount=amount,
            min_amount=record.limits.min_amount,
            max_amount=record.limits.max_amount,
        ))

    availability = evaluate(record, at)
    for restriction in availability.restrictions:
        reasons.append(REASON_NOT_OPERATIONAL.format(restriction=restriction))

    return Compatibility(compatible=not reasons, reasons=reasons)
