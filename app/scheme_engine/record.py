"""
Scheme record — the immutable value every evaluator reads.

A ``SchemeRecord`` is a plain frozen dataclass with no behaviour of its
own: defaults are filled by ``resolve_defaults`` before construction and
rules live in the evaluator modules. Money values are ``Decimal``.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Any, Mapping


class SchemeKind(str, enum.Enum):
    FIAT = "fiat"
    CRYPTO = "crypto"
    FX = "fx"


def to_decimal(value: Any) -> Decimal | None:
    """Convert a JSON/DB number to Decimal, passing None through."""
    if value is None:
        return None
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def _upper(code: str | None) -> str | None:
    return code.upper() if code else code


def _to_date(value: date | str) -> date:
    if isinstance(value, date):
        return value
    return date.fromisoformat(value)


@dataclass(frozen=True)
class OperatingHours:
    """Daily window in HH:MM, interpreted in *timezone*."""
    start: str
    end: str
    timezone: str = "UTC"


@dataclass(frozen=True)
class FeeStructure:
    flat_fee: Decimal | None = None
    percentage_fee: Decimal | None = None
    currency: str | None = None


@dataclass(frozen=True)
class AmountLimits:
    min_amount: Decimal | None = None
    max_amount: Decimal | None = None
    currency: str | None = None


@dataclass(frozen=True)
class SchemeRecord:
    """Configuration of one payment network: calendar, fees and limits."""
    id: str
    name: str
    kind: SchemeKind
    currency: str
    country_scope: str
    available_days: tuple[str, ...]
    operating_hours: OperatingHours
    settlement_time: str
    target_currency: str | None = None
    holiday_calendar: tuple[date, ...] = ()
    cut_off_time: str | None = None
    fees: FeeStructure = field(default_factory=FeeStructure)
    spread: Decimal | None = None
    limits: AmountLimits = field(default_factory=AmountLimits)
    supports_fx: bool = False

    @property
    def supported_currencies(self) -> set[str]:
        currencies = {self.currency}
        if self.target_currency:
            currencies.add(self.target_currency)
        return currencies

    # ------------------------------------------------------------------
    # Mapping conversion
    # ------------------------------------------------------------------

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> SchemeRecord:
        """
        Build a record from a plain mapping.

        Accepts a resolved configuration, a cached ``to_dict()`` payload
        or an ORM row dump. Nested sections may be mappings or already
        built dataclasses. Currency codes are upper-cased.
        """
        hours = data["operating_hours"]
        if not isinstance(hours, OperatingHours):
            hours = OperatingHours(
                start=hours["start"],
                end=hours["end"],
                timezone=hours.get("timezone") or "UTC",
            )

        fees = data.get("fees") or {}
        if not isinstance(fees, FeeStructure):
            fees = FeeStructure(
                flat_fee=to_decimal(fees.get("flat_fee")),
                percentage_fee=to_decimal(fees.get("percentage_fee")),
                currency=_upper(fees.get("currency")),
            )

        limits = data.get("limits") or {}
        if not isinstance(limits, AmountLimits):
            limits = AmountLimits(
                min_amount=to_decimal(limits.get("min_amount")),
                max_amount=to_decimal(limits.get("max_amount")),
                currency=_upper(limits.get("currency")),
            )

        return cls(
            id=str(data["id"]),
            name=data["name"],
            kind=SchemeKind(data["kind"]),
            currency=_upper(data["currency"]),
            target_currency=_upper(data.get("target_currency")),
            country_scope=data["country_scope"],
            available_days=tuple(d.lower() for d in data.get("available_days") or ()),
            operating_hours=hours,
            holiday_calendar=tuple(_to_date(d) for d in data.get("holiday_calendar") or ()),
            cut_off_time=data.get("cut_off_time"),
            settlement_time=data["settlement_time"],
            fees=fees,
            spread=to_decimal(data.get("spread")),
            limits=limits,
            supports_fx=bool(data.get("supports_fx", False)),
        )

    def to_dict(self) -> dict:
        """JSON-safe representation (Decimals as strings, ISO dates)."""

        def _s(value: Decimal | None) -> str | None:
            return None if value is None else str(value)

        return {
            "id": self.id,
            "name": self.name,
            "kind": self.kind.value,
            "currency": self.currency,
            "target_currency": self.target_currency,
            "country_scope": self.country_scope,
            "available_days": list(self.available_days),
            "operating_hours": {
                "start": self.operating_hours.start,
                "end": self.operating_hours.end,
                "timezone": self.operating_hours.timezone,
            },
            "holiday_calendar": [d.isoformat() for d in self.holiday_calendar],
            "cut_off_time": self.cut_off_time,
            "settlement_time": self.settlement_time,
            "fees": {
                "flat_fee": _s(self.fees.flat_fee),
                "percentage_fee": _s(self.fees.percentage_fee),
                "currency": self.fees.currency,
            },
            "spread": _s(self.spread),
            "limits": {
                "min_amount": _s(self.limits.min_amount),
                "max_amount": _s(self.limits.max_amount),
                "currency": self.limits.currency,
            },
            "supports_fx": self.supports_fx,
        }
