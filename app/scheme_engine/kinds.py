"""
Per-kind scheme profiles.

Each ``SchemeKind`` maps to a ``KindProfile`` carrying its configuration
defaults, the fields it forces, its kind-specific validation and its
capabilities. Evaluators look behaviour up here instead of branching on
the kind.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Callable

from app.scheme_engine.config import BUSINESS_DAYS, WEEKDAYS, WEEKEND_DAYS
from app.scheme_engine.record import SchemeKind, SchemeRecord


@dataclass(frozen=True)
class Capabilities:
    supports_instant_settlement: bool
    supports_scheduled_payments: bool
    supports_high_value: bool
    supports_cross_border: bool


@dataclass(frozen=True)
class KindProfile:
    """Defaults, forced values, and rules for one scheme kind."""
    defaults: dict
    validate: Callable[[SchemeRecord], list[str]]
    capabilities: Callable[[SchemeRecord], Capabilities]
    forced: dict = field(default_factory=dict)
    enforces_operating_hours: bool = True


# ---------------------------------------------------------------------------
# Kind-specific validation
# ---------------------------------------------------------------------------


def _validate_fiat(record: SchemeRecord) -> list[str]:
    return []


def _validate_crypto(record: SchemeRecord) -> list[str]:
    if not all(day in record.available_days for day in WEEKEND_DAYS):
        return ["Crypto schemes should operate 24/7 including weekends"]
    return []


def _validate_fx(record: SchemeRecord) -> list[str]:
    errors = []
    if not record.target_currency:
        errors.append("FX schemes must have a target_currency")
    if record.spread is None:
        errors.append("FX schemes must have a spread value")
    if not record.supports_fx:
        errors.append("FX schemes must support FX")
    return errors


# ---------------------------------------------------------------------------
# Capabilities
# ---------------------------------------------------------------------------

_ALWAYS_ON = Capabilities(
    supports_instant_settlement=True,
    supports_scheduled_payments=False,
    supports_high_value=True,
    supports_cross_border=True,
)


def _fiat_capabilities(record: SchemeRecord) -> Capabilities:
    return Capabilities(
        supports_instant_settlement=record.settlement_time == "instant",
        supports_scheduled_payments=True,
        supports_high_value=True,
        supports_cross_border=record.country_scope != "domestic",
    )


# ---------------------------------------------------------------------------
# Profile table
# ---------------------------------------------------------------------------

KIND_PROFILES: dict[SchemeKind, KindProfile] = {
    SchemeKind.CRYPTO: KindProfile(
        defaults={
            "available_days": list(WEEKDAYS),
            "operating_hours": {"start": "00:00", "end": "23:59", "timezone": "UTC"},
            "settlement_time": "instant",
            "supports_fx": False,
        },
        validate=_validate_crypto,
        capabilities=lambda record: _ALWAYS_ON,
        enforces_operating_hours=False,
    ),
    SchemeKind.FIAT: KindProfile(
        defaults={
            "available_days": list(BUSINESS_DAYS),
            "operating_hours": {"start": "08:00", "end": "18:00", "timezone": "Europe/London"},
            "settlement_time": "T+1",
            "cut_off_time": "16:00",
            "supports_fx": True,
        },
        validate=_validate_fiat,
        capabilities=_fiat_capabilities,
    ),
    SchemeKind.FX: KindProfile(
        defaults={
            "available_days": list(BUSINESS_DAYS),
            "operating_hours": {"start": "07:00", "end": "17:00", "timezone": "Europe/London"},
            "settlement_time": "T+2",
            "spread": Decimal("0.001"),
        },
        forced={"supports_fx": True},
        validate=_validate_fx,
        capabilities=lambda record: _ALWAYS_ON,
    ),
}

# Applied to every kind after the profile defaults
COMMON_DEFAULTS: dict = {
    "holiday_calendar": [],
    "fees": {},
    "limits": {},
}


def get_profile(kind: SchemeKind | str) -> KindProfile:
    return KIND_PROFILES[SchemeKind(kind)]


def get_capabilities(record: SchemeRecord) -> Capabilities:
    """Capabilities of *record* as determined by its kind."""
    return get_profile(record.kind).capabilities(record)
