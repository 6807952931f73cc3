"""
Scheme configuration consistency checks.

``validate_configuration`` never raises: it returns every violation it
finds so the caller can decide whether to reject the write.
``ensure_valid`` is the rejecting variant used on the write path.
"""

from decimal import Decimal

from app.scheme_engine.clock import get_zone, parse_hhmm
from app.scheme_engine.config import (
    CURRENCY_PATTERN,
    DECIMAL_PLACES,
    NAME_MAX_LENGTH,
    WEEKDAYS,
)
from app.scheme_engine.exceptions import ConfigurationInvalidError
from app.scheme_engine.kinds import get_profile
from app.scheme_engine.record import SchemeRecord


def _check_currency(label: str, code: str | None, required: bool = False) -> list[str]:
    if code is None:
        return [f"{label} is required"] if required else []
    if not CURRENCY_PATTERN.match(code):
        return [f"{label} must be a 3-letter ISO code, got {code!r}"]
    return []


def _check_fraction(label: str, value: Decimal | None) -> list[str]:
    if value is not None and not (Decimal("0") <= value <= Decimal("1")):
        return [f"{label} must be between 0 and 1"]
    return []


def _check_scale(label: str, value: Decimal | None) -> list[str]:
    # Same scale as the numeric columns in payment_schemes
    if value is not None and value.normalize().as_tuple().exponent < -DECIMAL_PLACES:
        return [f"{label} must have at most {DECIMAL_PLACES} decimal places"]
    return []


def _check_hours(record: SchemeRecord) -> list[str]:
    hours = record.operating_hours
    errors = []
    bounds = {}
    for label, value in (("start", hours.start), ("end", hours.end)):
        try:
            bounds[label] = parse_hhmm(value)
        except ValueError:
            errors.append(f"Operating hours {label} must be in HH:MM format")

    # Overnight windows (start >= end) are not supported
    if len(bounds) == 2 and bounds["start"] >= bounds["end"]:
        errors.append("Operating hours start time must be before end time")

    try:
        get_zone(hours.timezone)
    except ValueError:
        errors.append(f"Operating hours timezone is not a valid IANA zone: {hours.timezone!r}")

    if record.cut_off_time is not None:
        try:
            parse_hhmm(record.cut_off_time)
        except ValueError:
            errors.append("Cut-off time must be in HH:MM format")
    return errors


def validate_configuration(record: SchemeRecord) -> list[str]:
    """Return all configuration violations for *record* (empty = valid)."""
    errors: list[str] = []

    if not record.name or not record.name.strip():
        errors.append("Name must not be empty")
    elif len(record.name) > NAME_MAX_LENGTH:
        errors.append(f"Name must be at most {NAME_MAX_LENGTH} characters")

    if not record.settlement_time:
        errors.append("Settlement time must not be empty")

    # Kind-specific rules (fx target/spread, crypto weekends)
    errors.extend(get_profile(record.kind).validate(record))

    # Currencies
    errors.extend(_check_currency("Currency", record.currency, required=True))
    errors.extend(_check_currency("Target currency", record.target_currency))
    errors.extend(_check_currency("Fee currency", record.fees.currency))
    errors.extend(_check_currency("Limit currency", record.limits.currency))

    # Calendar
    if not record.available_days:
        errors.append("available_days must not be empty")
    for day in record.available_days:
        if day.lower() not in WEEKDAYS:
            errors.append(f"Invalid day in available_days: {day}")
    errors.extend(_check_hours(record))

    # Fees and spread
    if record.fees.flat_fee is not None and record.fees.flat_fee < 0:
        errors.append("Flat fee must not be negative")
    errors.extend(_check_fraction("Percentage fee", record.fees.percentage_fee))
    errors.extend(_check_fraction("Spread", record.spread))
    for label, value in (
        ("Flat fee", record.fees.flat_fee),
        ("Percentage fee", record.fees.percentage_fee),
        ("Spread", record.spread),
        ("Minimum amount", record.limits.min_amount),
        ("Maximum amount", record.limits.max_amount),
    ):
        errors.extend(_check_scale(label, value))

    # Limits
    limits = record.limits
    if limits.min_amount is not None and limits.min_amount < 0:
        errors.append("Minimum amount must not be negative")
    if (
        limits.min_amount is not None
        and limits.max_amount is not None
        and limits.min_amount >= limits.max_amount
    ):
        errors.append("Minimum amount must be less than maximum amount")

    return errors


def ensure_valid(record: SchemeRecord) -> SchemeRecord:
    """Return *record* unchanged, or raise ConfigurationInvalidError."""
    errors = validate_configuration(record)
    if errors:
        raise ConfigurationInvalidError(errors)
    return record
