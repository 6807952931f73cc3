"""
Availability evaluation — is a scheme operational at a given instant?

Gating order:
  1. weekday must be in ``available_days``
  2. local date must not be in ``holiday_calendar``
  3. minutes-since-midnight must fall in ``[start, end]`` (inclusive),
     unless the scheme kind does not enforce operating hours (crypto)

All restrictions are collected; the scheme is operational only when
none apply. Aware instants are converted into the scheme's operating
timezone first; naive instants are treated as local wall-clock.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, time, timedelta

from app.scheme_engine.clock import localise, minutes_of_day, parse_hhmm, weekday_name
from app.scheme_engine.config import (
    NEXT_AVAILABILITY_HORIZON_DAYS,
    RESTRICTION_DAY,
    RESTRICTION_HOLIDAY,
    RESTRICTION_HOURS,
)
from app.scheme_engine.exceptions import ConfigurationInvalidError
from app.scheme_engine.kinds import get_profile
from app.scheme_engine.record import SchemeRecord


@dataclass(frozen=True)
class Availability:
    operational: bool
    restrictions: list[str] = field(default_factory=list)


def _window(record: SchemeRecord) -> tuple[int, int]:
    """Operating window as (start, end) minute offsets."""
    if not get_profile(record.kind).enforces_operating_hours:
        return 0, 24 * 60 - 1
    try:
        return (
            parse_hhmm(record.operating_hours.start),
            parse_hhmm(record.operating_hours.end),
        )
    except ValueError as exc:
        raise ConfigurationInvalidError([str(exc)]) from exc


def evaluate(record: SchemeRecord, at: datetime) -> Availability:
    """Operational status of *record* at *at*, with restriction reasons."""
    local = localise(at, record.operating_hours.timezone)
    restrictions: list[str] = []

    day = weekday_name(local)
    if day not in record.available_days:
        restrictions.append(RESTRICTION_DAY.format(day=day))

    if local.date() in record.holiday_calendar:
        restrictions.append(RESTRICTION_HOLIDAY)

    start, end = _window(record)
    if not start <= minutes_of_day(local) <= end:
        restrictions.append(RESTRICTION_HOURS)

    return Availability(operational=not restrictions, restrictions=restrictions)


def is_operational(record: SchemeRecord, at: datetime) -> bool:
    return evaluate(record, at).operational


def next_availability(record: SchemeRecord, at: datetime) -> datetime | None:
    """
    Earliest instant >= *at* at which *record* is operational.

    Returns *at* when already operational, or None when no operating
    day is found within ``NEXT_AVAILABILITY_HORIZON_DAYS``. The result
    keeps the awareness of *at* (aware results are in the scheme zone).
    """
    if evaluate(record, at).operational:
        return at

    local = localise(at, record.operating_hours.timezone)
    start, _ = _window(record)
    opening = time(start // 60, start % 60)

    for offset in range(NEXT_AVAILABILITY_HORIZON_DAYS + 1):
        day = local.date() + timedelta(days=offset)
        if weekday_name(day) not in record.available_days:
            continue
        if day in record.holiday_calendar:
            continue
        # Today only counts if the window has not opened yet
        if offset == 0 and minutes_of_day(local) >= start:
            continue
        return datetime.combine(day, opening, tzinfo=local.tzinfo)

    return None
