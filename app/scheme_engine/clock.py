"""
Wall-clock helpers shared by the validator and the availability evaluator.
"""

from datetime import date, datetime
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from app.scheme_engine.config import HHMM_PATTERN, WEEKDAYS
from app.scheme_engine.exceptions import ConfigurationInvalidError


def parse_hhmm(value: str) -> int:
    """Return minutes since midnight for an ``HH:MM`` string."""
    if not value or not HHMM_PATTERN.match(value):
        raise ValueError(f"Invalid HH:MM time: {value!r}")
    hours, minutes = value.split(":")
    return int(hours) * 60 + int(minutes)


def get_zone(name: str) -> ZoneInfo:
    """Resolve an IANA timezone id. Raises ValueError when unknown."""
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise ValueError(f"Unknown timezone: {name!r}") from exc


def localise(at: datetime, timezone_name: str) -> datetime:
    """
    Express *at* in the scheme's local wall-clock.

    Aware datetimes are converted into *timezone_name*. Naive datetimes
    are taken to be local wall-clock already and returned unchanged.
    """
    if at.tzinfo is None:
        return at
    try:
        zone = get_zone(timezone_name)
    except ValueError as exc:
        raise ConfigurationInvalidError([str(exc)]) from exc
    return at.astimezone(zone)


def weekday_name(at: date) -> str:
    return WEEKDAYS[at.weekday()]


def minutes_of_day(at: datetime) -> int:
    return at.hour * 60 + at.minute
