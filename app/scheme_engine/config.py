"""
Scheme engine constants.

Canonical weekday names, format patterns, and the restriction/reason
messages surfaced by the evaluators.
"""

import re

WEEKDAYS = (
    "monday",
    "tuesday",
    "wednesday",
    "thursday",
    "friday",
    "saturday",
    "sunday",
)
BUSINESS_DAYS = WEEKDAYS[:5]
WEEKEND_DAYS = WEEKDAYS[5:]

CURRENCY_PATTERN = re.compile(r"^[A-Z]{3}$")
HHMM_PATTERN = re.compile(r"^([01]?[0-9]|2[0-3]):[0-5][0-9]$")

NAME_MAX_LENGTH = 255

# Fractional digits stored for fees, spread and limits
DECIMAL_PLACES = 10

# How far ahead next_availability searches before giving up
NEXT_AVAILABILITY_HORIZON_DAYS = 366

# Availability restrictions
RESTRICTION_DAY = "not operational on {day}"
RESTRICTION_HOLIDAY = "holiday calendar restriction"
RESTRICTION_HOURS = "outside operating hours"

# Compatibility reasons
REASON_CURRENCY = "currency {currency} not supported by scheme (supported: {supported})"
REASON_FX = "fx conversion {source}->{target} required but scheme does not support fx"
REASON_LIMITS = "amount {amount} outside scheme limits (min={min_amount}, max={max_amount})"
REASON_NOT_OPERATIONAL = "scheme not operational: {restriction}"
