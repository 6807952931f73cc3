"""Payment scheme rules engine — pure functions over SchemeRecord."""

from app.scheme_engine.availability import Availability, evaluate, is_operational, next_availability
from app.scheme_engine.compatibility import Compatibility, is_compatible
from app.scheme_engine.defaults import resolve_defaults
from app.scheme_engine.exceptions import (
    AmountOutOfLimitsError,
    ConfigurationInvalidError,
    InvalidAmountError,
    SchemeEngineError,
)
from app.scheme_engine.fees import FeeCalculation, calculate, check_limits
from app.scheme_engine.kinds import Capabilities, get_capabilities
from app.scheme_engine.record import (
    AmountLimits,
    FeeStructure,
    OperatingHours,
    SchemeKind,
    SchemeRecord,
)
from app.scheme_engine.validator import ensure_valid, validate_configuration

__all__ = [
    "Availability", "evaluate", "is_operational", "next_availability",
    "Compatibility", "is_compatible",
    "resolve_defaults",
    "AmountOutOfLimitsError", "ConfigurationInvalidError",
    "InvalidAmountError", "SchemeEngineError",
    "FeeCalculation", "calculate", "check_limits",
    "Capabilities", "get_capabilities",
    "AmountLimits", "FeeStructure", "OperatingHours", "SchemeKind", "SchemeRecord",
    "ensure_valid", "validate_configuration",
]
