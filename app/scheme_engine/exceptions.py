"""
Exceptions raised by the scheme rules engine.

Only malformed input is exceptional. Business outcomes such as "not
operational" or "not compatible" are returned as results with reasons.
"""

from decimal import Decimal


class SchemeEngineError(Exception):
    """Base class for rule engine errors."""
    pass


class ConfigurationInvalidError(SchemeEngineError):
    """Raised when a scheme configuration has one or more violations."""

    def __init__(self, violations: list[str]):
        self.violations = list(violations)
        super().__init__(
            "Configuration validation failed: " + ", ".join(self.violations)
        )


class InvalidAmountError(SchemeEngineError):
    """Raised for a non-positive payment amount."""

    def __init__(self, amount: Decimal):
        self.amount = amount
        super().__init__(f"Amount must be positive, got {amount}")


class AmountOutOfLimitsError(SchemeEngineError):
    """Raised when an amount falls outside the scheme's min/max limits."""

    def __init__(
        self,
        amount: Decimal,
        min_amount: Decimal | None,
        max_amount: Decimal | None,
    ):
        self.amount = amount
        self.min_amount = min_amount
        self.max_amount = max_amount
        super().__init__(
            f"Amount {amount} exceeds scheme limits "
            f"(min={min_amount}, max={max_amount})"
        )
