"""
Pydantic schemas for payment scheme configuration and rule-engine results.
"""

from datetime import date, datetime
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, Field, field_validator

from app.scheme_engine.record import SchemeKind, SchemeRecord

CURRENCY_FIELD_PATTERN = r"^[A-Za-z]{3}$"
HHMM_FIELD_PATTERN = r"^([01]?[0-9]|2[0-3]):[0-5][0-9]$"


def _upper_currency(v: str | None) -> str | None:
    return v.upper() if v else v


# ---------------------------------------------------------------------------
# Configuration sections
# ---------------------------------------------------------------------------


class OperatingHoursSchema(BaseModel):
    start: str = Field(..., pattern=HHMM_FIELD_PATTERN, examples=["08:00"])
    end: str = Field(..., pattern=HHMM_FIELD_PATTERN, examples=["18:00"])
    timezone: str = Field("UTC", min_length=1, examples=["Europe/London"])


class FeeStructureSchema(BaseModel):
    flat_fee: Decimal | None = Field(None, ge=0, examples=[0.50])
    percentage_fee: Decimal | None = Field(None, ge=0, le=1, examples=[0.001])
    currency: str | None = Field(None, pattern=CURRENCY_FIELD_PATTERN, examples=["EUR"])

    @field_validator("currency")
    @classmethod
    def uppercase_currency(cls, v: str | None) -> str | None:
        return _upper_currency(v)


class AmountLimitsSchema(BaseModel):
    min_amount: Decimal | None = Field(None, ge=0, examples=[0.01])
    max_amount: Decimal | None = Field(None, gt=0, examples=[1000000])
    currency: str | None = Field(None, pattern=CURRENCY_FIELD_PATTERN, examples=["EUR"])

    @field_validator("currency")
    @classmethod
    def uppercase_currency(cls, v: str | None) -> str | None:
        return _upper_currency(v)


# ---------------------------------------------------------------------------
# Create / update
# ---------------------------------------------------------------------------


class SchemeCreateRequest(BaseModel):
    """Scheme configuration; omitted fields take per-kind defaults."""
    name: str = Field(..., min_length=1, max_length=255, examples=["SEPA Credit Transfer"])
    kind: SchemeKind = Field(..., examples=["fiat"])
    currency: str = Field(..., pattern=CURRENCY_FIELD_PATTERN, examples=["EUR"])
    target_currency: str | None = Field(None, pattern=CURRENCY_FIELD_PATTERN, examples=["USD"])
    country_scope: str = Field(..., min_length=1, max_length=100, examples=["EU"])
    available_days: list[str] | None = Field(None, min_length=1, examples=[["monday", "friday"]])
    operating_hours: OperatingHoursSchema | None = None
    holiday_calendar: list[date] | None = Field(None, examples=[["2025-12-25"]])
    cut_off_time: str | None = Field(None, pattern=HHMM_FIELD_PATTERN, examples=["16:00"])
    settlement_time: str | None = Field(None, min_length=1, max_length=20, examples=["T+1"])
    fees: FeeStructureSchema | None = None
    spread: Decimal | None = Field(None, ge=0, le=1, examples=[0.0025])
    limits: AmountLimitsSchema | None = None
    supports_fx: bool | None = None

    @field_validator("currency", "target_currency")
    @classmethod
    def uppercase_currency(cls, v: str | None) -> str | None:
        return _upper_currency(v)

    @field_validator("available_days")
    @classmethod
    def lowercase_days(cls, v: list[str] | None) -> list[str] | None:
        return [d.lower() for d in v] if v is not None else v


class SchemeUpdateRequest(BaseModel):
    """Partial update; supplied sections replace the stored ones wholesale."""
    name: str | None = Field(None, min_length=1, max_length=255)
    currency: str | None = Field(None, pattern=CURRENCY_FIELD_PATTERN)
    target_currency: str | None = Field(None, pattern=CURRENCY_FIELD_PATTERN)
    country_scope: str | None = Field(None, min_length=1, max_length=100)
    available_days: list[str] | None = Field(None, min_length=1)
    operating_hours: OperatingHoursSchema | None = None
    holiday_calendar: list[date] | None = None
    cut_off_time: str | None = Field(None, pattern=HHMM_FIELD_PATTERN)
    settlement_time: str | None = Field(None, min_length=1, max_length=20)
    fees: FeeStructureSchema | None = None
    spread: Decimal | None = Field(None, ge=0, le=1)
    limits: AmountLimitsSchema | None = None
    supports_fx: bool | None = None

    @field_validator("currency", "target_currency")
    @classmethod
    def uppercase_currency(cls, v: str | None) -> str | None:
        return _upper_currency(v)

    @field_validator("available_days")
    @classmethod
    def lowercase_days(cls, v: list[str] | None) -> list[str] | None:
        return [d.lower() for d in v] if v is not None else v


# ---------------------------------------------------------------------------
# Responses
# ---------------------------------------------------------------------------


class SchemeResponse(BaseModel):
    """Full scheme configuration as stored."""
    id: UUID
    name: str
    kind: SchemeKind
    currency: str
    target_currency: str | None
    country_scope: str
    available_days: list[str]
    operating_hours: OperatingHoursSchema
    holiday_calendar: list[date]
    cut_off_time: str | None
    settlement_time: str
    fees: FeeStructureSchema
    spread: Decimal | None
    limits: AmountLimitsSchema
    supports_fx: bool
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_record(
        cls,
        record: SchemeRecord,
        created_at: datetime | None = None,
        updated_at: datetime | None = None,
    ) -> "SchemeResponse":
        return cls(**record.to_dict(), created_at=created_at, updated_at=updated_at)


class AvailabilityResponse(BaseModel):
    scheme_id: UUID
    is_operational: bool
    check_time: datetime
    next_availability: datetime | None = None
    restrictions: list[str] | None = None


class CapabilitiesResponse(BaseModel):
    scheme_id: UUID
    supports_instant_settlement: bool
    supports_scheduled_payments: bool
    supports_high_value: bool
    supports_cross_border: bool


class FeeCalculationRequest(BaseModel):
    amount: Decimal = Field(..., examples=[1000.00])
    source_currency: str | None = Field(None, pattern=CURRENCY_FIELD_PATTERN, examples=["EUR"])
    target_currency: str | None = Field(None, pattern=CURRENCY_FIELD_PATTERN, examples=["USD"])

    @field_validator("source_currency", "target_currency")
    @classmethod
    def uppercase_currency(cls, v: str | None) -> str | None:
        return _upper_currency(v)


class FeeBreakdown(BaseModel):
    flat_fee: Decimal | None = None
    percentage_fee: Decimal | None = None
    fx_spread_fee: Decimal | None = None


class FeeCalculationResponse(BaseModel):
    base_amount: Decimal
    total_fee: Decimal
    fee_breakdown: FeeBreakdown
    final_amount: Decimal


class CompatibilityRequest(BaseModel):
    source_currency: str = Field(..., pattern=CURRENCY_FIELD_PATTERN, examples=["EUR"])
    target_currency: str = Field(..., pattern=CURRENCY_FIELD_PATTERN, examples=["USD"])
    amount: Decimal = Field(..., examples=[1000.00])
    check_time: datetime | None = None

    @field_validator("source_currency", "target_currency")
    @classmethod
    def uppercase_currency(cls, v: str | None) -> str | None:
        return _upper_currency(v)


class CompatibilityResponse(BaseModel):
    scheme_id: UUID
    is_compatible: bool
    source_currency: str
    target_currency: str
    amount: Decimal
    incompatibility_reasons: list[str] | None = None
