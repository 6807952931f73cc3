"""
PaymentScheme model — persisted payment scheme configuration.

Stores one row per scheme with fee, limit and operating-hour sections
flattened into columns. Rules never run on the ORM object: the service
converts rows to immutable ``SchemeRecord`` values via ``to_record``.
"""

import uuid
from datetime import date, datetime, timezone
from decimal import Decimal

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Date,
    DateTime,
    Numeric,
    String,
    Enum as SAEnum,
    event,
)
from sqlalchemy.dialects.postgresql import ARRAY, UUID
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base
from app.scheme_engine.config import DECIMAL_PLACES
from app.scheme_engine.record import SchemeKind, SchemeRecord


class PaymentScheme(Base):
    __tablename__ = "payment_schemes"
    __table_args__ = (
        CheckConstraint("currency ~ '^[A-Z]{3}$'", name="ck_payment_schemes_currency"),
        CheckConstraint(
            "target_currency IS NULL OR target_currency ~ '^[A-Z]{3}$'",
            name="ck_payment_schemes_target_currency",
        ),
        CheckConstraint(
            "spread IS NULL OR (spread >= 0 AND spread <= 1)",
            name="ck_payment_schemes_spread",
        ),
        CheckConstraint(
            "kind != 'fx' OR (target_currency IS NOT NULL AND spread IS NOT NULL)",
            name="ck_payment_schemes_fx_fields",
        ),
    )

    # Primary key
    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4
    )

    # Identity
    name: Mapped[str] = mapped_column(String(255), index=True, nullable=False)
    kind: Mapped[SchemeKind] = mapped_column(
        SAEnum(SchemeKind, name="schemekind", values_callable=lambda e: [m.value for m in e]),
        nullable=False,
    )
    currency: Mapped[str] = mapped_column(String(3), index=True, nullable=False)
    target_currency: Mapped[str | None] = mapped_column(String(3))
    country_scope: Mapped[str] = mapped_column(String(100), nullable=False)

    # Calendar
    available_days: Mapped[list[str]] = mapped_column(ARRAY(String(9)), nullable=False)
    hours_start: Mapped[str] = mapped_column(String(5), nullable=False)
    hours_end: Mapped[str] = mapped_column(String(5), nullable=False)
    hours_timezone: Mapped[str] = mapped_column(String(64), nullable=False, default="UTC")
    holiday_calendar: Mapped[list[date]] = mapped_column(ARRAY(Date), default=list)
    cut_off_time: Mapped[str | None] = mapped_column(String(5))
    settlement_time: Mapped[str] = mapped_column(String(20), nullable=False)

    # Fees
    flat_fee: Mapped[Decimal | None] = mapped_column(Numeric(precision=28, scale=DECIMAL_PLACES))
    percentage_fee: Mapped[Decimal | None] = mapped_column(Numeric(precision=12, scale=DECIMAL_PLACES))
    fee_currency: Mapped[str | None] = mapped_column(String(3))
    spread: Mapped[Decimal | None] = mapped_column(Numeric(precision=12, scale=DECIMAL_PLACES))

    # Limits
    min_amount: Mapped[Decimal | None] = mapped_column(Numeric(precision=28, scale=DECIMAL_PLACES))
    max_amount: Mapped[Decimal | None] = mapped_column(Numeric(precision=28, scale=DECIMAL_PLACES))
    limit_currency: Mapped[str | None] = mapped_column(String(3))

    supports_fx: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    # Timestamps (timezone-aware)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    # ------------------------------------------------------------------
    # Record conversion
    # ------------------------------------------------------------------

    def to_record(self) -> SchemeRecord:
        """Snapshot this row as an immutable SchemeRecord."""
        return SchemeRecord.from_mapping({
            "id": self.id,
            "name": self.name,
            "kind": self.kind,
            "currency": self.currency,
            "target_currency": self.target_currency,
            "country_scope": self.country_scope,
            "available_days": self.available_days,
            "operating_hours": {
                "start": self.hours_start,
                "end": self.hours_end,
                "timezone": self.hours_timezone,
            },
            "holiday_calendar": self.holiday_calendar or [],
            "cut_off_time": self.cut_off_time,
            "settlement_time": self.settlement_time,
            "fees": {
                "flat_fee": self.flat_fee,
                "percentage_fee": self.percentage_fee,
                "currency": self.fee_currency,
            },
            "spread": self.spread,
            "limits": {
                "min_amount": self.min_amount,
                "max_amount": self.max_amount,
                "currency": self.limit_currency,
            },
            "supports_fx": self.supports_fx,
        })

    def apply_record(self, record: SchemeRecord) -> None:
        """Replace every configuration column with the values of *record*."""
        self.name = record.name
        self.kind = record.kind
        self.currency = record.currency
        self.target_currency = record.target_currency
        self.country_scope = record.country_scope
        self.available_days = list(record.available_days)
        self.hours_start = record.operating_hours.start
        self.hours_end = record.operating_hours.end
        self.hours_timezone = record.operating_hours.timezone
        self.holiday_calendar = list(record.holiday_calendar)
        self.cut_off_time = record.cut_off_time
        self.settlement_time = record.settlement_time
        self.flat_fee = record.fees.flat_fee
        self.percentage_fee = record.fees.percentage_fee
        self.fee_currency = record.fees.currency
        self.spread = record.spread
        self.min_amount = record.limits.min_amount
        self.max_amount = record.limits.max_amount
        self.limit_currency = record.limits.currency
        self.supports_fx = record.supports_fx

    @classmethod
    def from_record(cls, record: SchemeRecord) -> "PaymentScheme":
        scheme = cls(id=uuid.UUID(record.id))
        scheme.apply_record(record)
        return scheme

    def __repr__(self) -> str:
        return (
            f"<PaymentScheme {self.id} "
            f"name={self.name!r} "
            f"kind={self.kind.value if self.kind else 'N/A'}>"
        )


# ---------------------------------------------------------------------------
# Auto-set Python-side defaults on construction
# ---------------------------------------------------------------------------


@event.listens_for(PaymentScheme, "init")
def _set_defaults(target, args, kwargs):
    if "id" not in kwargs:
        target.id = uuid.uuid4()
    if "holiday_calendar" not in kwargs:
        target.holiday_calendar = []
    if "hours_timezone" not in kwargs:
        target.hours_timezone = "UTC"
    if "supports_fx" not in kwargs:
        target.supports_fx = False
    if "created_at" not in kwargs:
        target.created_at = datetime.now(timezone.utc)
    if "updated_at" not in kwargs:
        target.updated_at = datetime.now(timezone.utc)
