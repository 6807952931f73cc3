"""
Payment scheme service — persistence, caching, and rule-engine dispatch.

Loads schemes through an async SQLAlchemy session, caches immutable
``SchemeRecord`` snapshots in Redis, and hands them to the pure
functions in ``app.scheme_engine`` for every decision:

  - write path: resolve_defaults → SchemeRecord → ensure_valid → persist
  - read path:  cache/DB → SchemeRecord → evaluate / calculate / is_compatible
"""

import json
import logging
import uuid
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any

from sqlalchemy import select

from app.config import settings
from app.models.payment_scheme import PaymentScheme
from app.scheme_engine import (
    Availability,
    Capabilities,
    Compatibility,
    ConfigurationInvalidError,
    FeeCalculation,
    SchemeRecord,
    calculate,
    ensure_valid,
    evaluate,
    get_capabilities,
    is_compatible,
    is_operational,
    next_availability,
    resolve_defaults,
)

logger = logging.getLogger(__name__)

SCHEME_CACHE_KEY_PREFIX = "scheme:"

# Optional fields an update may clear by sending null
CLEARABLE_FIELDS = frozenset({
    "target_currency", "holiday_calendar", "cut_off_time", "fees", "spread", "limits",
})


class SchemeNotFoundError(Exception):
    """Raised when no scheme exists for the requested id."""

    def __init__(self, scheme_id):
        self.scheme_id = scheme_id
        super().__init__(f"Payment scheme not found: {scheme_id}")


def _cache_key(scheme_id) -> str:
    return f"{SCHEME_CACHE_KEY_PREFIX}{scheme_id}"


class SchemeService:
    """Scheme CRUD plus availability, fee, and compatibility decisions."""

    def __init__(self, db, redis):
        self.db = db
        self.redis = redis

    # --- Write path ---

    async def create_scheme(self, data: dict[str, Any]) -> PaymentScheme:
        """
        Create a scheme from a partial configuration.

        Applies per-kind defaults, validates the resolved record and
        persists it. Raises ConfigurationInvalidError with every
        violation when the configuration is inconsistent.
        """
        logger.debug("Creating payment scheme: %s", data.get("name"))

        config = {k: v for k, v in data.items() if k != "kind"}
        resolved = resolve_defaults(data["kind"], config)
        resolved["id"] = str(uuid.uuid4())
        record = SchemeRecord.from_mapping(resolved)

        try:
            ensure_valid(record)
        except ConfigurationInvalidError as exc:
            logger.warning(
                "Rejected payment scheme %r: %s", record.name, "; ".join(exc.violations),
            )
            raise

        scheme = PaymentScheme.from_record(record)
        self.db.add(scheme)
        await self.db.flush()

        logger.info("Payment scheme created: %s (%s)", scheme.id, scheme.name)
        return scheme

    async def update_scheme(self, scheme_id, updates: dict[str, Any]) -> PaymentScheme:
        """
        Merge *updates* into the stored configuration and replace it.

        A None value clears the field when it is in ``CLEARABLE_FIELDS``
        and is ignored otherwise. The merged record is re-validated
        before anything is written. The change is committed before the
        cached snapshot is dropped.
        """
        logger.debug("Updating payment scheme: %s", scheme_id)
        scheme = await self.get_scheme(scheme_id)

        merged = scheme.to_record().to_dict()
        merged.update({
            k: v for k, v in updates.items()
            if v is not None or k in CLEARABLE_FIELDS
        })
        record = SchemeRecord.from_mapping(merged)

        try:
            ensure_valid(record)
        except ConfigurationInvalidError as exc:
            logger.warning(
                "Rejected update to payment scheme %s: %s",
                scheme_id, "; ".join(exc.violations),
            )
            raise

        scheme.apply_record(record)
        scheme.updated_at = datetime.now(timezone.utc)
        await self.db.commit()
        await self.redis.delete(_cache_key(scheme_id))

        logger.info("Payment scheme updated: %s", scheme_id)
        return scheme

    async def delete_scheme(self, scheme_id) -> None:
        logger.debug("Deleting payment scheme: %s", scheme_id)
        scheme = await self.get_scheme(scheme_id)
        await self.db.delete(scheme)
        await self.db.commit()
        await self.redis.delete(_cache_key(scheme_id))
        logger.info("Payment scheme deleted: %s", scheme_id)

    # --- Lookups ---

    async def get_scheme(self, scheme_id) -> PaymentScheme:
        """Load a scheme row or raise SchemeNotFoundError."""
        result = await self.db.execute(
            select(PaymentScheme).where(PaymentScheme.id == scheme_id)
        )
        scheme = result.scalar_one_or_none()
        if scheme is None:
            logger.warning("Payment scheme not found: %s", scheme_id)
            raise SchemeNotFoundError(scheme_id)
        return scheme

    async def get_record(self, scheme_id) -> SchemeRecord:
        """
        Return the scheme as a SchemeRecord (from cache or fresh load).

        A record reflects the database state when it was loaded; the
        cache entry lives for ``SCHEME_CACHE_TTL_SECONDS`` or until the
        scheme is updated or deleted through this service.
        """
        cached = await self.redis.get(_cache_key(scheme_id))
        if cached is not None:
            return SchemeRecord.from_mapping(json.loads(cached))

        record = (await self.get_scheme(scheme_id)).to_record()
        await self.redis.setex(
            _cache_key(scheme_id),
            settings.SCHEME_CACHE_TTL_SECONDS,
            json.dumps(record.to_dict()),
        )
        return record

    async def list_schemes(self) -> list[PaymentScheme]:
        result = await self.db.execute(
            select(PaymentScheme).order_by(PaymentScheme.name)
        )
        return list(result.scalars().all())

    async def list_operational(self, at: datetime | None = None) -> list[PaymentScheme]:
        """Schemes operational at *at* (defaults to now)."""
        at = at or datetime.now(timezone.utc)
        schemes = await self.list_schemes()
        return [s for s in schemes if is_operational(s.to_record(), at)]

    # --- Decisions ---

    async def check_availability(
        self, scheme_id, at: datetime | None = None,
    ) -> tuple[Availability, datetime | None]:
        """Availability at *at* plus the next operational instant when closed."""
        at = at or datetime.now(timezone.utc)
        record = await self.get_record(scheme_id)
        availability = evaluate(record, at)
        upcoming = None if availability.operational else next_availability(record, at)
        logger.debug(
            "Scheme %s availability at %s: operational=%s restrictions=%s",
            scheme_id, at.isoformat(), availability.operational, availability.restrictions,
        )
        return availability, upcoming

    async def calculate_fees(
        self,
        scheme_id,
        amount: Decimal,
        source_currency: str | None = None,
        target_currency: str | None = None,
    ) -> FeeCalculation:
        logger.debug("Calculating fees for scheme %s, amount %s", scheme_id, amount)
        record = await self.get_record(scheme_id)
        return calculate(record, amount, source_currency, target_currency)

    async def validate_compatibility(
        self,
        scheme_id,
        source_currency: str,
        target_currency: str,
        amount: Decimal,
        at: datetime | None = None,
    ) -> Compatibility:
        at = at or datetime.now(timezone.utc)
        record = await self.get_record(scheme_id)
        result = is_compatible(record, source_currency, target_currency, amount, at)
        if not result.compatible:
            logger.info(
                "Scheme %s incompatible with %s->%s %s: %s",
                scheme_id, source_currency, target_currency, amount,
                "; ".join(result.reasons),
            )
        return result

    async def get_capabilities(self, scheme_id) -> Capabilities:
        record = await self.get_record(scheme_id)
        return get_capabilities(record)
