"""
Payment scheme endpoints.

CRUD for scheme configurations plus the three rule-engine operations:
availability, fee calculation, and compatibility validation. Business
outcomes (closed, incompatible) are 200 responses carrying ``false``
and reasons; malformed input maps to 400 and unknown ids to 404.
"""

import logging
from datetime import datetime, timezone
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.models.payment_scheme import PaymentScheme
from app.redis_client import get_redis
from app.scheme_engine import (
    AmountOutOfLimitsError,
    ConfigurationInvalidError,
    InvalidAmountError,
)
from app.schemas.scheme import (
    AvailabilityResponse,
    CapabilitiesResponse,
    CompatibilityRequest,
    CompatibilityResponse,
    FeeBreakdown,
    FeeCalculationRequest,
    FeeCalculationResponse,
    SchemeCreateRequest,
    SchemeResponse,
    SchemeUpdateRequest,
)
from app.services.scheme_service import SchemeNotFoundError, SchemeService

logger = logging.getLogger(__name__)

router = APIRouter()


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _build_response(scheme: PaymentScheme) -> SchemeResponse:
    """Build a SchemeResponse from an ORM PaymentScheme."""
    return SchemeResponse.from_record(
        scheme.to_record(),
        created_at=scheme.created_at,
        updated_at=scheme.updated_at,
    )


def _as_utc(value: datetime | None) -> datetime:
    """Default to now; timestamps without an offset are read as UTC."""
    if value is None:
        return datetime.now(timezone.utc)
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _not_found(exc: SchemeNotFoundError) -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))


def _invalid_configuration(exc: ConfigurationInvalidError) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_400_BAD_REQUEST,
        detail={
            "message": "Configuration validation failed",
            "violations": exc.violations,
        },
    )


# ---------------------------------------------------------------------------
# CRUD
# ---------------------------------------------------------------------------


@router.post("/", response_model=SchemeResponse, status_code=status.HTTP_201_CREATED)
async def create_scheme(
    payload: SchemeCreateRequest,
    db: AsyncSession = Depends(get_db),
    redis=Depends(get_redis),
):
    """
    Create a payment scheme.

    Omitted calendar, settlement and FX fields take the defaults of the
    scheme kind. The resolved configuration is validated before saving;
    every violation is returned in a single 400 response.
    """
    svc = SchemeService(db, redis)
    try:
        scheme = await svc.create_scheme(payload.model_dump(exclude_none=True))
    except ConfigurationInvalidError as exc:
        raise _invalid_configuration(exc)
    return _build_response(scheme)


@router.get("/", response_model=list[SchemeResponse])
async def list_schemes(db: AsyncSession = Depends(get_db), redis=Depends(get_redis)):
    """List all payment schemes ordered by name."""
    svc = SchemeService(db, redis)
    return [_build_response(s) for s in await svc.list_schemes()]


@router.get("/operational/current", response_model=list[SchemeResponse])
async def list_operational_schemes(
    db: AsyncSession = Depends(get_db),
    redis=Depends(get_redis),
):
    """Schemes that are operational right now."""
    svc = SchemeService(db, redis)
    return [_build_response(s) for s in await svc.list_operational()]


@router.get("/{scheme_id}", response_model=SchemeResponse)
async def get_scheme(
    scheme_id: UUID,
    db: AsyncSession = Depends(get_db),
    redis=Depends(get_redis),
):
    svc = SchemeService(db, redis)
    try:
        scheme = await svc.get_scheme(scheme_id)
    except SchemeNotFoundError as exc:
        raise _not_found(exc)
    return _build_response(scheme)


@router.put("/{scheme_id}", response_model=SchemeResponse)
async def update_scheme(
    scheme_id: UUID,
    payload: SchemeUpdateRequest,
    db: AsyncSession = Depends(get_db),
    redis=Depends(get_redis),
):
    """Update a scheme; the merged configuration is re-validated."""
    svc = SchemeService(db, redis)
    try:
        scheme = await svc.update_scheme(scheme_id, payload.model_dump(exclude_unset=True))
    except SchemeNotFoundError as exc:
        raise _not_found(exc)
    except ConfigurationInvalidError as exc:
        raise _invalid_configuration(exc)
    return _build_response(scheme)


@router.delete("/{scheme_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_scheme(
    scheme_id: UUID,
    db: AsyncSession = Depends(get_db),
    redis=Depends(get_redis),
):
    svc = SchemeService(db, redis)
    try:
        await svc.delete_scheme(scheme_id)
    except SchemeNotFoundError as exc:
        raise _not_found(exc)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# ---------------------------------------------------------------------------
# Rule-engine operations
# ---------------------------------------------------------------------------


@router.get("/{scheme_id}/availability", response_model=AvailabilityResponse)
async def check_availability(
    scheme_id: UUID,
    check_time: datetime | None = Query(
        None,
        description="Instant to check (ISO 8601, defaults to now)",
        examples=["2025-02-06T14:30:00Z"],
    ),
    db: AsyncSession = Depends(get_db),
    redis=Depends(get_redis),
):
    """
    Check whether a scheme is operational at ``check_time``.

    When closed, the response lists every restriction (weekday, holiday,
    operating hours) and the next instant the scheme opens.
    """
    at = _as_utc(check_time)
    svc = SchemeService(db, redis)
    try:
        availability, upcoming = await svc.check_availability(scheme_id, at)
    except SchemeNotFoundError as exc:
        raise _not_found(exc)
    except ConfigurationInvalidError as exc:
        raise _invalid_configuration(exc)

    return AvailabilityResponse(
        scheme_id=scheme_id,
        is_operational=availability.operational,
        check_time=at,
        next_availability=upcoming,
        restrictions=availability.restrictions or None,
    )


@router.get("/{scheme_id}/capabilities", response_model=CapabilitiesResponse)
async def get_capabilities(
    scheme_id: UUID,
    db: AsyncSession = Depends(get_db),
    redis=Depends(get_redis),
):
    svc = SchemeService(db, redis)
    try:
        capabilities = await svc.get_capabilities(scheme_id)
    except SchemeNotFoundError as exc:
        raise _not_found(exc)
    return CapabilitiesResponse(
        scheme_id=scheme_id,
        supports_instant_settlement=capabilities.supports_instant_settlement,
        supports_scheduled_payments=capabilities.supports_scheduled_payments,
        supports_high_value=capabilities.supports_high_value,
        supports_cross_border=capabilities.supports_cross_border,
    )


@router.post("/{scheme_id}/calculate-fees", response_model=FeeCalculationResponse)
async def calculate_fees(
    scheme_id: UUID,
    payload: FeeCalculationRequest,
    db: AsyncSession = Depends(get_db),
    redis=Depends(get_redis),
):
    """
    Calculate the fees for a payment amount.

    Returns 400 when the amount is not positive or falls outside the
    scheme's limits. No rounding is applied to the result.
    """
    svc = SchemeService(db, redis)
    try:
        result = await svc.calculate_fees(
            scheme_id, payload.amount, payload.source_currency, payload.target_currency,
        )
    except SchemeNotFoundError as exc:
        raise _not_found(exc)
    except (InvalidAmountError, AmountOutOfLimitsError) as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))

    return FeeCalculationResponse(
        base_amount=result.base_amount,
        total_fee=result.total_fee,
        fee_breakdown=FeeBreakdown(**result.breakdown),
        final_amount=result.final_amount,
    )


@router.post("/{scheme_id}/validate-compatibility", response_model=CompatibilityResponse)
async def validate_compatibility(
    scheme_id: UUID,
    payload: CompatibilityRequest,
    db: AsyncSession = Depends(get_db),
    redis=Depends(get_redis),
):
    """
    Check whether a scheme can carry a currency pair and amount.

    All checks run (currency support, FX capability, limits, operating
    status) and every failing reason is returned.
    """
    svc = SchemeService(db, redis)
    try:
        result = await svc.validate_compatibility(
            scheme_id,
            payload.source_currency,
            payload.target_currency,
            payload.amount,
            _as_utc(payload.check_time),
        )
    except SchemeNotFoundError as exc:
        raise _not_found(exc)
    except InvalidAmountError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
    except ConfigurationInvalidError as exc:
        raise _invalid_configuration(exc)

    return CompatibilityResponse(
        scheme_id=scheme_id,
        is_compatible=result.compatible,
        source_currency=payload.source_currency,
        target_currency=payload.target_currency,
        amount=payload.amount,
        incompatibility_reasons=result.reasons or None,
    )
