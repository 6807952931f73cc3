"""Tests for SchemeService — persistence, Redis caching, and engine dispatch."""

import json
import uuid
from datetime import datetime, timezone
from decimal import Decimal

import pytest

from app.config import settings
from app.scheme_engine import (
    ConfigurationInvalidError,
    InvalidAmountError,
    SchemeKind,
)
from app.services.scheme_service import (
    SCHEME_CACHE_KEY_PREFIX,
    SchemeNotFoundError,
    SchemeService,
)

UTC = timezone.utc
TUESDAY_10AM = datetime(2025, 2, 4, 10, 0, tzinfo=UTC)
SATURDAY_10AM = datetime(2025, 2, 8, 10, 0, tzinfo=UTC)


@pytest.fixture
def service(mock_db, mock_redis):
    return SchemeService(mock_db, mock_redis)


# ---------------------------------------------------------------------------
# Lookups and caching
# ---------------------------------------------------------------------------


class TestGetRecord:

    @pytest.mark.asyncio
    async def test_cache_miss_loads_and_caches(
        self, service, mock_redis, make_scheme, scheme_lookup,
    ):
        """A miss reads the row and stores its snapshot with the TTL."""
        scheme = make_scheme()
        scheme_lookup(scheme)

        record = await service.get_record(scheme.id)

        assert record.id == str(scheme.id)
        assert record.name == "SEPA Credit Transfer"
        mock_redis.setex.assert_awaited_once()
        key, ttl, payload = mock_redis.setex.call_args[0]
        assert key == f"{SCHEME_CACHE_KEY_PREFIX}{scheme.id}"
        assert ttl == settings.SCHEME_CACHE_TTL_SECONDS
        assert json.loads(payload)["currency"] == "EUR"

    @pytest.mark.asyncio
    async def test_cache_hit_skips_database(self, service, mock_db, mock_redis, fiat_record):
        mock_redis.get.return_value = json.dumps(fiat_record.to_dict())

        record = await service.get_record("scheme-sepa")

        assert record == fiat_record
        mock_db.execute.assert_not_awaited()
        mock_redis.setex.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_missing_scheme_raises(self, service):
        with pytest.raises(SchemeNotFoundError) as exc_info:
            await service.get_record(uuid.uuid4())
        assert "not found" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_list_schemes(self, service, make_scheme, scheme_lookup):
        scheme = make_scheme()
        scheme_lookup(scheme)
        assert await service.list_schemes() == [scheme]

    @pytest.mark.asyncio
    async def test_list_operational_filters(self, service, make_scheme, scheme_lookup):
        scheme_lookup(make_scheme())
        assert len(await service.list_operational(TUESDAY_10AM)) == 1
        assert await service.list_operational(SATURDAY_10AM) == []


# ---------------------------------------------------------------------------
# Write path
# ---------------------------------------------------------------------------


class TestCreateScheme:

    @pytest.mark.asyncio
    async def test_create_applies_defaults(self, service, mock_db):
        scheme = await service.create_scheme({
            "name": "Faster Payments",
            "kind": "fiat",
            "currency": "gbp",
            "country_scope": "domestic",
        })

        assert scheme.kind == SchemeKind.FIAT
        assert scheme.currency == "GBP"
        assert scheme.settlement_time == "T+1"
        assert scheme.hours_start == "08:00"
        assert scheme.hours_timezone == "Europe/London"
        assert scheme.cut_off_time == "16:00"
        assert isinstance(scheme.id, uuid.UUID)
        mock_db.add.assert_called_once_with(scheme)
        mock_db.flush.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_fx_forced_to_support_fx(self, service):
        scheme = await service.create_scheme({
            "name": "Desk",
            "kind": "fx",
            "currency": "EUR",
            "target_currency": "USD",
            "country_scope": "global",
            "supports_fx": False,
        })
        assert scheme.supports_fx is True
        assert scheme.spread == Decimal("0.001")

    @pytest.mark.asyncio
    async def test_invalid_configuration_rejected(self, service, mock_db):
        with pytest.raises(ConfigurationInvalidError) as exc_info:
            await service.create_scheme({
                "name": "Desk",
                "kind": "fx",
                "currency": "EUR",
                "country_scope": "global",
            })
        assert "FX schemes must have a target_currency" in exc_info.value.violations
        mock_db.add.assert_not_called()


class TestUpdateScheme:

    @pytest.mark.asyncio
    async def test_update_merges_and_invalidates(
        self, service, mock_db, mock_redis, make_scheme, scheme_lookup,
    ):
        scheme = make_scheme()
        scheme_lookup(scheme)

        updated = await service.update_scheme(scheme.id, {
            "name": "SEPA Instant",
            "settlement_time": "instant",
        })

        assert updated is scheme
        assert scheme.name == "SEPA Instant"
        assert scheme.settlement_time == "instant"
        assert scheme.cut_off_time == "16:00"
        assert scheme.currency == "EUR"
        mock_db.commit.assert_awaited_once()
        mock_redis.delete.assert_awaited_once_with(f"{SCHEME_CACHE_KEY_PREFIX}{scheme.id}")

    @pytest.mark.asyncio
    async def test_cache_dropped_after_commit(
        self, service, mock_db, mock_redis, make_scheme, scheme_lookup,
    ):
        """The old snapshot is removed only once the new row is committed."""
        scheme = make_scheme()
        scheme_lookup(scheme)
        calls = []
        mock_db.commit.side_effect = lambda: calls.append("commit")
        mock_redis.delete.side_effect = lambda key: calls.append("cache_delete")

        await service.update_scheme(scheme.id, {"name": "SEPA Instant"})

        assert calls == ["commit", "cache_delete"]

    @pytest.mark.asyncio
    async def test_null_clears_optional_fields(self, service, make_scheme, scheme_lookup):
        scheme = make_scheme()
        scheme_lookup(scheme)

        await service.update_scheme(scheme.id, {
            "cut_off_time": None,
            "holiday_calendar": None,
            "limits": None,
        })

        assert scheme.cut_off_time is None
        assert scheme.holiday_calendar == []
        assert scheme.min_amount is None
        assert scheme.max_amount is None
        assert scheme.limit_currency is None

    @pytest.mark.asyncio
    async def test_null_ignored_for_required_fields(self, service, make_scheme, scheme_lookup):
        scheme = make_scheme()
        scheme_lookup(scheme)

        await service.update_scheme(scheme.id, {
            "name": None,
            "currency": None,
            "operating_hours": None,
            "settlement_time": "T+0",
        })

        assert scheme.name == "SEPA Credit Transfer"
        assert scheme.currency == "EUR"
        assert scheme.hours_start == "08:00"
        assert scheme.settlement_time == "T+0"

    @pytest.mark.asyncio
    async def test_clearing_fx_spread_rejected(self, service, make_scheme, scheme_lookup):
        scheme = make_scheme(
            kind=SchemeKind.FX,
            target_currency="USD",
            spread=Decimal("0.0025"),
            supports_fx=True,
        )
        scheme_lookup(scheme)

        with pytest.raises(ConfigurationInvalidError) as exc_info:
            await service.update_scheme(scheme.id, {"spread": None})

        assert "FX schemes must have a spread value" in exc_info.value.violations
        assert scheme.spread == Decimal("0.0025")

    @pytest.mark.asyncio
    async def test_invalid_update_leaves_row_untouched(
        self, service, mock_db, mock_redis, make_scheme, scheme_lookup,
    ):
        scheme = make_scheme()
        scheme_lookup(scheme)

        with pytest.raises(ConfigurationInvalidError):
            await service.update_scheme(scheme.id, {"available_days": []})

        assert scheme.available_days == [
            "monday", "tuesday", "wednesday", "thursday", "friday",
        ]
        mock_db.commit.assert_not_awaited()
        mock_redis.delete.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_update_missing_scheme(self, service):
        with pytest.raises(SchemeNotFoundError):
            await service.update_scheme(uuid.uuid4(), {"name": "x"})


class TestDeleteScheme:

    @pytest.mark.asyncio
    async def test_delete_removes_row_and_cache(
        self, service, mock_db, mock_redis, make_scheme, scheme_lookup,
    ):
        scheme = make_scheme()
        scheme_lookup(scheme)

        await service.delete_scheme(scheme.id)

        mock_db.delete.assert_awaited_once_with(scheme)
        mock_redis.delete.assert_awaited_once_with(f"{SCHEME_CACHE_KEY_PREFIX}{scheme.id}")

    @pytest.mark.asyncio
    async def test_cache_dropped_after_commit(
        self, service, mock_db, mock_redis, make_scheme, scheme_lookup,
    ):
        scheme = make_scheme()
        scheme_lookup(scheme)
        calls = []
        mock_db.delete.side_effect = lambda obj: calls.append("delete")
        mock_db.commit.side_effect = lambda: calls.append("commit")
        mock_redis.delete.side_effect = lambda key: calls.append("cache_delete")

        await service.delete_scheme(scheme.id)

        assert calls == ["delete", "commit", "cache_delete"]

    @pytest.mark.asyncio
    async def test_delete_missing_scheme(self, service, mock_db):
        with pytest.raises(SchemeNotFoundError):
            await service.delete_scheme(uuid.uuid4())
        mock_db.delete.assert_not_awaited()


# ---------------------------------------------------------------------------
# Decisions
# ---------------------------------------------------------------------------


class TestDecisions:

    @pytest.mark.asyncio
    async def test_availability_when_open(self, service, make_scheme, scheme_lookup):
        scheme = make_scheme()
        scheme_lookup(scheme)
        availability, upcoming = await service.check_availability(scheme.id, TUESDAY_10AM)
        assert availability.operational is True
        assert upcoming is None

    @pytest.mark.asyncio
    async def test_availability_when_closed(self, service, make_scheme, scheme_lookup):
        scheme = make_scheme()
        scheme_lookup(scheme)
        availability, upcoming = await service.check_availability(scheme.id, SATURDAY_10AM)
        assert availability.restrictions == ["not operational on saturday"]
        assert upcoming == datetime(2025, 2, 10, 8, 0, tzinfo=UTC)

    @pytest.mark.asyncio
    async def test_calculate_fees(self, service, make_scheme, scheme_lookup):
        scheme = make_scheme()
        scheme_lookup(scheme)
        result = await service.calculate_fees(scheme.id, Decimal("1000"))
        assert result.total_fee == Decimal("1.5")
        assert result.final_amount == Decimal("1001.5")

    @pytest.mark.asyncio
    async def test_calculate_fees_invalid_amount(self, service, make_scheme, scheme_lookup):
        scheme = make_scheme()
        scheme_lookup(scheme)
        with pytest.raises(InvalidAmountError):
            await service.calculate_fees(scheme.id, Decimal("0"))

    @pytest.mark.asyncio
    async def test_validate_compatibility(self, service, make_scheme, scheme_lookup):
        scheme = make_scheme()
        scheme_lookup(scheme)
        result = await service.validate_compatibility(
            scheme.id, "EUR", "USD", Decimal("100"), TUESDAY_10AM,
        )
        assert result.compatible is False
        assert len(result.reasons) == 2

    @pytest.mark.asyncio
    async def test_get_capabilities(self, service, make_scheme, scheme_lookup):
        scheme = make_scheme(country_scope="domestic", settlement_time="instant")
        scheme_lookup(scheme)
        caps = await service.get_capabilities(scheme.id)
        assert caps.supports_instant_settlement is True
        assert caps.supports_cross_border is False
