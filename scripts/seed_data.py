"""
Scheme seeder — populates the database with sample payment schemes.

Usage:
    python scripts/seed_data.py

Creates (through SchemeService, so defaults and validation apply):
  - SEPA Credit Transfer (fiat, EUR)
  - Faster Payments (fiat, GBP, domestic)
  - Bitcoin Network (crypto, BTC)
  - EUR/USD FX Desk (fx, EUR -> USD)

Idempotent: skips schemes whose name already exists.
"""

import asyncio
from datetime import date

from sqlalchemy import select

from app.database import async_session
from app.models.payment_scheme import PaymentScheme
from app.redis_client import redis
from app.scheme_engine import ConfigurationInvalidError
from app.services.scheme_service import SchemeService

SAMPLE_SCHEMES: list[dict] = [
    {
        "name": "SEPA Credit Transfer",
        "kind": "fiat",
        "currency": "EUR",
        "country_scope": "EU",
        "operating_hours": {"start": "08:00", "end": "18:00", "timezone": "Europe/Brussels"},
        "holiday_calendar": [date(2025, 12, 25), date(2026, 1, 1)],
        "fees": {"flat_fee": "0.50", "percentage_fee": "0.001", "currency": "EUR"},
        "limits": {"min_amount": "0.01", "max_amount": "1000000", "currency": "EUR"},
        "supports_fx": False,
    },
    {
        "name": "Faster Payments",
        "kind": "fiat",
        "currency": "GBP",
        "country_scope": "domestic",
        "available_days": [
            "monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday",
        ],
        "operating_hours": {"start": "00:00", "end": "23:59", "timezone": "Europe/London"},
        "settlement_time": "instant",
        "fees": {"flat_fee": "0.20"},
        "limits": {"max_amount": "1000000", "currency": "GBP"},
        "supports_fx": False,
    },
    {
        "name": "Bitcoin Network",
        "kind": "crypto",
        "currency": "BTC",
        "country_scope": "global",
        "fees": {"percentage_fee": "0.001"},
        "limits": {"min_amount": "0.0001"},
    },
    {
        "name": "EUR/USD FX Desk",
        "kind": "fx",
        "currency": "EUR",
        "target_currency": "USD",
        "country_scope": "global",
        "spread": "0.0025",
        "fees": {"flat_fee": "1.00", "currency": "EUR"},
        "limits": {"min_amount": "100", "max_amount": "5000000", "currency": "EUR"},
    },
]


async def seed() -> None:
    """Insert sample schemes into the database. Safe to run multiple times."""
    async with async_session() as session:
        existing_names = set(
            (await session.execute(select(PaymentScheme.name))).scalars().all()
        )

        svc = SchemeService(session, redis)
        created = 0
        for data in SAMPLE_SCHEMES:
            if data["name"] in existing_names:
                continue
            try:
                scheme = await svc.create_scheme(dict(data))
            except ConfigurationInvalidError as exc:
                print(f"  Skipped {data['name']}: {', '.join(exc.violations)}")
                continue
            print(f"  Created {scheme.name} ({scheme.kind.value}) -> {scheme.id}")
            created += 1

        await session.commit()

    print(f"\n  Seed complete! {created} new, "
          f"{len(SAMPLE_SCHEMES) - created} skipped")
    await redis.aclose()


if __name__ == "__main__":
    asyncio.run(seed())
