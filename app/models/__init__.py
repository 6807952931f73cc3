"""SQLAlchemy ORM models for SchemeFlow."""

from app.models.payment_scheme import PaymentScheme

__all__ = ["PaymentScheme"]
