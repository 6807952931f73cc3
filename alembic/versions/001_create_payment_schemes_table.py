"""create payment_schemes table

Revision ID: 001
Revises:
Create Date: 2025-02-06
"""

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import ARRAY, UUID

revision = "001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "payment_schemes",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("name", sa.String(255), nullable=False, index=True),
        sa.Column(
            "kind",
            sa.Enum("fiat", "crypto", "fx", name="schemekind"),
            nullable=False,
        ),
        sa.Column("currency", sa.String(3), nullable=False, index=True),
        sa.Column("target_currency", sa.String(3), nullable=True),
        sa.Column("country_scope", sa.String(100), nullable=False),
        # Calendar
        sa.Column("available_days", ARRAY(sa.String(9)), nullable=False),
        sa.Column("hours_start", sa.String(5), nullable=False),
        sa.Column("hours_end", sa.String(5), nullable=False),
        sa.Column("hours_timezone", sa.String(64), server_default="UTC", nullable=False),
        sa.Column("holiday_calendar", ARRAY(sa.Date()), server_default="{}", nullable=False),
        sa.Column("cut_off_time", sa.String(5), nullable=True),
        sa.Column("settlement_time", sa.String(20), nullable=False),
        # Fees
        sa.Column("flat_fee", sa.Numeric(28, 10), nullable=True),
        sa.Column("percentage_fee", sa.Numeric(12, 10), nullable=True),
        sa.Column("fee_currency", sa.String(3), nullable=True),
        sa.Column("spread", sa.Numeric(12, 10), nullable=True),
        # Limits
        sa.Column("min_amount", sa.Numeric(28, 10), nullable=True),
        sa.Column("max_amount", sa.Numeric(28, 10), nullable=True),
        sa.Column("limit_currency", sa.String(3), nullable=True),
        sa.Column("supports_fx", sa.Boolean(), server_default="false", nullable=False),
        sa.Column(
            "created_at", sa.DateTime(timezone=True),
            server_default=sa.func.now(), nullable=False,
        ),
        sa.Column(
            "updated_at", sa.DateTime(timezone=True),
            server_default=sa.func.now(), nullable=False,
        ),
        sa.CheckConstraint("currency ~ '^[A-Z]{3}$'", name="ck_payment_schemes_currency"),
        sa.CheckConstraint(
            "target_currency IS NULL OR target_currency ~ '^[A-Z]{3}$'",
            name="ck_payment_schemes_target_currency",
        ),
        sa.CheckConstraint(
            "spread IS NULL OR (spread >= 0 AND spread <= 1)",
            name="ck_payment_schemes_spread",
        ),
        sa.CheckConstraint(
            "kind != 'fx' OR (target_currency IS NOT NULL AND spread IS NOT NULL)",
            name="ck_payment_schemes_fx_fields",
        ),
    )


def downgrade() -> None:
    op.drop_table("payment_schemes")
    sa.Enum(name="schemekind").drop(op.get_bind(), checkfirst=True)
