# ruff: noqa: I001
"""Category taxonomies, expense/income rows, and payment modes.

Revision ID: 0001_import_core
Revises: None
Create Date: 2026-10-17
"""

from __future__ import annotations

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op


# revision identifiers, used by Alembic.
revision: str = "0001_import_core"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def _created_at() -> sa.Column:
    return sa.Column(
        "created_at",
        sa.DateTime(timezone=True),
        nullable=False,
        server_default=sa.func.now(),
    )


def _category_table(name: str) -> None:
    op.create_table(
        name,
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("user_id", sa.String(), nullable=False),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("sub_category_name", sa.String(length=100), nullable=True),
        _created_at(),
    )
    op.create_index(f"ix_{name}_user_name", name, ["user_id", "name"], unique=False)


def upgrade() -> None:
    _category_table("budget_categories")
    _category_table("income_categories")

    op.create_table(
        "transactions",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("user_id", sa.String(), nullable=False),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("personal_amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("category", sa.String(length=100), nullable=False),
        sa.Column("sub_category", sa.String(length=100), nullable=True),
        sa.Column(
            "payment_mode",
            sa.String(length=100),
            nullable=False,
            server_default=sa.text("'cash'"),
        ),
        sa.Column("description", sa.Text(), nullable=False, server_default=sa.text("''")),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("credit_card_id", sa.String(), nullable=True),
        _created_at(),
        sa.CheckConstraint("amount >= 0", name="ck_transactions_amount_non_negative"),
    )
    op.create_index("ix_transactions_user_date", "transactions", ["user_id", "date"], unique=False)

    op.create_table(
        "income",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("user_id", sa.String(), nullable=False),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("category", sa.String(length=100), nullable=False),
        sa.Column("sub_category", sa.String(length=100), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        _created_at(),
        sa.CheckConstraint("amount >= 0", name="ck_income_amount_non_negative"),
    )
    op.create_index("ix_income_user_date", "income", ["user_id", "date"], unique=False)

    op.create_table(
        "payment_modes",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("user_id", sa.String(), nullable=False),
        sa.Column("value", sa.String(length=100), nullable=False),
        sa.Column("label", sa.String(length=100), nullable=False),
        sa.Column("is_system", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        _created_at(),
        sa.UniqueConstraint("user_id", "value", name="uq_payment_modes_user_value"),
    )


def downgrade() -> None:
    op.drop_table("payment_modes")
    op.drop_index("ix_income_user_date", table_name="income")
    op.drop_table("income")
    op.drop_index("ix_transactions_user_date", table_name="transactions")
    op.drop_table("transactions")
    for name in ("income_categories", "budget_categories"):
        op.drop_index(f"ix_{name}_user_name", table_name=name)
        op.drop_table(name)
