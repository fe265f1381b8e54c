from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Date,
    DateTime,
    Index,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
    func,
    text,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    pass


# ---------------------------
# Taxonomy: budget_categories / income_categories
# ---------------------------


class _CategoryColumns:
    """Shared shape of the two per-user, two-level category tables.

    A row with ``sub_category_name IS NULL`` is a parent. Children repeat the
    parent's ``name``; there is no foreign key between levels. Name
    uniqueness is case-insensitive per user and enforced by the service layer
    (``ledger_import.categories.create_category``).
    """

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(String, nullable=False)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    sub_category_name: Mapped[str | None] = mapped_column(String(100), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )


class BudgetCategory(_CategoryColumns, Base):
    __tablename__ = "budget_categories"

    __table_args__ = (Index("ix_budget_categories_user_name", "user_id", "name"),)


class IncomeCategory(_CategoryColumns, Base):
    __tablename__ = "income_categories"

    __table_args__ = (Index("ix_income_categories_user_name", "user_id", "name"),)


# ---------------------------
# Rows: transactions / income
# ---------------------------


class ExpenseTransaction(Base):
    __tablename__ = "transactions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(String, nullable=False)
    date: Mapped[date] = mapped_column(Date, nullable=False)
    amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    # The user's own share; equals ``amount`` unless the bill was split.
    personal_amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    # Category columns hold names, not ids, matching the CSV and taxonomy text.
    category: Mapped[str] = mapped_column(String(100), nullable=False)
    sub_category: Mapped[str | None] = mapped_column(String(100), nullable=True)
    payment_mode: Mapped[str] = mapped_column(
        String(100), nullable=False, server_default=text("'cash'")
    )
    description: Mapped[str] = mapped_column(Text, nullable=False, server_default=text("''"))
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    credit_card_id: Mapped[str | None] = mapped_column(String, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )

    __table_args__ = (
        CheckConstraint("amount >= 0", name="ck_transactions_amount_non_negative"),
        Index("ix_transactions_user_date", "user_id", "date"),
    )


class IncomeRecord(Base):
    __tablename__ = "income"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(String, nullable=False)
    date: Mapped[date] = mapped_column(Date, nullable=False)
    amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    category: Mapped[str] = mapped_column(String(100), nullable=False)
    sub_category: Mapped[str | None] = mapped_column(String(100), nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )

    __table_args__ = (
        CheckConstraint("amount >= 0", name="ck_income_amount_non_negative"),
        Index("ix_income_user_date", "user_id", "date"),
    )


# ---------------------------
# Reference: payment_modes
# ---------------------------


class PaymentModeRow(Base):
    __tablename__ = "payment_modes"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(String, nullable=False)
    # Stored on transactions.payment_mode; ``label`` is for display and matching.
    value: Mapped[str] = mapped_column(String(100), nullable=False)
    label: Mapped[str] = mapped_column(String(100), nullable=False)
    is_system: Mapped[bool] = mapped_column(
        Boolean, nullable=False, server_default=text("false")
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )

    __table_args__ = (UniqueConstraint("user_id", "value", name="uq_payment_modes_user_value"),)


type CategoryModel = type[BudgetCategory] | type[IncomeCategory]
type RowModel = type[ExpenseTransaction] | type[IncomeRecord]


__all__ = [
    "Base",
    "BudgetCategory",
    "IncomeCategory",
    "ExpenseTransaction",
    "IncomeRecord",
    "PaymentModeRow",
    "CategoryModel",
    "RowModel",
]
