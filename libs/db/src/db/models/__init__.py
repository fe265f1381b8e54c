"""Shared SQLAlchemy models registry for the workspace database.

Holds the tables written by ``ledger_import``: the two category taxonomies,
expense and income rows, and payment modes.
"""

from .finance import (
    Base,
    BudgetCategory,
    ExpenseTransaction,
    IncomeCategory,
    IncomeRecord,
    PaymentModeRow,
)

__all__ = [
    "Base",
    "BudgetCategory",
    "IncomeCategory",
    "ExpenseTransaction",
    "IncomeRecord",
    "PaymentModeRow",
]
