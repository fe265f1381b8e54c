"""db: shared database library (SQLAlchemy/Alembic).

Public exports
--------------
- ``Base`` and ``metadata`` for Alembic autogenerate/targeting
- ORM models in ``db.models.finance`` (re-exported for convenience)
- Engine/session helpers live in ``db.client``
"""

from __future__ import annotations

from .models.finance import (
    Base,
    BudgetCategory,
    ExpenseTransaction,
    IncomeCategory,
    IncomeRecord,
    PaymentModeRow,
)

# Alembic's env.py targets this metadata.
metadata = Base.metadata

__all__ = [
    "Base",
    "metadata",
    "BudgetCategory",
    "IncomeCategory",
    "ExpenseTransaction",
    "IncomeRecord",
    "PaymentModeRow",
]
