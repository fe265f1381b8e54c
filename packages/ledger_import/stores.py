"""Store protocols used by the commit step, plus SQLAlchemy implementations.

The commit orchestrator only sees the protocols, so tests (and other
backends) can substitute their own stores. The SQL stores are bound to one
session and one user; every row they write carries that ``user_id``.

Writes commit immediately: each created category and the bulk insert are
their own transactions. A failure part-way through a commit therefore keeps
the categories created before it, which is safe because category creation is
idempotent and a retried import reuses them.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from datetime import date
from typing import Any, Protocol

from db.models.finance import ExpenseTransaction, IncomeRecord, RowModel
from sqlalchemy import insert
from sqlalchemy.orm import Session

from .categories import category_model, create_category, list_categories
from .logging_setup import get_logger
from .models import ExistingCategoryRow, PaymentMode, RecordKind
from .payment_modes import list_payment_modes

logger = get_logger("ledger_import.stores")

# ---------------------------------------------------------------------------
# Protocols
# ---------------------------------------------------------------------------


class CategoryStore(Protocol):
    def list(self) -> list[ExistingCategoryRow]: ...

    def create(self, name: str, sub_category_name: str | None) -> None: ...


class RowStore(Protocol):
    def bulk_insert(self, rows: Sequence[Mapping[str, Any]]) -> None: ...


class PaymentModeLookup(Protocol):
    def list(self) -> list[PaymentMode]: ...


# ---------------------------------------------------------------------------
# SQLAlchemy implementations
# ---------------------------------------------------------------------------

_ROW_MODELS: dict[RecordKind, RowModel] = {
    RecordKind.EXPENSE: ExpenseTransaction,
    RecordKind.INCOME: IncomeRecord,
}


class SqlCategoryStore:
    def __init__(self, session: Session, *, kind: RecordKind | str, user_id: str) -> None:
        self._session = session
        self._model = category_model(kind)
        self._user_id = user_id

    def list(self) -> list[ExistingCategoryRow]:
        return list_categories(self._session, model=self._model, user_id=self._user_id)

    def create(self, name: str, sub_category_name: str | None) -> None:
        try:
            result = create_category(
                self._session,
                model=self._model,
                user_id=self._user_id,
                name=name,
                sub_category_name=sub_category_name,
            )
            self._session.commit()
        except Exception:
            self._session.rollback()
            raise
        if not result["created"]:
            logger.debug("Category %r / %r already present", name, sub_category_name)


class SqlRowStore:
    """Bulk-inserts parsed rows into ``transactions`` or ``income``."""

    def __init__(self, session: Session, *, kind: RecordKind | str, user_id: str) -> None:
        self._session = session
        self._model = _ROW_MODELS[RecordKind(kind)]
        self._user_id = user_id

    def _payload(self, row: Mapping[str, Any]) -> dict[str, Any]:
        values = dict(row)
        values["date"] = date.fromisoformat(values["date"])
        values["user_id"] = self._user_id
        return values

    def bulk_insert(self, rows: Sequence[Mapping[str, Any]]) -> None:
        if not rows:
            return
        try:
            self._session.execute(insert(self._model), [self._payload(r) for r in rows])
            self._session.commit()
        except Exception:
            self._session.rollback()
            raise
        logger.info("Inserted %d row(s) into %s", len(rows), self._model.__tablename__)


class SqlPaymentModeLookup:
    def __init__(self, session: Session, *, user_id: str) -> None:
        self._session = session
        self._user_id = user_id

    def list(self) -> list[PaymentMode]:
        return list_payment_modes(self._session, user_id=self._user_id)


__all__ = [
    "CategoryStore",
    "RowStore",
    "PaymentModeLookup",
    "SqlCategoryStore",
    "SqlRowStore",
    "SqlPaymentModeLookup",
]
