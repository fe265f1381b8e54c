"""Category domain helpers and service operations.

Both taxonomies (budget categories for expenses, income categories for income)
share one shape: per-user rows of ``(name, sub_category_name)`` where a
``NULL`` sub-category marks a parent. This module is the only writer of those
tables.

Exports
-------
- ``create_category(...)``: idempotent creation with case-insensitive
  duplicate detection. Returns the created/existing row and a ``created`` flag.
- ``list_categories(...)``: the user's taxonomy as
  :class:`~ledger_import.models.ExistingCategoryRow` values.
- ``category_model(kind)``: the ORM class backing a record kind.
"""

from __future__ import annotations

from typing import TypedDict

from db.models.finance import BudgetCategory, CategoryModel, IncomeCategory
from sqlalchemy import func, select
from sqlalchemy.orm import Session

from .logging_setup import get_logger
from .models import ExistingCategoryRow, RecordKind
from .sanitize import MAX_LENGTHS

logger = get_logger("ledger_import.categories")

_CATEGORY_MODELS: dict[RecordKind, CategoryModel] = {
    RecordKind.EXPENSE: BudgetCategory,
    RecordKind.INCOME: IncomeCategory,
}


def category_model(kind: RecordKind | str) -> CategoryModel:
    return _CATEGORY_MODELS[RecordKind(kind)]


# ---------------------------
# Service result shape
# ---------------------------


class CategoryDict(TypedDict):
    id: int
    name: str
    sub_category_name: str | None


class CreateCategoryResult(TypedDict):
    category: CategoryDict
    created: bool


def _row_to_dict(row) -> CategoryDict:  # pragma: no cover - trivial mapping
    return {"id": row.id, "name": row.name, "sub_category_name": row.sub_category_name}


def _validate_label(value: str, what: str) -> str:
    label = value.strip()
    if not label:
        raise ValueError(f"{what} cannot be empty")
    limit = MAX_LENGTHS["category"]
    if len(label) > limit:
        raise ValueError(f"{what} must be at most {limit} characters")
    return label


def find_category(
    session: Session,
    *,
    model: CategoryModel,
    user_id: str,
    name: str,
    sub_category_name: str | None,
):
    """Return the user's row equal to the pair (case-insensitive), or ``None``."""

    sub_clause = (
        model.sub_category_name.is_(None)
        if sub_category_name is None
        else func.lower(model.sub_category_name) == sub_category_name.lower()
    )
    return (
        session.execute(
            select(model).where(
                model.user_id == user_id,
                func.lower(model.name) == name.lower(),
                sub_clause,
            )
        )
        .scalars()
        .first()
    )


def create_category(
    session: Session,
    *,
    model: CategoryModel,
    user_id: str,
    name: str,
    sub_category_name: str | None = None,
) -> CreateCategoryResult:
    """Create a category row unless an equivalent one exists.

    Parameters
    ----------
    session:
        SQLAlchemy session; the caller owns commit/rollback.
    model:
        :class:`BudgetCategory` or :class:`IncomeCategory`.
    user_id:
        Owner of the taxonomy.
    name / sub_category_name:
        The pair to create. ``sub_category_name=None`` creates a parent.

    Returns
    -------
    dict
        ``{"category": {...}, "created": bool}``.

    Idempotency
    -----------
    A row matching the pair case-insensitively counts as already present and
    is returned with ``created=False``; nothing is written.

    Raises
    ------
    ValueError
        Empty or over-long labels, or a child whose parent name has no rows at
        all for this user (children are never created orphaned).
    """

    name_n = _validate_label(name, "Category name")
    sub_n = (
        _validate_label(sub_category_name, "Sub-category name")
        if sub_category_name is not None
        else None
    )

    existing = find_category(
        session, model=model, user_id=user_id, name=name_n, sub_category_name=sub_n
    )
    if existing is not None:
        return {"category": _row_to_dict(existing), "created": False}

    if sub_n is not None:
        parent_rows = session.execute(
            select(func.count())
            .select_from(model)
            .where(model.user_id == user_id, func.lower(model.name) == name_n.lower())
        ).scalar_one()
        if not parent_rows:
            raise ValueError(f"Parent category not found: {name_n!r}")

    row = model(user_id=user_id, name=name_n, sub_category_name=sub_n)
    session.add(row)
    session.flush()
    logger.debug("Created %s row %r / %r", model.__tablename__, name_n, sub_n)
    return {"category": _row_to_dict(row), "created": True}


def list_categories(
    session: Session, *, model: CategoryModel, user_id: str
) -> list[ExistingCategoryRow]:
    """The user's taxonomy ordered by name, in insertion order within a name."""

    rows = session.execute(
        select(model.name, model.sub_category_name)
        .where(model.user_id == user_id)
        .order_by(model.name, model.id)
    ).all()
    return [ExistingCategoryRow(name=n, sub_category_name=s) for n, s in rows]


def count_categories(session: Session, *, model: CategoryModel, user_id: str) -> int:
    return session.execute(
        select(func.count()).select_from(model).where(model.user_id == user_id)
    ).scalar_one()


__all__ = [
    "category_model",
    "create_category",
    "find_category",
    "list_categories",
    "count_categories",
    "CategoryDict",
    "CreateCategoryResult",
]
