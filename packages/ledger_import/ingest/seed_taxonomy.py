from __future__ import annotations

# Seeder for the per-user default category taxonomies.
#
# Usage (example):
#   python -m ledger_import.ingest.seed_taxonomy \
#     --database-url sqlite:///ledger.db --user-id alice --kind expense
#
# Seeds are JSON lists of ``{"name": ..., "children": [...]}``. A parent with
# children contributes one row per child; a parent without children
# contributes a single parent-level row. Users who already have categories of
# that kind are left untouched.
import argparse
import json
from importlib import resources
from pathlib import Path
from typing import Any

from db.client import session_scope
from sqlalchemy.orm import Session

from ..categories import category_model, count_categories
from ..logging_setup import get_logger
from ..models import RecordKind

logger = get_logger("ledger_import.ingest.seed_taxonomy")

_SEED_FILES: dict[RecordKind, str] = {
    RecordKind.EXPENSE: "budget_categories.v1.json",
    RecordKind.INCOME: "income_categories.v1.json",
}


def _load_json(path: Path | None, kind: RecordKind) -> list[dict[str, Any]]:
    if path is not None:
        with path.open("r", encoding="utf-8") as f:
            data = json.load(f)
    else:
        seed = resources.files("ledger_import.ingest").joinpath("seeds", _SEED_FILES[kind])
        data = json.loads(seed.read_text(encoding="utf-8"))
    if not isinstance(data, list):
        raise ValueError("Seed JSON must be a list of parent categories")
    return data


def default_taxonomy(
    kind: RecordKind | str, *, file: Path | None = None
) -> list[tuple[str, str | None]]:
    """Flatten a seed file into ``(name, sub_category_name)`` pairs, in order."""

    pairs: list[tuple[str, str | None]] = []
    for parent in _load_json(file, RecordKind(kind)):
        name = str(parent["name"])
        children = parent.get("children") or []
        if not children:
            pairs.append((name, None))
        pairs.extend((name, str(child)) for child in children)
    return pairs


def seed_default_categories(
    session: Session, *, kind: RecordKind | str, user_id: str, file: Path | None = None
) -> int:
    """Insert the default taxonomy for ``user_id`` if they have no categories.

    Returns the number of rows inserted. The caller owns the transaction.
    """

    model = category_model(kind)
    if count_categories(session, model=model, user_id=user_id):
        return 0
    pairs = default_taxonomy(kind, file=file)
    for name, sub in pairs:
        session.add(model(user_id=user_id, name=name, sub_category_name=sub))
    session.flush()
    logger.info("Seeded %d default %s categories for user %s", len(pairs), kind, user_id)
    return len(pairs)


def main(argv: list[str] | None = None) -> int:
    ap = argparse.ArgumentParser(description="Seed the default category taxonomy for a user")
    ap.add_argument(
        "--database-url",
        required=False,
        default=None,
        help="SQLAlchemy database URL; falls back to $DATABASE_URL when not set",
    )
    ap.add_argument("--user-id", required=True)
    ap.add_argument("--kind", choices=[k.value for k in RecordKind], default="expense")
    ap.add_argument("--file", type=Path, required=False, default=None)
    args = ap.parse_args(argv)

    with session_scope(database_url=args.database_url or None) as session:
        inserted = seed_default_categories(
            session, kind=args.kind, user_id=args.user_id, file=args.file
        )
    print(f"Inserted {inserted} categories.")
    return 0


if __name__ == "__main__":  # pragma: no cover - manual utility
    raise SystemExit(main())
