"""Commit an import: create missing categories, then insert the rows.

Order of operations
-------------------
1. Collect the ``create`` decisions (distinct pairs, case-insensitive).
2. Work out the parent names those pairs need.
3. Re-read the category store; parents that already exist at parent level
   are not created again.
4. Create the missing parents, one at a time.
5. Create each ``create`` pair that is still missing.
6. Remap rows, normalize expense payment modes, bulk insert.

Any store failure stops the sequence and is raised as :class:`CommitError`.
Nothing is rolled back: categories created before the failure stay, and a
retry of the same import treats them as existing.
"""

from __future__ import annotations

import dataclasses
from collections.abc import Callable, Mapping, Sequence
from typing import Any

from .errors import CommitError
from .logging_setup import get_logger
from .models import (
    CategoryResolution,
    CommitResult,
    PairKey,
    ParsedExpense,
    ParsedRow,
    PaymentMode,
    RecordKind,
)
from .payment_modes import normalize_payment_mode
from .remap import apply_resolutions
from .stores import CategoryStore, PaymentModeLookup, RowStore

logger = get_logger("ledger_import.commit")


def _fold(pair: PairKey) -> tuple[str, str | None]:
    name, sub = pair
    return (name.lower(), sub.lower() if sub is not None else None)


def _store_call(fn: Callable[[], Any]) -> Any:
    try:
        return fn()
    except CommitError:
        raise
    except Exception as exc:
        raise CommitError(str(exc) or type(exc).__name__) from exc


def _create_pairs(resolutions: Mapping[PairKey, CategoryResolution]) -> list[PairKey]:
    seen: set[tuple[str, str | None]] = set()
    pairs: list[PairKey] = []
    for res in resolutions.values():
        if res.action != "create":
            continue
        folded = _fold(res.key)
        if folded in seen:
            continue
        seen.add(folded)
        pairs.append(res.key)
    return pairs


def _row_payload(row: ParsedRow, modes: Sequence[PaymentMode] | None) -> dict[str, Any]:
    values = dataclasses.asdict(row)
    if isinstance(row, ParsedExpense) and modes is not None:
        values["payment_mode"] = normalize_payment_mode(row.payment_mode, modes)
    return values


def commit_import(
    rows: Sequence[ParsedRow],
    resolutions: Mapping[PairKey, CategoryResolution],
    kind: RecordKind | str,
    *,
    category_store: CategoryStore,
    row_store: RowStore,
    payment_mode_lookup: PaymentModeLookup | None = None,
) -> CommitResult:
    """Persist an import and return counts.

    Parameters
    ----------
    rows:
        Parsed rows as produced by the parser (not yet remapped).
    resolutions:
        Decisions keyed by CSV pair; pairs without a decision import as-is.
    kind:
        Record kind; payment modes are only normalized for expenses.
    category_store / row_store:
        Destinations, already scoped to the importing user.
    payment_mode_lookup:
        Known payment modes for normalization. ``None`` stores modes as parsed.

    Returns
    -------
    CommitResult
        ``inserted_count`` rows written, ``created_category_count`` ``create``
        pairs actually written, ``created_parent_count`` implicit parents.

    Raises
    ------
    CommitError
        Wrapping the first store failure; later steps are skipped.
    """

    kind = RecordKind(kind)
    to_create = _create_pairs(resolutions)

    parents_needed: dict[str, str] = {}
    for name, sub in to_create:
        if sub is not None:
            parents_needed.setdefault(name.lower(), name)

    present: set[tuple[str, str | None]] = set()
    if to_create:
        present = {
            _fold((r.name, r.sub_category_name)) for r in _store_call(category_store.list)
        }

    created_parents = 0
    for folded_name, name in parents_needed.items():
        if (folded_name, None) in present:
            continue
        _store_call(lambda name=name: category_store.create(name, None))
        present.add((folded_name, None))
        created_parents += 1
        logger.info("Created parent category %r", name)

    created_pairs = 0
    for pair in to_create:
        if _fold(pair) in present:
            continue
        name, sub = pair
        _store_call(lambda name=name, sub=sub: category_store.create(name, sub))
        present.add(_fold(pair))
        created_pairs += 1
        logger.info("Created category %r / %r", name, sub)

    final_rows = apply_resolutions(rows, resolutions)
    modes: list[PaymentMode] | None = None
    if kind is RecordKind.EXPENSE and payment_mode_lookup is not None and final_rows:
        modes = _store_call(payment_mode_lookup.list)
    payload = [_row_payload(r, modes) for r in final_rows]
    if payload:
        _store_call(lambda: row_store.bulk_insert(payload))

    logger.info(
        "Committed %d %s row(s); created %d categor(ies) and %d parent(s)",
        len(payload),
        kind,
        created_pairs,
        created_parents,
    )
    return CommitResult(
        inserted_count=len(payload),
        created_category_count=created_pairs,
        created_parent_count=created_parents,
    )


__all__ = ["commit_import"]
