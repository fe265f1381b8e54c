"""Workflow orchestrator for importing a CSV file end to end.

Composes file reading, parsing, the review loop, the preview, and the commit
behind one call so the CLI (and other hosts) stay thin.
"""

from __future__ import annotations

import builtins
from collections.abc import Callable
from dataclasses import dataclass
from os import PathLike

from db.client import session_scope

from ..commit import commit_import
from ..ingest.seed_taxonomy import seed_default_categories
from ..ingest.utils import read_csv_text
from ..logging_setup import get_logger
from ..models import CommitResult, ParseResult, RecordKind
from ..payment_modes import seed_default_payment_modes
from ..review import Selector, keep_defaults, render_preview, review_resolutions
from ..session import ImportSession, ImportStep
from ..stores import SqlCategoryStore, SqlPaymentModeLookup, SqlRowStore

logger = get_logger("ledger_import.workflows.import_flow")


@dataclass(frozen=True, slots=True)
class ImportOutcome:
    """What happened to one file.

    ``commit`` is ``None`` when nothing was written: the file had no valid
    rows, or the user declined at the confirmation prompt.
    """

    parse: ParseResult
    commit: CommitResult | None


def import_csv_file(
    csv_path: str | PathLike[str],
    *,
    kind: RecordKind | str,
    user_id: str,
    database_url: str | None = None,
    selector: Selector | None = None,
    accept_defaults: bool = False,
    confirm_fn: Callable[[str], bool] | None = None,
    seed_defaults: bool = True,
    print_fn: Callable[[str], None] = builtins.print,
) -> ImportOutcome:
    """Read, review, and commit one CSV file for ``user_id``.

    Parameters
    ----------
    csv_path:
        File to import.
    kind:
        ``"expense"`` or ``"income"``.
    database_url:
        Optional DB URL override. Falls back to ``DATABASE_URL`` when ``None``.
    selector:
        Review selector; see :func:`ledger_import.review.review_resolutions`.
    accept_defaults:
        Use :func:`~ledger_import.review.keep_defaults` when no selector is
        given, so no prompt is shown.
    confirm_fn:
        Called with a question before writing; returning ``False`` aborts.
        ``None`` commits without asking.
    seed_defaults:
        Seed the default taxonomy (and payment modes, for expenses) for users
        who have none before matching.
    print_fn:
        Receives issues, review lines, and the preview.

    Raises
    ------
    CommitError
        When a store write fails; see :func:`ledger_import.commit.commit_import`.
    """

    kind = RecordKind(kind)
    text = read_csv_text(csv_path)

    with session_scope(database_url=database_url) as db:
        if seed_defaults:
            seed_default_categories(db, kind=kind, user_id=user_id)
            if kind is RecordKind.EXPENSE:
                seed_default_payment_modes(db, user_id=user_id)
            db.commit()

        category_store = SqlCategoryStore(db, kind=kind, user_id=user_id)
        session = ImportSession(kind, category_store.list())
        parsed = session.load(text)
        for message in parsed.errors:
            print_fn(message)
        if session.step is ImportStep.UPLOAD:
            print_fn("No valid rows to import.")
            return ImportOutcome(parse=parsed, commit=None)

        if session.step is ImportStep.REVIEW:
            if selector is None and accept_defaults:
                selector = keep_defaults
            review_resolutions(session, selector=selector, print_fn=print_fn)

        render_preview(session, print_fn=print_fn)
        if confirm_fn is not None and not confirm_fn(f"Import {len(session.rows)} row(s)?"):
            session.cancel()
            print_fn("Import cancelled.")
            return ImportOutcome(parse=parsed, commit=None)

        row_store = SqlRowStore(db, kind=kind, user_id=user_id)
        lookup = SqlPaymentModeLookup(db, user_id=user_id) if kind is RecordKind.EXPENSE else None
        result = session.commit(
            lambda rows, resolutions: commit_import(
                rows,
                resolutions,
                kind,
                category_store=category_store,
                row_store=row_store,
                payment_mode_lookup=lookup,
            )
        )

    print_fn(
        f"Imported {result.inserted_count} row(s); "
        f"created {result.created_category_count} categor(ies)."
    )
    logger.info("Import of %s finished: %s", csv_path, result)
    return ImportOutcome(parse=parsed, commit=result)


__all__ = ["import_csv_file", "ImportOutcome"]
