"""Interactive review of unresolved category pairs.

:func:`review_resolutions` walks the session's review items, asks a selector
for each one, records the decision on the session, and confirms the review.
The selector and output function are injectable so the loop is testable
without a terminal.
"""

from __future__ import annotations

import builtins
from collections.abc import Callable, Sequence

from .errors import ResolutionError
from .logging_setup import get_logger
from .models import CategoryResolution, ExistingCategoryRow, PairKey, ParsedExpense, ReviewItem
from .resolver import count_actions
from .session import ImportSession, ImportStep
from .term_ui import CREATE_SENTINEL, CreateCategoryRequest, select_resolution

logger = get_logger("ledger_import.review")

# (options, default) -> chosen option or a create request
type Selector = Callable[[Sequence[str], str], str | CreateCategoryRequest]


# ----------------------------------------------------------------------------
# Small helpers
# ----------------------------------------------------------------------------


def _pair_label(category: str, sub: str | None) -> str:
    return category if sub is None else f"{category} / {sub}"


def _options(existing: Sequence[ExistingCategoryRow]) -> dict[str, ExistingCategoryRow]:
    """Label → row for every taxonomy row; first row wins for duplicate labels."""

    by_label: dict[str, ExistingCategoryRow] = {}
    for row in existing:
        by_label.setdefault(row.label, row)
    return by_label


def _default_choice(res: CategoryResolution) -> str:
    if res.action == "map" and res.mapped_to is not None:
        return _pair_label(res.mapped_to, res.mapped_sub_to)
    return CREATE_SENTINEL


def _describe(item: ReviewItem, index: int, total: int) -> str:
    head = f"[{index}/{total}] {_pair_label(item.csv_category, item.csv_sub_category)!r}"
    rows = f"{item.row_count} row(s)"
    if item.suggestion is None:
        return f"{head} ({rows}) - no close match"
    target = _pair_label(item.suggestion.name, item.suggestion.sub)
    return f"{head} ({rows}) - closest: {target} (score {item.suggestion.score:.2f})"


def keep_defaults(options: Sequence[str], default: str) -> str | CreateCategoryRequest:
    """Selector that accepts every pre-filled decision without prompting."""

    if default == CREATE_SENTINEL:
        return CreateCategoryRequest("")
    return default


def _interactive_selector(options: Sequence[str], default: str) -> str | CreateCategoryRequest:
    return select_resolution(options, default=default)


# ----------------------------------------------------------------------------
# Public API
# ----------------------------------------------------------------------------


def review_resolutions(
    session: ImportSession,
    *,
    selector: Selector | None = None,
    print_fn: Callable[[str], None] = builtins.print,
) -> dict[PairKey, CategoryResolution]:
    """Collect a decision for every review item and move to ``PREVIEW``.

    Parameters
    ----------
    session:
        A session in the ``REVIEW`` step.
    selector:
        ``(options, default) -> choice``. Defaults to the prompt_toolkit
        selector; pass :func:`keep_defaults` for non-interactive runs.
    print_fn:
        Receives one line per item plus a summary line.

    Returns
    -------
    dict
        The session's resolutions after review.
    """

    choose = selector or _interactive_selector
    options = _options(session.review_items[0].existing_categories if session.review_items else ())
    labels = list(options)

    total = len(session.review_items)
    for index, item in enumerate(session.review_items, start=1):
        print_fn(_describe(item, index, total))
        choice = choose(labels, _default_choice(session.resolutions[item.key]))
        if isinstance(choice, CreateCategoryRequest):
            session.set_action(item.key, "create")
            continue
        row = options.get(choice)
        if row is None:
            raise ResolutionError(f"Unknown category: {choice}")
        session.set_mapping(item.key, row.name, row.sub_category_name)

    mapped, created = count_actions(session.resolutions)
    print_fn(f"Review complete: {mapped} mapped, {created} to create.")
    logger.debug("Review complete: %d mapped, %d to create", mapped, created)
    session.confirm_review()
    return session.resolutions


def render_preview(
    session: ImportSession,
    *,
    print_fn: Callable[[str], None] = builtins.print,
    limit: int = 20,
) -> None:
    """Print the first ``limit`` remapped rows and the pending category creations."""

    if session.step is not ImportStep.PREVIEW:
        raise ValueError("render_preview() requires a session in the preview step")
    rows = session.remapped_rows()
    print_fn(f"{len(rows)} {session.kind} row(s) ready to import:")
    for row in rows[:limit]:
        category = _pair_label(row.category, row.sub_category)
        extra = f"  [{row.payment_mode}]" if isinstance(row, ParsedExpense) else ""
        print_fn(f"  {row.date}  {row.amount:>12}  {category}{extra}  {row.description or ''}")
    if len(rows) > limit:
        print_fn(f"  ... and {len(rows) - limit} more")
    creates = [r for r in session.resolutions.values() if r.action == "create"]
    for res in creates:
        print_fn(f"  new category: {_pair_label(res.csv_category, res.csv_sub_category)}")


__all__ = ["review_resolutions", "render_preview", "keep_defaults", "Selector"]
