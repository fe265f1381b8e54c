"""Fuzzy matching of CSV (category, sub-category) pairs against the taxonomy.

Scores are heuristic and symmetric:

- ``1.0`` for case-insensitive equality,
- ``0.8`` when one string contains the other,
- ``0.5 + 0.1 * k`` (capped at ``1.0``) when ``k`` distinct word tokens longer
  than two characters appear in both,
- ``0.0`` otherwise.

:func:`find_best_match` weighs the category score at 60% and the sub-category
score at 40%.
"""

from __future__ import annotations

import re
from collections.abc import Iterable

from .models import ExistingCategoryRow, MatchSuggestion

EXACT_SCORE = 1.0
CONTAINS_SCORE = 0.8
TOKEN_BASE_SCORE = 0.5
TOKEN_STEP_SCORE = 0.1
MIN_TOKEN_LENGTH = 3

CATEGORY_WEIGHT = 0.6
SUB_CATEGORY_WEIGHT = 0.4
# Rows whose category scores below this are never candidates.
CATEGORY_FLOOR = 0.5
# A parent-level row matched against a CSV pair with no sub-category.
PARENT_ONLY_SUB_SCORE = 0.3
# Minimum weighted total for a suggestion.
ACCEPT_THRESHOLD = 0.5

_TOKEN_SPLIT_RE = re.compile(r"\W+")


def _norm(value: str) -> str:
    return value.strip().lower()


def _tokens(value: str) -> set[str]:
    return {t for t in _TOKEN_SPLIT_RE.split(value) if len(t) >= MIN_TOKEN_LENGTH}


def score(a: str, b: str) -> float:
    """Similarity of two labels in ``[0, 1]``.

    Two empty strings are equal; an empty string matches nothing else, even
    though it is technically a substring of every string.
    """

    na, nb = _norm(a), _norm(b)
    if na == nb:
        return EXACT_SCORE
    if not na or not nb:
        return 0.0
    if na in nb or nb in na:
        return CONTAINS_SCORE
    shared = len(_tokens(na) & _tokens(nb))
    if shared:
        return min(EXACT_SCORE, TOKEN_BASE_SCORE + TOKEN_STEP_SCORE * shared)
    return 0.0


def _sub_score(csv_sub: str | None, row_sub: str | None) -> float:
    if csv_sub is not None:
        return score(csv_sub, row_sub) if row_sub is not None else 0.0
    return EXACT_SCORE if row_sub is None else PARENT_ONLY_SUB_SCORE


def find_best_match(
    csv_category: str,
    csv_sub_category: str | None,
    existing: Iterable[ExistingCategoryRow],
) -> MatchSuggestion | None:
    """Return the closest taxonomy row for a CSV pair, or ``None``.

    Rows are scanned in order and a later row only wins with a strictly
    greater total, so ties resolve to the earliest row. The returned
    ``score`` is the weighted total.
    """

    best: MatchSuggestion | None = None
    for row in existing:
        cat_score = score(csv_category, row.name)
        if cat_score < CATEGORY_FLOOR:
            continue
        total = (
            CATEGORY_WEIGHT * cat_score
            + SUB_CATEGORY_WEIGHT * _sub_score(csv_sub_category, row.sub_category_name)
        )
        if best is None or total > best.score:
            best = MatchSuggestion(name=row.name, sub=row.sub_category_name, score=total)
    if best is not None and best.score >= ACCEPT_THRESHOLD:
        return best
    return None


def is_exact_match(
    csv_category: str,
    csv_sub_category: str | None,
    existing: Iterable[ExistingCategoryRow],
) -> bool:
    """True when some row equals the pair case-insensitively.

    ``None`` sub-categories only equal ``None``: ``("Food", None)`` does not
    match a ``("Food", "Snacks")`` row and vice versa.
    """

    cat = _norm(csv_category)
    sub = _norm(csv_sub_category) if csv_sub_category is not None else None
    for row in existing:
        if _norm(row.name) != cat:
            continue
        row_sub = _norm(row.sub_category_name) if row.sub_category_name is not None else None
        if row_sub == sub:
            return True
    return False


__all__ = ["score", "find_best_match", "is_exact_match"]
