"""Build the review list for pairs that don't exactly match the taxonomy."""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable, Mapping, Sequence

from .models import (
    CategoryResolution,
    ExistingCategoryRow,
    PairKey,
    ParsedRow,
    ReviewItem,
    pair_key,
)
from .similarity import find_best_match, is_exact_match


def unique_pairs(rows: Iterable[ParsedRow]) -> list[PairKey]:
    """Distinct (category, sub-category) pairs in first-seen order.

    Comparison is exact: ``("Food", None)`` and ``("food", None)`` are
    different pairs here even though both would exact-match a ``Food`` row.
    """

    return list(dict.fromkeys(pair_key(r) for r in rows))


def build_review_items(
    rows: Sequence[ParsedRow], existing: Sequence[ExistingCategoryRow]
) -> list[ReviewItem]:
    """Return one :class:`ReviewItem` per unresolved pair.

    Pairs that exact-match the taxonomy (case-insensitively) are imported as
    they are and never reviewed. The rest carry the best fuzzy suggestion,
    if any, and a snapshot of the taxonomy used to compute it.
    """

    snapshot = tuple(existing)
    counts = Counter(pair_key(r) for r in rows)
    items: list[ReviewItem] = []
    for cat, sub in unique_pairs(rows):
        if is_exact_match(cat, sub, snapshot):
            continue
        items.append(
            ReviewItem(
                csv_category=cat,
                csv_sub_category=sub,
                suggestion=find_best_match(cat, sub, snapshot),
                existing_categories=snapshot,
                row_count=counts[(cat, sub)],
            )
        )
    return items


def init_resolutions(items: Iterable[ReviewItem]) -> dict[PairKey, CategoryResolution]:
    """Default decisions: map to the suggestion when there is one, else create."""

    resolutions: dict[PairKey, CategoryResolution] = {}
    for item in items:
        if item.suggestion is not None:
            res = CategoryResolution(
                csv_category=item.csv_category,
                csv_sub_category=item.csv_sub_category,
                action="map",
                mapped_to=item.suggestion.name,
                mapped_sub_to=item.suggestion.sub,
            )
        else:
            res = CategoryResolution(
                csv_category=item.csv_category,
                csv_sub_category=item.csv_sub_category,
                action="create",
            )
        resolutions[item.key] = res
    return resolutions


def count_actions(resolutions: Mapping[PairKey, CategoryResolution]) -> tuple[int, int]:
    """``(mapped, created)`` counts for summary lines."""

    mapped = sum(1 for r in resolutions.values() if r.action == "map")
    return mapped, len(resolutions) - mapped


__all__ = ["unique_pairs", "build_review_items", "init_resolutions", "count_actions"]
