"""Rewrite parsed rows according to the user's category decisions."""

from __future__ import annotations

import dataclasses
from collections.abc import Iterable, Mapping

from .models import CategoryResolution, PairKey, ParsedRow, pair_key


def apply_resolutions(
    rows: Iterable[ParsedRow], resolutions: Mapping[PairKey, CategoryResolution]
) -> list[ParsedRow]:
    """Return new rows with ``map`` decisions applied.

    Rows whose pair has no decision, or a ``create`` decision, are returned
    unchanged (the same objects). The input is never mutated.

    Applying the result a second time is a no-op when every ``map`` target is
    an existing taxonomy row: those exact-match and so never appear as keys.
    """

    out: list[ParsedRow] = []
    for row in rows:
        res = resolutions.get(pair_key(row))
        if res is None or res.action != "map":
            out.append(row)
            continue
        out.append(
            dataclasses.replace(row, category=res.mapped_to, sub_category=res.mapped_sub_to)
        )
    return out


__all__ = ["apply_resolutions"]
