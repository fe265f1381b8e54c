"""Import session: the upload → review → preview flow and its decisions.

An :class:`ImportSession` owns the parsed rows, the review items, and the
user's resolutions for one file. It enforces which edits are legal in which
step and guards the commit against double submission.

Transitions
-----------
- ``UPLOAD`` → ``REVIEW`` when the file has unresolved pairs, else
  ``PREVIEW``; a file with no valid rows stays in ``UPLOAD``.
- ``REVIEW`` → ``PREVIEW`` on :meth:`ImportSession.confirm_review`.
- ``PREVIEW`` → ``REVIEW`` (or ``UPLOAD`` when nothing needed review) on
  :meth:`ImportSession.back`; rows and decisions are kept.
- Any step → ``UPLOAD`` on :meth:`ImportSession.cancel` or a successful commit.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from enum import StrEnum

from .errors import ImportStateError, ResolutionError
from .ingest.parser import parse
from .logging_setup import get_logger
from .models import (
    CategoryResolution,
    CommitResult,
    ExistingCategoryRow,
    PairKey,
    ParsedRow,
    ParseResult,
    RecordKind,
    ResolutionAction,
    ReviewItem,
)
from .remap import apply_resolutions
from .resolver import build_review_items, init_resolutions

logger = get_logger("ledger_import.session")


class ImportStep(StrEnum):
    UPLOAD = "upload"
    REVIEW = "review"
    PREVIEW = "preview"


type Committer = Callable[[Sequence[ParsedRow], dict[PairKey, CategoryResolution]], CommitResult]


class ImportSession:
    """State for importing one CSV file of a given kind.

    Parameters
    ----------
    kind:
        Record kind of the file.
    existing:
        The user's taxonomy at the time the file is loaded. Matching and
        mapping targets are computed against this snapshot only.
    """

    def __init__(self, kind: RecordKind | str, existing: Sequence[ExistingCategoryRow]) -> None:
        self.kind = RecordKind(kind)
        self._existing: tuple[ExistingCategoryRow, ...] = tuple(existing)
        self._committing = False
        self._reset()

    def _reset(self) -> None:
        self.step = ImportStep.UPLOAD
        self.parse_result: ParseResult | None = None
        self.rows: list[ParsedRow] = []
        self.review_items: list[ReviewItem] = []
        self.resolutions: dict[PairKey, CategoryResolution] = {}

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def load(self, text: str) -> ParseResult:
        """Parse a file and advance past ``UPLOAD`` when it has valid rows.

        Loading replaces any previous file, rows, and decisions.
        """

        self._require(ImportStep.UPLOAD, "load a file")
        result = parse(text, self.kind)
        self._reset()
        self.parse_result = result
        if not result.rows:
            return result

        self.rows = list(result.rows)
        self.review_items = build_review_items(self.rows, self._existing)
        self.resolutions = init_resolutions(self.review_items)
        self.step = ImportStep.REVIEW if self.review_items else ImportStep.PREVIEW
        logger.debug(
            "Loaded %d %s row(s); %d pair(s) need review",
            len(self.rows),
            self.kind,
            len(self.review_items),
        )
        return result

    def update_taxonomy(self, existing: Sequence[ExistingCategoryRow]) -> None:
        """Replace the taxonomy snapshot used by the next :meth:`load`."""

        self._require(ImportStep.UPLOAD, "change the taxonomy")
        self._existing = tuple(existing)

    # ------------------------------------------------------------------
    # Review edits
    # ------------------------------------------------------------------

    def review_item(self, key: PairKey) -> ReviewItem:
        for item in self.review_items:
            if item.key == key:
                return item
        raise ResolutionError(f"No review item for category {key[0]!r} / {key[1]!r}")

    def _is_known_target(self, name: str, sub: str | None) -> bool:
        return any(r.name == name and r.sub_category_name == sub for r in self._existing)

    def set_action(self, key: PairKey, action: ResolutionAction) -> CategoryResolution:
        """Switch a pair between ``map`` and ``create``.

        Switching to ``create`` clears the target. Switching to ``map`` seeds
        the target from the suggestion, else from the first row of the
        taxonomy snapshot; with an empty taxonomy there is nothing to map to
        and :class:`ResolutionError` is raised. Map targets are always
        existing rows, so remapped pairs exact-match and are never remapped
        again.
        """

        self._require(ImportStep.REVIEW, "edit resolutions")
        item = self.review_item(key)
        if action == "create":
            res = CategoryResolution(
                csv_category=item.csv_category,
                csv_sub_category=item.csv_sub_category,
                action="create",
            )
        elif action == "map":
            if item.suggestion is not None:
                target, target_sub = item.suggestion.name, item.suggestion.sub
            elif self._existing:
                first = self._existing[0]
                target, target_sub = first.name, first.sub_category_name
            else:
                raise ResolutionError("There are no existing categories to map to")
            res = CategoryResolution(
                csv_category=item.csv_category,
                csv_sub_category=item.csv_sub_category,
                action="map",
                mapped_to=target,
                mapped_sub_to=target_sub,
            )
        else:
            raise ResolutionError(f"Unknown action: {action!r}")
        self.resolutions[key] = res
        return res

    def toggle_action(self, key: PairKey) -> CategoryResolution:
        current = self.resolutions[key].action
        return self.set_action(key, "create" if current == "map" else "map")

    def set_mapping(self, key: PairKey, name: str, sub: str | None = None) -> CategoryResolution:
        """Map a pair to an existing ``(name, sub)`` row of the snapshot.

        ``sub=None`` is only accepted when the snapshot has a parent-level row
        for ``name``.
        """

        self._require(ImportStep.REVIEW, "edit resolutions")
        item = self.review_item(key)
        if not self._is_known_target(name, sub):
            label = name if sub is None else f"{name} / {sub}"
            raise ResolutionError(f"Unknown category: {label}")
        res = CategoryResolution(
            csv_category=item.csv_category,
            csv_sub_category=item.csv_sub_category,
            action="map",
            mapped_to=name,
            mapped_sub_to=sub,
        )
        self.resolutions[key] = res
        return res

    # ------------------------------------------------------------------
    # Navigation
    # ------------------------------------------------------------------

    def confirm_review(self) -> None:
        self._require(ImportStep.REVIEW, "confirm the review")
        self.step = ImportStep.PREVIEW

    def back(self) -> None:
        self._require(ImportStep.PREVIEW, "go back")
        self.step = ImportStep.REVIEW if self.review_items else ImportStep.UPLOAD

    def cancel(self) -> None:
        if self._committing:
            raise ImportStateError("Cannot cancel while a commit is in progress")
        self._reset()

    # ------------------------------------------------------------------
    # Preview and commit
    # ------------------------------------------------------------------

    def remapped_rows(self) -> list[ParsedRow]:
        return apply_resolutions(self.rows, self.resolutions)

    @property
    def committing(self) -> bool:
        return self._committing

    def commit(self, committer: Committer) -> CommitResult:
        """Run ``committer(rows, resolutions)`` once from ``PREVIEW``.

        A second call while the first is still running raises
        :class:`ImportStateError`. On success the session resets to
        ``UPLOAD``; on failure it stays in ``PREVIEW`` so the user can retry.
        """

        self._require(ImportStep.PREVIEW, "commit")
        if self._committing:
            raise ImportStateError("A commit is already in progress")
        if not self.rows:
            raise ImportStateError("Nothing to import")
        self._committing = True
        try:
            result = committer(list(self.rows), dict(self.resolutions))
        finally:
            self._committing = False
        self._reset()
        return result

    def _require(self, step: ImportStep, action: str) -> None:
        if self._committing:
            raise ImportStateError(f"Cannot {action} while a commit is in progress")
        if self.step is not step:
            raise ImportStateError(f"Cannot {action} in the {self.step} step")


__all__ = ["ImportSession", "ImportStep", "Committer"]
