"""Data models and type aliases for ``ledger_import``.

Parsed rows are immutable dataclasses; the remapper derives new rows with
``dataclasses.replace`` instead of mutating them. User decisions about
category pairs are pydantic models so invalid combinations (``map`` without a
target) are rejected at construction time.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from enum import StrEnum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, model_validator

# ---------------------------------------------------------------------------
# Record kinds and parsed rows
# ---------------------------------------------------------------------------


class RecordKind(StrEnum):
    """Which CSV schema (and which category/row store) a file targets."""

    EXPENSE = "expense"
    INCOME = "income"


@dataclass(frozen=True, slots=True)
class ParsedExpense:
    """One validated expense row.

    ``personal_amount`` is the user's own share of ``amount`` and may differ
    from it (split bills). ``description`` is always a string, possibly empty.
    """

    date: str
    amount: Decimal
    personal_amount: Decimal
    category: str
    sub_category: str | None
    payment_mode: str
    description: str
    notes: str | None


@dataclass(frozen=True, slots=True)
class ParsedIncome:
    """One validated income row. Unlike expenses, ``description`` is optional."""

    date: str
    amount: Decimal
    category: str
    sub_category: str | None
    description: str | None
    notes: str | None


type ParsedRow = ParsedExpense | ParsedIncome

# (csv category, csv sub-category) exactly as they appear in the parsed rows.
type PairKey = tuple[str, str | None]


def pair_key(row: ParsedRow) -> PairKey:
    return (row.category, row.sub_category)


# ---------------------------------------------------------------------------
# Parse results
# ---------------------------------------------------------------------------

type IssueKind = Literal["file_structure", "row_validation", "field_truncation"]


@dataclass(frozen=True, slots=True)
class ParseIssue:
    """A single message produced while parsing.

    ``row`` is the 1-based line number counting the header as row 1, or
    ``None`` for whole-file problems.
    """

    row: int | None
    kind: IssueKind
    message: str


@dataclass(slots=True)
class ParseResult:
    rows: list[ParsedRow] = field(default_factory=list)
    issues: list[ParseIssue] = field(default_factory=list)

    @property
    def errors(self) -> list[str]:
        """All messages in the order they were produced (errors and warnings)."""
        return [i.message for i in self.issues]

    @property
    def warnings(self) -> list[str]:
        return [i.message for i in self.issues if i.kind == "field_truncation"]

    @property
    def fatal(self) -> bool:
        return any(i.kind == "file_structure" for i in self.issues)


# ---------------------------------------------------------------------------
# Taxonomy and matching
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class ExistingCategoryRow:
    """A row of the user's taxonomy; ``sub_category_name=None`` is a parent."""

    name: str
    sub_category_name: str | None = None

    @property
    def label(self) -> str:
        if self.sub_category_name is None:
            return self.name
        return f"{self.name} / {self.sub_category_name}"


@dataclass(frozen=True, slots=True)
class MatchSuggestion:
    name: str
    sub: str | None
    score: float


@dataclass(frozen=True, slots=True)
class ReviewItem:
    """A CSV pair that needs a user decision before commit."""

    csv_category: str
    csv_sub_category: str | None
    suggestion: MatchSuggestion | None
    existing_categories: tuple[ExistingCategoryRow, ...]
    row_count: int = 0

    @property
    def key(self) -> PairKey:
        return (self.csv_category, self.csv_sub_category)


type ResolutionAction = Literal["map", "create"]


class CategoryResolution(BaseModel):
    """The user's decision for one CSV pair.

    ``action="map"`` rewrites matching rows to ``(mapped_to, mapped_sub_to)``;
    ``action="create"`` keeps the CSV values and creates the category at
    commit time. Targets are always cleared for ``create``.
    """

    model_config = ConfigDict(frozen=True)

    csv_category: str
    csv_sub_category: str | None = None
    action: ResolutionAction
    mapped_to: str | None = None
    mapped_sub_to: str | None = None

    @model_validator(mode="before")
    @classmethod
    def _clear_targets_on_create(cls, data: Any) -> Any:
        if isinstance(data, dict) and data.get("action") == "create":
            return {**data, "mapped_to": None, "mapped_sub_to": None}
        return data

    @model_validator(mode="after")
    def _require_target_on_map(self) -> CategoryResolution:
        if self.action == "map" and not self.mapped_to:
            raise ValueError("mapped_to is required when action is 'map'")
        return self

    @property
    def key(self) -> PairKey:
        return (self.csv_category, self.csv_sub_category)


# ---------------------------------------------------------------------------
# Commit and lookups
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class CommitResult:
    inserted_count: int
    created_category_count: int
    created_parent_count: int = 0


@dataclass(frozen=True, slots=True)
class PaymentMode:
    value: str
    label: str


__all__ = [
    "RecordKind",
    "ParsedExpense",
    "ParsedIncome",
    "ParsedRow",
    "PairKey",
    "pair_key",
    "IssueKind",
    "ParseIssue",
    "ParseResult",
    "ExistingCategoryRow",
    "MatchSuggestion",
    "ReviewItem",
    "ResolutionAction",
    "CategoryResolution",
    "CommitResult",
    "PaymentMode",
]
