"""CSV text → validated expense/income rows.

The format is deliberately simple: one record per line, cells split on bare
commas. Quoted fields (and therefore commas inside a description) are not
supported; such a line yields shifted cells and usually fails validation.

Header cells are matched case- and whitespace-insensitively (``Personal
Amount`` matches ``personal_amount``) and column order does not matter. Extra
columns are ignored.

Nothing here raises for bad input. Whole-file problems produce a single
``file_structure`` issue and no rows; bad rows are dropped with a
``row_validation`` issue; over-long text is truncated with a
``field_truncation`` issue and the row is kept.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Sequence
from datetime import date
from decimal import Decimal, InvalidOperation

from ..errors import FileStructureError, RowValidationError
from ..logging_setup import get_logger
from ..models import (
    ParsedExpense,
    ParsedIncome,
    ParsedRow,
    ParseIssue,
    ParseResult,
    RecordKind,
)
from ..sanitize import MAX_LENGTHS, cap, sanitize

logger = get_logger("ledger_import.ingest.parser")

EXPENSE_COLUMNS: tuple[str, ...] = (
    "date",
    "amount",
    "personal_amount",
    "category",
    "sub_category",
    "payment_mode",
    "description",
    "notes",
)
INCOME_COLUMNS: tuple[str, ...] = (
    "date",
    "amount",
    "category",
    "sub_category",
    "description",
    "notes",
)
REQUIRED_COLUMNS: dict[RecordKind, tuple[str, ...]] = {
    RecordKind.EXPENSE: EXPENSE_COLUMNS,
    RecordKind.INCOME: INCOME_COLUMNS,
}

DEFAULT_PAYMENT_MODE = "cash"

NO_DATA_MESSAGE = "File must have a header row and at least one data row."

_LINE_BREAK_RE = re.compile(r"\r?\n")
_WHITESPACE_RE = re.compile(r"\s+")
_ISO_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


# ---------------------------
# Header handling
# ---------------------------


def normalize_header(cell: str) -> str:
    """``"  Sub Category "`` → ``"sub_category"``."""
    return _WHITESPACE_RE.sub("_", cell.strip().lower())


def _non_blank_lines(text: str) -> list[str]:
    return [line for line in _LINE_BREAK_RE.split(text) if line.strip()]


def _split_header(text: str, kind: RecordKind) -> tuple[list[str], list[str]]:
    lines = _non_blank_lines(text)
    if len(lines) < 2:
        raise FileStructureError(NO_DATA_MESSAGE)
    header = [normalize_header(c) for c in lines[0].split(",")]
    present = set(header)
    missing = [c for c in REQUIRED_COLUMNS[kind] if c not in present]
    if missing:
        raise FileStructureError("Missing columns: " + ", ".join(missing))
    return header, lines[1:]


# ---------------------------
# Cell access
# ---------------------------


class _RowCells:
    """Column-name access to one data line, recording truncation warnings."""

    __slots__ = ("number", "_cells", "_issues")

    def __init__(
        self, number: int, columns: dict[str, int], line: str, issues: list[ParseIssue]
    ) -> None:
        raw = line.split(",")
        self.number = number
        self._cells = {name: (raw[i] if i < len(raw) else "") for name, i in columns.items()}
        self._issues = issues

    def raw(self, key: str) -> str:
        return sanitize(self._cells.get(key, ""))

    def text(self, key: str) -> str:
        value, truncated = cap(self.raw(key), key)
        if truncated:
            self._issues.append(
                ParseIssue(
                    self.number,
                    "field_truncation",
                    f"Row {self.number}: {key} exceeds {MAX_LENGTHS[key]} characters (truncated)",
                )
            )
        return value

    def optional_text(self, key: str) -> str | None:
        return self.text(key) or None


def _parse_amount(raw: str) -> Decimal | None:
    if not raw:
        return None
    try:
        value = Decimal(raw)
    except InvalidOperation:
        return None
    return value if value.is_finite() else None


def _is_calendar_date(value: str) -> bool:
    if not _ISO_DATE_RE.match(value):
        return False
    try:
        date.fromisoformat(value)
    except ValueError:
        return False
    return True


def _required_fields(cells: _RowCells) -> tuple[str, Decimal, str]:
    """Validate the fields shared by both schemas, in the documented order."""

    n = cells.number
    # Category is read first so a truncation warning is recorded even when
    # the row is rejected below.
    category = cells.text("category")
    date_value = cells.raw("date")
    amount = _parse_amount(cells.raw("amount"))
    if not date_value or amount is None or not category:
        raise RowValidationError(n, f"Row {n}: missing required field (date, amount, or category)")
    if not _is_calendar_date(date_value):
        raise RowValidationError(n, f'Row {n}: invalid date "{date_value}" — expected YYYY-MM-DD')
    return date_value, amount, category


def _check_amount(n: int, amount: Decimal) -> None:
    if amount < 0:
        raise RowValidationError(n, f"Row {n}: amount must be 0 or greater")


# ---------------------------
# Row builders
# ---------------------------


def _expense_row(cells: _RowCells) -> ParsedExpense:
    n = cells.number
    date_value, amount, category = _required_fields(cells)
    personal_amount = _parse_amount(cells.raw("personal_amount"))
    if personal_amount is None:
        raise RowValidationError(n, f"Row {n}: invalid personal_amount")
    _check_amount(n, amount)
    return ParsedExpense(
        date=date_value,
        amount=amount,
        personal_amount=personal_amount,
        category=category,
        sub_category=cells.optional_text("sub_category"),
        payment_mode=cells.text("payment_mode") or DEFAULT_PAYMENT_MODE,
        description=cells.text("description"),
        notes=cells.optional_text("notes"),
    )


def _income_row(cells: _RowCells) -> ParsedIncome:
    date_value, amount, category = _required_fields(cells)
    _check_amount(cells.number, amount)
    return ParsedIncome(
        date=date_value,
        amount=amount,
        category=category,
        sub_category=cells.optional_text("sub_category"),
        description=cells.optional_text("description"),
        notes=cells.optional_text("notes"),
    )


_ROW_BUILDERS: dict[RecordKind, Callable[[_RowCells], ParsedRow]] = {
    RecordKind.EXPENSE: _expense_row,
    RecordKind.INCOME: _income_row,
}


# ---------------------------
# Public API
# ---------------------------


def parse(text: str, kind: RecordKind | str) -> ParseResult:
    """Parse CSV ``text`` for the given record kind.

    Parameters
    ----------
    text:
        Entire file contents. ``\\n`` and ``\\r\\n`` line endings are accepted;
        blank lines are skipped and do not count towards row numbers.
    kind:
        ``"expense"`` or ``"income"`` (or a :class:`RecordKind`).

    Returns
    -------
    ParseResult
        Valid rows in file order plus every issue in the order encountered.
        Row numbers in messages count the header as row 1.
    """

    kind = RecordKind(kind)
    result = ParseResult()
    try:
        header, data_lines = _split_header(text, kind)
    except FileStructureError as exc:
        result.issues.append(ParseIssue(None, "file_structure", str(exc)))
        logger.debug("parse(%s): rejected file: %s", kind, exc)
        return result

    # First occurrence wins when a header repeats.
    columns: dict[str, int] = {}
    for i, name in enumerate(header):
        columns.setdefault(name, i)

    build = _ROW_BUILDERS[kind]
    for index, line in enumerate(data_lines):
        cells = _RowCells(index + 2, columns, line, result.issues)
        try:
            result.rows.append(build(cells))
        except RowValidationError as exc:
            result.issues.append(ParseIssue(exc.row, "row_validation", str(exc)))

    logger.debug(
        "parse(%s): %d row(s) kept, %d issue(s) from %d data line(s)",
        kind,
        len(result.rows),
        len(result.issues),
        len(data_lines),
    )
    return result


def parse_expenses(text: str) -> ParseResult:
    return parse(text, RecordKind.EXPENSE)


def parse_income(text: str) -> ParseResult:
    return parse(text, RecordKind.INCOME)


def required_columns(kind: RecordKind | str) -> Sequence[str]:
    return REQUIRED_COLUMNS[RecordKind(kind)]


__all__ = [
    "parse",
    "parse_expenses",
    "parse_income",
    "normalize_header",
    "required_columns",
    "EXPENSE_COLUMNS",
    "INCOME_COLUMNS",
    "DEFAULT_PAYMENT_MODE",
    "NO_DATA_MESSAGE",
]
