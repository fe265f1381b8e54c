"""File helpers shared by CLI commands and workflows."""

from __future__ import annotations

from os import PathLike
from pathlib import Path

from ..models import ParseResult, RecordKind
from .parser import parse


def read_csv_text(csv_path: str | PathLike[str]) -> str:
    """Read a CSV file as text.

    A UTF-8 byte-order mark (as written by spreadsheet exports) is dropped so
    it does not end up glued to the first header name. ``newline=""`` keeps
    ``\\r\\n`` intact for the parser's own line splitting.
    """

    with Path(csv_path).open(encoding="utf-8-sig", newline="") as f:
        return f.read()


def load_csv_file(csv_path: str | PathLike[str], kind: RecordKind | str) -> ParseResult:
    """Read and parse ``csv_path``.

    File-system errors (``FileNotFoundError``, ``PermissionError``,
    ``UnicodeDecodeError``) propagate; content problems are reported in the
    returned :class:`ParseResult`.
    """

    return parse(read_csv_text(csv_path), kind)


__all__ = ["read_csv_text", "load_csv_file"]
