"""Exception types raised across the import pipeline.

Parsing never raises to callers: :mod:`ledger_import.ingest.parser` catches
``FileStructureError`` and ``RowValidationError`` internally and turns them
into :class:`~ledger_import.models.ParseIssue` entries. The remaining types
surface from the session and the commit step.
"""

from __future__ import annotations

UNEXPECTED_ERROR_MESSAGE = "An unexpected error occurred"


class LedgerImportError(Exception):
    """Base class for every error raised by ``ledger_import``."""


class FileStructureError(LedgerImportError, ValueError):
    """The file has no data rows or is missing required columns."""


class RowValidationError(LedgerImportError, ValueError):
    """A single data row failed validation; the row is dropped."""

    def __init__(self, row: int, message: str) -> None:
        super().__init__(message)
        self.row = row


class ResolutionError(LedgerImportError, ValueError):
    """A category resolution edit is not acceptable for the current pair."""


class ImportStateError(LedgerImportError, RuntimeError):
    """The session was asked to do something its current step does not allow."""


class CommitError(LedgerImportError, RuntimeError):
    """Category creation or row insertion failed during commit.

    The message is the underlying store failure's message; the original
    exception is chained as ``__cause__``.
    """


def error_message(err: BaseException | str | object) -> str:
    """Return a user-facing message for any error value.

    Exceptions with an empty message fall back to the generic text so the
    caller always has something to display.
    """

    if isinstance(err, BaseException):
        msg = str(err).strip()
        return msg or UNEXPECTED_ERROR_MESSAGE
    if isinstance(err, str):
        return err
    return UNEXPECTED_ERROR_MESSAGE


__all__ = [
    "LedgerImportError",
    "FileStructureError",
    "RowValidationError",
    "ResolutionError",
    "ImportStateError",
    "CommitError",
    "error_message",
    "UNEXPECTED_ERROR_MESSAGE",
]
