"""Public interface for the ``ledger_import`` package.

Re-exports the pipeline's entry points and models as the stable import
surface. There is no runtime logic here, only symbol re-exports.
"""

from .commit import commit_import
from .errors import (
    CommitError,
    FileStructureError,
    ImportStateError,
    LedgerImportError,
    ResolutionError,
    RowValidationError,
    error_message,
)
from .ingest.parser import parse
from .ingest.templates import template_csv
from .models import (
    CategoryResolution,
    CommitResult,
    ExistingCategoryRow,
    MatchSuggestion,
    PairKey,
    ParsedExpense,
    ParsedIncome,
    ParseIssue,
    ParseResult,
    PaymentMode,
    RecordKind,
    ReviewItem,
)
from .payment_modes import normalize_payment_mode
from .remap import apply_resolutions
from .resolver import build_review_items, init_resolutions
from .sanitize import sanitize
from .session import ImportSession, ImportStep
from .similarity import find_best_match, is_exact_match, score

__all__ = [
    # Pipeline
    "parse",
    "sanitize",
    "score",
    "find_best_match",
    "is_exact_match",
    "build_review_items",
    "init_resolutions",
    "apply_resolutions",
    "commit_import",
    "normalize_payment_mode",
    "template_csv",
    "ImportSession",
    "ImportStep",
    # Models / types
    "RecordKind",
    "ParsedExpense",
    "ParsedIncome",
    "ParseIssue",
    "ParseResult",
    "ExistingCategoryRow",
    "MatchSuggestion",
    "ReviewItem",
    "CategoryResolution",
    "CommitResult",
    "PaymentMode",
    "PairKey",
    # Errors
    "LedgerImportError",
    "FileStructureError",
    "RowValidationError",
    "ResolutionError",
    "ImportStateError",
    "CommitError",
    "error_message",
]
