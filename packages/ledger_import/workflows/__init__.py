"""High-level workflows composing ingest, review, and commit."""

from .import_flow import ImportOutcome, import_csv_file

__all__ = ["import_csv_file", "ImportOutcome"]
