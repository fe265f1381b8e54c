"""CSV ingest: parsing, sample templates, and file loading."""

from .parser import parse, parse_expenses, parse_income
from .templates import template_csv
from .utils import load_csv_file

__all__ = ["parse", "parse_expenses", "parse_income", "template_csv", "load_csv_file"]
