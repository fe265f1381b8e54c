"""Downloadable sample CSVs, one per record kind.

These are fixed strings, not generated from the user's data. Each parses
cleanly with :func:`ledger_import.ingest.parser.parse`.
"""

from __future__ import annotations

from ..models import RecordKind

EXPENSE_TEMPLATE = (
    "date,amount,personal_amount,category,sub_category,payment_mode,description,notes\n"
    "2024-01-15,50.00,25.00,Food & Dining,Restaurants,credit_card,Dinner with friends,Split bill\n"
    "2024-01-16,12.40,12.40,Transport,Public Transport,cash,Bus top-up,\n"
    "2024-01-18,86.90,86.90,Food & Dining,Groceries,paynow,Weekly groceries,\n"
)

INCOME_TEMPLATE = (
    "date,amount,category,sub_category,description,notes\n"
    "2024-01-31,5000.00,Salary & Employment,Base,January salary,\n"
    "2024-02-05,120.50,Investments,Dividends,Quarterly dividend,Broker A\n"
)

_TEMPLATES: dict[RecordKind, str] = {
    RecordKind.EXPENSE: EXPENSE_TEMPLATE,
    RecordKind.INCOME: INCOME_TEMPLATE,
}


def template_csv(kind: RecordKind | str) -> str:
    return _TEMPLATES[RecordKind(kind)]


def template_filename(kind: RecordKind | str) -> str:
    return f"{RecordKind(kind).value}_import_template.csv"


__all__ = ["template_csv", "template_filename", "EXPENSE_TEMPLATE", "INCOME_TEMPLATE"]
