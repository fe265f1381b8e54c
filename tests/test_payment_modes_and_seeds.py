from __future__ import annotations

import json
from pathlib import Path

import pytest
from db.client import session_scope
from ledger_import.categories import category_model, list_categories
from ledger_import.ingest.seed_taxonomy import default_taxonomy, main, seed_default_categories
from ledger_import.models import PaymentMode, RecordKind
from ledger_import.payment_modes import (
    DEFAULT_PAYMENT_MODES,
    list_payment_modes,
    normalize_payment_mode,
    seed_default_payment_modes,
)

from tests.helpers.db import fetch_categories

MODES = [
    PaymentMode("credit_card", "Credit Card"),
    PaymentMode("cash", "Cash"),
    PaymentMode("paynow", "PayNow"),
]


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("cash", "cash"),
        ("PayNow", "paynow"),
        ("  paynow ", "paynow"),
        ("credit card", "credit_card"),
        ("CC", "credit_card"),
        ("card", "credit_card"),
        ("Venmo", "Venmo"),
    ],
)
def test_normalize_payment_mode(raw: str, expected: str):
    assert normalize_payment_mode(raw, MODES) == expected


def test_card_shorthand_works_without_known_modes():
    assert normalize_payment_mode("cc", []) == "credit_card"
    assert normalize_payment_mode("cash", []) == "cash"


def test_seed_default_payment_modes_once(db_url: str):
    with session_scope(database_url=db_url) as session:
        assert seed_default_payment_modes(session, user_id="u1") == len(DEFAULT_PAYMENT_MODES)
    with session_scope(database_url=db_url) as session:
        assert seed_default_payment_modes(session, user_id="u1") == 0
        modes = list_payment_modes(session, user_id="u1")
        assert list_payment_modes(session, user_id="someone-else") == []

    # The system mode sorts first.
    assert modes[0] == PaymentMode("credit_card", "Credit Card")
    assert {m.value for m in modes} == {v for v, _, _ in DEFAULT_PAYMENT_MODES}


# ---------------------------------------------------------------------------
# Default taxonomies
# ---------------------------------------------------------------------------


@pytest.mark.parametrize("kind", list(RecordKind))
def test_bundled_taxonomies_are_well_formed(kind: RecordKind):
    pairs = default_taxonomy(kind)
    assert pairs
    assert len(set(pairs)) == len(pairs)
    for name, sub in pairs:
        assert name.strip() == name and name
        assert sub is None or (sub.strip() == sub and sub)


def test_default_taxonomy_flattens_children(tmp_path: Path):
    seed = tmp_path / "seed.json"
    seed.write_text(
        json.dumps([{"name": "Food", "children": ["Groceries", "Dining"]}, {"name": "Misc"}]),
        encoding="utf-8",
    )
    assert default_taxonomy("expense", file=seed) == [
        ("Food", "Groceries"),
        ("Food", "Dining"),
        ("Misc", None),
    ]


def test_seed_file_must_be_a_list(tmp_path: Path):
    seed = tmp_path / "seed.json"
    seed.write_text('{"name": "Food"}', encoding="utf-8")
    with pytest.raises(ValueError):
        default_taxonomy("expense", file=seed)


def test_seed_default_categories_only_for_empty_taxonomy(db_url: str):
    with session_scope(database_url=db_url) as session:
        inserted = seed_default_categories(session, kind="income", user_id="u1")
    assert inserted == len(default_taxonomy("income"))

    with session_scope(database_url=db_url) as session:
        assert seed_default_categories(session, kind="income", user_id="u1") == 0
        rows = list_categories(session, model=category_model("income"), user_id="u1")
    assert len(rows) == inserted


def test_seed_script_main(db_url: str, capsys: pytest.CaptureFixture[str]):
    rc = main(["--database-url", db_url, "--user-id", "u2", "--kind", "expense"])
    assert rc == 0
    assert "Inserted" in capsys.readouterr().out
    assert len(fetch_categories(database_url=db_url, kind="expense", user_id="u2")) == len(
        default_taxonomy("expense")
    )
