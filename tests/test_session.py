from __future__ import annotations

from decimal import Decimal

import pytest
from ledger_import.errors import ImportStateError, ResolutionError
from ledger_import.models import CommitResult, ExistingCategoryRow as Row
from ledger_import.remap import apply_resolutions
from ledger_import.session import ImportSession, ImportStep

EXISTING = [
    Row("Salary & Employment", "Base"),
    Row("Salary & Employment", "Bonus"),
    Row("Investments", "Dividends"),
]

HEADER = "date,amount,category,sub_category,description,notes"

NEEDS_REVIEW = "\n".join(
    [
        HEADER,
        "2024-01-31,5000,Salary & Employment,Base,Pay,",
        "2024-02-15,300,Salary,Bonus,Q1 bonus,",
        "2024-03-01,40,Gifts,,Birthday,",
    ]
)

ALL_EXACT = "\n".join([HEADER, "2024-01-31,5000,salary & employment,base,,"])


def _session(existing=EXISTING) -> ImportSession:
    return ImportSession("income", existing)


def _ok(rows, resolutions) -> CommitResult:
    return CommitResult(inserted_count=len(rows), created_category_count=0)


# ---------------------------------------------------------------------------
# Loading
# ---------------------------------------------------------------------------


def test_load_with_unresolved_pairs_enters_review():
    s = _session()
    result = s.load(NEEDS_REVIEW)
    assert result.errors == []
    assert s.step is ImportStep.REVIEW
    assert [i.key for i in s.review_items] == [("Salary", "Bonus"), ("Gifts", None)]
    assert s.resolutions[("Salary", "Bonus")].action == "map"
    assert s.resolutions[("Gifts", None)].action == "create"


def test_load_with_only_exact_matches_goes_to_preview():
    s = _session()
    s.load(ALL_EXACT)
    assert s.step is ImportStep.PREVIEW
    assert s.review_items == []
    assert s.resolutions == {}


@pytest.mark.parametrize("text", ["", HEADER, "date,amount\n2024-01-01,1\n"])
def test_load_without_valid_rows_stays_in_upload(text: str):
    s = _session()
    result = s.load(text)
    assert result.errors
    assert s.step is ImportStep.UPLOAD
    assert s.rows == []


def test_load_keeps_row_errors_alongside_valid_rows():
    s = _session()
    result = s.load(ALL_EXACT + "\n2024-13-01,1,Gifts,,,\n")
    assert len(s.rows) == 1
    assert result.errors == ['Row 3: invalid date "2024-13-01" — expected YYYY-MM-DD']


def test_load_is_only_allowed_from_upload():
    s = _session()
    s.load(NEEDS_REVIEW)
    with pytest.raises(ImportStateError):
        s.load(ALL_EXACT)


def test_taxonomy_snapshot_is_used_for_the_next_load():
    s = _session(existing=[])
    s.update_taxonomy([Row("Gifts", None)])
    s.load("\n".join([HEADER, "2024-03-01,40,gifts,,,"]))
    assert s.step is ImportStep.PREVIEW


# ---------------------------------------------------------------------------
# Review edits
# ---------------------------------------------------------------------------


def test_toggle_between_map_and_create():
    s = _session()
    s.load(NEEDS_REVIEW)
    key = ("Salary", "Bonus")

    created = s.toggle_action(key)
    assert created.action == "create"
    assert created.mapped_to is None

    mapped = s.toggle_action(key)
    assert (mapped.action, mapped.mapped_to, mapped.mapped_sub_to) == (
        "map",
        "Salary & Employment",
        "Bonus",
    )


def test_switching_to_map_without_suggestion_uses_first_taxonomy_row():
    s = _session()
    s.load(NEEDS_REVIEW)
    res = s.set_action(("Gifts", None), "map")
    assert (res.mapped_to, res.mapped_sub_to) == ("Salary & Employment", "Base")


def test_switching_to_map_with_empty_taxonomy_fails():
    s = _session(existing=[])
    s.load(NEEDS_REVIEW)
    with pytest.raises(ResolutionError):
        s.set_action(("Gifts", None), "map")
    assert s.resolutions[("Gifts", None)].action == "create"


def test_set_mapping_accepts_snapshot_targets_only():
    s = _session()
    s.load(NEEDS_REVIEW)

    res = s.set_mapping(("Gifts", None), "Investments", "Dividends")
    assert (res.action, res.mapped_to, res.mapped_sub_to) == ("map", "Investments", "Dividends")
    with pytest.raises(ResolutionError, match="Unknown category: Investments$"):
        s.set_mapping(("Gifts", None), "Investments")
    with pytest.raises(ResolutionError, match="Unknown category"):
        s.set_mapping(("Gifts", None), "Investments", "Rent")
    with pytest.raises(ResolutionError):
        s.set_mapping(("Nope", None), "Investments")


def test_user_edits_on_children_only_taxonomy_remap_once():
    expense_header = (
        "date,amount,personal_amount,category,sub_category,payment_mode,description,notes"
    )
    s = ImportSession("expense", [Row("Food", "Snacks")])
    s.load(
        "\n".join([expense_header, "2024-01-15,1,1,Food,,cash,a,", "2024-01-15,1,1,Misc,,cash,b,"])
    )

    res = s.set_action(("Misc", None), "map")
    assert (res.mapped_to, res.mapped_sub_to) == ("Food", "Snacks")
    # No parent-level "Food" row exists, so it is not a valid target.
    with pytest.raises(ResolutionError):
        s.set_mapping(("Misc", None), "Food")

    once = apply_resolutions(s.rows, s.resolutions)
    assert [(r.category, r.sub_category) for r in once] == [("Food", "Snacks")] * 2
    assert apply_resolutions(once, s.resolutions) == once


def test_edits_are_rejected_outside_review():
    s = _session()
    s.load(NEEDS_REVIEW)
    s.confirm_review()
    with pytest.raises(ImportStateError):
        s.set_action(("Gifts", None), "create")


# ---------------------------------------------------------------------------
# Navigation
# ---------------------------------------------------------------------------


def test_back_from_preview_keeps_rows_and_decisions():
    s = _session()
    s.load(NEEDS_REVIEW)
    s.set_mapping(("Gifts", None), "Investments", "Dividends")
    s.confirm_review()
    assert s.step is ImportStep.PREVIEW

    s.back()
    assert s.step is ImportStep.REVIEW
    assert len(s.rows) == 3
    assert s.resolutions[("Gifts", None)].mapped_to == "Investments"


def test_back_without_review_items_returns_to_upload():
    s = _session()
    s.load(ALL_EXACT)
    s.back()
    assert s.step is ImportStep.UPLOAD


def test_cancel_clears_everything():
    s = _session()
    s.load(NEEDS_REVIEW)
    s.cancel()
    assert s.step is ImportStep.UPLOAD
    assert s.rows == []
    assert s.review_items == []
    assert s.resolutions == {}
    assert s.parse_result is None


def test_remapped_rows_reflect_current_decisions():
    s = _session()
    s.load(NEEDS_REVIEW)
    out = s.remapped_rows()
    assert [(r.category, r.sub_category) for r in out] == [
        ("Salary & Employment", "Base"),
        ("Salary & Employment", "Bonus"),
        ("Gifts", None),
    ]
    assert s.rows[1].category == "Salary"


# ---------------------------------------------------------------------------
# Commit
# ---------------------------------------------------------------------------


def test_commit_passes_unremapped_rows_and_resets():
    s = _session()
    s.load(NEEDS_REVIEW)
    s.confirm_review()

    seen = {}

    def committer(rows, resolutions):
        seen["rows"] = rows
        seen["resolutions"] = resolutions
        return CommitResult(inserted_count=len(rows), created_category_count=1)

    result = s.commit(committer)
    assert result.inserted_count == 3
    assert seen["rows"][1].category == "Salary"
    assert seen["rows"][0].amount == Decimal("5000")
    assert set(seen["resolutions"]) == {("Salary", "Bonus"), ("Gifts", None)}
    assert s.step is ImportStep.UPLOAD
    assert s.rows == []


def test_commit_requires_preview():
    s = _session()
    s.load(NEEDS_REVIEW)
    with pytest.raises(ImportStateError):
        s.commit(_ok)


def test_commit_failure_keeps_preview_for_retry():
    s = _session()
    s.load(ALL_EXACT)

    def boom(rows, resolutions):
        raise RuntimeError("db down")

    with pytest.raises(RuntimeError):
        s.commit(boom)
    assert s.step is ImportStep.PREVIEW
    assert not s.committing
    assert len(s.rows) == 1

    assert s.commit(_ok).inserted_count == 1


def test_second_commit_while_in_flight_is_rejected():
    s = _session()
    s.load(ALL_EXACT)
    calls = []

    def reentrant(rows, resolutions):
        calls.append(1)
        assert s.committing
        with pytest.raises(ImportStateError):
            s.commit(_ok)
        with pytest.raises(ImportStateError):
            s.cancel()
        with pytest.raises(ImportStateError):
            s.back()
        return _ok(rows, resolutions)

    s.commit(reentrant)
    assert calls == [1]
    assert not s.committing
