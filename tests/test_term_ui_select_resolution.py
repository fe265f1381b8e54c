import contextlib

from ledger_import.term_ui import (
    CREATE_SENTINEL,
    CreateCategoryRequest,
    confirm,
    select_resolution,
)
from prompt_toolkit import PromptSession
from prompt_toolkit.input import create_pipe_input
from prompt_toolkit.output import DummyOutput

OPTIONS = [
    "Food & Dining",
    "Food & Dining / Groceries",
    "Food & Dining / Restaurants",
    "Transport / Public Transport",
]


@contextlib.contextmanager
def pipe_session():
    with create_pipe_input() as pipe:
        sess = PromptSession(input=pipe, output=DummyOutput())
        yield pipe, sess


def test_enter_accepts_prefilled_default():
    default = "Food & Dining / Groceries"
    with pipe_session() as (pipe, sess):
        pipe.send_text("\r")
        result = select_resolution(OPTIONS, default=default, session=sess)
        assert result == default


def test_typed_prefix_resolves_to_first_matching_option():
    with pipe_session() as (pipe, sess):
        # Ctrl-A (home), Ctrl-K (kill to end), type a prefix, Enter
        pipe.send_text("\x01\x0bTransport\r")
        result = select_resolution(OPTIONS, default="Food & Dining", session=sess)
        assert result == "Transport / Public Transport"


def test_exact_option_wins_over_longer_prefix_matches():
    with pipe_session() as (pipe, sess):
        pipe.send_text("\x01\x0bfood & dining\r")
        result = select_resolution(OPTIONS, default=OPTIONS[2], session=sess)
        assert result == "Food & Dining"


def test_create_option_returns_request_with_csv_label():
    with pipe_session() as (pipe, sess):
        pipe.send_text("\x01\x0b+ Create\r")
        result = select_resolution(OPTIONS, default=OPTIONS[0], csv_label="Pets / Vet", session=sess)
        assert isinstance(result, CreateCategoryRequest)
        assert result.label == "Pets / Vet"


def test_create_default_accepted_with_enter():
    with pipe_session() as (pipe, sess):
        pipe.send_text("\r")
        result = select_resolution(OPTIONS, default=CREATE_SENTINEL, csv_label="Gifts", session=sess)
        assert isinstance(result, CreateCategoryRequest)


def test_unknown_text_is_rejected_until_corrected():
    with pipe_session() as (pipe, sess):
        # The first Enter fails validation; clearing and typing a valid option succeeds.
        pipe.send_text("\x01\x0bZebra\r\x01\x0bFood & Dining / Rest\r")
        result = select_resolution(OPTIONS, default=OPTIONS[0], session=sess, allow_create=False)
        assert result == "Food & Dining / Restaurants"


def test_confirm_yes_no_and_default():
    with pipe_session() as (pipe, sess):
        pipe.send_text("y\r")
        assert confirm("Import 3 row(s)?", session=sess) is True
    with pipe_session() as (pipe, sess):
        pipe.send_text("no\r")
        assert confirm("Import 3 row(s)?", default=True, session=sess) is False
    with pipe_session() as (pipe, sess):
        pipe.send_text("\r")
        assert confirm("Import 3 row(s)?", session=sess) is False
