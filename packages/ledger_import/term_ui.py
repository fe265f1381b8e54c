"""Tiny terminal UI helpers (prompt_toolkit-based).

These prompts are kept apart from the review logic so they can be driven in
tests with a pipe input and a dummy output.
"""

from __future__ import annotations

from collections.abc import Sequence

from prompt_toolkit import PromptSession
from prompt_toolkit.auto_suggest import AutoSuggest, Suggestion
from prompt_toolkit.completion import WordCompleter
from prompt_toolkit.styles import Style
from prompt_toolkit.validation import ValidationError, Validator

# ----------------------------------------------------------------------------
# Resolution selector
# ----------------------------------------------------------------------------

CREATE_SENTINEL = "+ Create new category..."


class CreateCategoryRequest:
    """Returned by the selector when the user chose to create the CSV pair."""

    __slots__ = ("label",)

    def __init__(self, label: str) -> None:
        self.label = label

    def __repr__(self) -> str:  # pragma: no cover - trivial repr
        return f"CreateCategoryRequest(label={self.label!r})"


def _best_prefix_match(text: str, words: Sequence[str]) -> str | None:
    """Exact (case-insensitive) match first, then the first prefix match."""

    lower = text.lower()
    for w in words:
        if w.lower() == lower:
            return w
    for w in words:
        if w.lower().startswith(lower):
            return w
    return None


class _PrefixSuggest(AutoSuggest):
    def __init__(self, words: Sequence[str]) -> None:
        self._words = list(words)

    def get_suggestion(self, buffer, document):
        text = document.text
        if not text:
            return None
        cand = _best_prefix_match(text, self._words)
        if cand is None or cand.lower() == text.lower():
            return None
        return Suggestion(cand[len(text) :])


class _OptionValidator(Validator):
    def __init__(self, words: Sequence[str]) -> None:
        self._words = list(words)

    def validate(self, document) -> None:
        text = document.text.strip()
        if text and _best_prefix_match(text, self._words) is None:
            raise ValidationError(
                message=f"Pick an existing category or '{CREATE_SENTINEL}'",
                cursor_position=len(document.text),
            )


def _bind_session(session: PromptSession | None) -> PromptSession:
    if session is None:
        return PromptSession()
    return PromptSession(
        input=getattr(session, "input", None),
        output=getattr(session, "output", None),
    )


def select_resolution(
    options: Sequence[str],
    *,
    default: str,
    csv_label: str = "",
    message: str = "Map to (Enter to accept, Tab to complete): ",
    session: PromptSession | None = None,
    allow_create: bool = True,
) -> str | CreateCategoryRequest:
    """Prompt for an existing category label, or the create option.

    Typed text resolves to the exact option (case-insensitive) or, failing
    that, the first option it is a prefix of; anything else is rejected by
    the validator. Enter on an empty buffer accepts ``default``.

    Returns the chosen option string, or a :class:`CreateCategoryRequest`
    carrying ``csv_label`` when the create option was chosen.
    """

    words = list(options)
    if allow_create:
        words.append(CREATE_SENTINEL)

    sess = _bind_session(session)
    raw = sess.prompt(
        message,
        default=default,
        completer=WordCompleter(words, ignore_case=True, match_middle=True, sentence=True),
        auto_suggest=_PrefixSuggest(words),
        validator=_OptionValidator(words),
        validate_while_typing=False,
        style=Style.from_dict({"auto-suggestion": "fg:#888888"}),
    )

    text = raw.strip() or default
    choice = _best_prefix_match(text, words) or default
    if allow_create and choice == CREATE_SENTINEL:
        return CreateCategoryRequest(csv_label)
    return choice


# ----------------------------------------------------------------------------
# Yes/no confirmation
# ----------------------------------------------------------------------------

_YES = {"y", "yes"}
_NO = {"n", "no"}


class _YesNoValidator(Validator):
    def validate(self, document) -> None:
        value = document.text.strip().lower()
        if value and value not in _YES | _NO:
            raise ValidationError(message="Answer y or n")


def confirm(
    message: str,
    *,
    default: bool = False,
    session: PromptSession | None = None,
) -> bool:
    """Ask a yes/no question; Enter alone returns ``default``."""

    suffix = " [Y/n] " if default else " [y/N] "
    sess = _bind_session(session)
    value = sess.prompt(message + suffix, validator=_YesNoValidator(), validate_while_typing=False)
    value = value.strip().lower()
    if not value:
        return default
    return value in _YES


__all__ = [
    "select_resolution",
    "confirm",
    "CreateCategoryRequest",
    "CREATE_SENTINEL",
]
