"""Payment-mode normalization and per-user defaults."""

from __future__ import annotations

from collections.abc import Sequence

from db.models.finance import PaymentModeRow
from sqlalchemy import func, select
from sqlalchemy.orm import Session

from .logging_setup import get_logger
from .models import PaymentMode

logger = get_logger("ledger_import.payment_modes")

CREDIT_CARD = "credit_card"

# value, label, is_system
DEFAULT_PAYMENT_MODES: tuple[tuple[str, str, bool], ...] = (
    (CREDIT_CARD, "Credit Card", True),
    ("cash", "Cash", False),
    ("paynow", "PayNow", False),
    ("giro", "GIRO", False),
)

_CREDIT_CARD_ALIASES = frozenset({"card", "cc"})


def normalize_payment_mode(raw: str, modes: Sequence[PaymentMode]) -> str:
    """Map a CSV payment-mode cell onto a known mode value.

    Resolution order: exact ``value`` match, then case-insensitive ``label``
    match, then the ``card``/``cc`` shorthands for ``credit_card``. Anything
    else is stored as written.
    """

    for mode in modes:
        if mode.value == raw:
            return mode.value
    lowered = raw.strip().lower()
    for mode in modes:
        if mode.label.strip().lower() == lowered:
            return mode.value
    if lowered in _CREDIT_CARD_ALIASES:
        return CREDIT_CARD
    return raw


def list_payment_modes(session: Session, *, user_id: str) -> list[PaymentMode]:
    rows = (
        session.execute(
            select(PaymentModeRow)
            .where(PaymentModeRow.user_id == user_id)
            .order_by(PaymentModeRow.is_system.desc(), PaymentModeRow.id)
        )
        .scalars()
        .all()
    )
    return [PaymentMode(value=r.value, label=r.label) for r in rows]


def seed_default_payment_modes(session: Session, *, user_id: str) -> int:
    """Insert :data:`DEFAULT_PAYMENT_MODES` for a user that has none.

    Returns the number of rows inserted (``0`` when the user already has
    payment modes). The caller owns the transaction.
    """

    existing = session.execute(
        select(func.count()).select_from(PaymentModeRow).where(PaymentModeRow.user_id == user_id)
    ).scalar_one()
    if existing:
        return 0
    for value, label, is_system in DEFAULT_PAYMENT_MODES:
        session.add(PaymentModeRow(user_id=user_id, value=value, label=label, is_system=is_system))
    session.flush()
    logger.info("Seeded %d default payment modes for user %s", len(DEFAULT_PAYMENT_MODES), user_id)
    return len(DEFAULT_PAYMENT_MODES)


__all__ = [
    "DEFAULT_PAYMENT_MODES",
    "normalize_payment_mode",
    "list_payment_modes",
    "seed_default_payment_modes",
]
