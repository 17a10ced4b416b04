from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional

from ..models.quote import Quote, QuoteStatus
from ..utils.errors import InvalidTransition, QuoteLocked
from .reconciliation import ensure_reconciled

logger = logging.getLogger(__name__)

_CLOSING = {QuoteStatus.ACCEPTED, QuoteStatus.REJECTED, QuoteStatus.EXPIRED}

_ALLOWED_TRANSITIONS: dict[QuoteStatus, set[QuoteStatus]] = {
    QuoteStatus.DRAFT: {QuoteStatus.SENT} | _CLOSING,
    QuoteStatus.SENT: {QuoteStatus.VIEWED} | _CLOSING,
    QuoteStatus.VIEWED: set(_CLOSING),
    QuoteStatus.ACCEPTED: set(),
    QuoteStatus.REJECTED: set(),
    QuoteStatus.EXPIRED: set(),
}

TERMINAL_STATUSES = frozenset(s for s, targets in _ALLOWED_TRANSITIONS.items() if not targets)

# an empty quote can still be rejected or expired
_NEEDS_ITEMS = {QuoteStatus.SENT, QuoteStatus.ACCEPTED}

_STAMP_FIELDS = {
    QuoteStatus.SENT: "sent_at",
    QuoteStatus.VIEWED: "viewed_at",
    QuoteStatus.ACCEPTED: "accepted_at",
    QuoteStatus.REJECTED: "rejected_at",
    QuoteStatus.EXPIRED: "expired_at",
}


def coerce_status(value: QuoteStatus | str) -> QuoteStatus:
    raw = getattr(value, "value", value)
    return QuoteStatus(str(raw or "").strip().lower())


def can_transition(old: QuoteStatus | str, new: QuoteStatus | str) -> bool:
    """Return True if the state graph has an edge old -> new."""
    try:
        old_s = coerce_status(old)
        new_s = coerce_status(new)
    except ValueError:
        return False
    return new_s in _ALLOWED_TRANSITIONS.get(old_s, set())


def ensure_transition(quote: Quote, new: QuoteStatus) -> None:
    """Raise unless ``quote`` may move to ``new`` right now.

    Besides the graph edge this checks that the stored totals reconcile and
    that a quote being sent or accepted has at least one line item.
    """
    old = coerce_status(quote.status)
    if not can_transition(old, new):
        raise InvalidTransition(old.value, new.value)
    ensure_reconciled(quote)
    if new in _NEEDS_ITEMS and not quote.items:
        raise InvalidTransition(old.value, new.value, reason="quote has no line items")


def apply_transition(quote: Quote, new: QuoteStatus, now: Optional[datetime] = None) -> Quote:
    """Move ``quote`` to ``new`` and stamp the matching timestamp. Caller commits."""
    ensure_transition(quote, new)
    old = coerce_status(quote.status)
    quote.status = new
    stamp = _STAMP_FIELDS.get(new)
    if stamp:
        setattr(quote, stamp, now or datetime.utcnow())
    logger.info("Quote %s (%s) %s -> %s", quote.id, quote.quote_no, old.value, new.value)
    return quote


def is_editable(quote: Quote) -> bool:
    return coerce_status(quote.status) == QuoteStatus.DRAFT


def ensure_editable(quote: Quote) -> None:
    if not is_editable(quote):
        raise QuoteLocked(quote.id, coerce_status(quote.status).value)
