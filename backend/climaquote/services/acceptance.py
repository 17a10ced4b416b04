"""Customer-side acceptance of a quote.

The customer either saves the form for later (no validation, quote becomes
``sent``) or confirms it, which validates every field, stores the snapshot on
the quote and moves it to ``accepted``. The Customer record is never touched.
"""

from __future__ import annotations

import logging
import re
from datetime import datetime
from typing import List, Optional

from sqlalchemy.orm import Session

from ..models.quote import Quote, QuoteStatus
from ..schemas.quote import AcceptanceSubmission
from ..utils.errors import (
    AcceptanceError,
    AcceptanceRejected,
    InvalidWorkOrderNumber,
    MissingRequiredField,
    QuoteLocked,
    SignatureMissing,
    TermsNotAccepted,
)
from .context import QuoteContext
from .quote_lifecycle import TERMINAL_STATUSES, apply_transition, coerce_status, ensure_transition

logger = logging.getLogger(__name__)

WORK_ORDER_RE = re.compile(r"[0-9]{8}")

REQUIRED_FIELDS = ("name", "email", "address")


def is_valid_work_order(value: Optional[str]) -> bool:
    return bool(value) and WORK_ORDER_RE.fullmatch(value.strip()) is not None


def validate_confirmation(submission: AcceptanceSubmission) -> List[AcceptanceError]:
    """Return every problem that blocks confirming ``submission``."""
    errors: List[AcceptanceError] = []
    for field in REQUIRED_FIELDS:
        if not (getattr(submission, field) or "").strip():
            errors.append(MissingRequiredField(field))
    if submission.is_technician and not is_valid_work_order(submission.work_order_number):
        errors.append(InvalidWorkOrderNumber(submission.work_order_number))
    if not (submission.signature or "").strip():
        errors.append(SignatureMissing())
    if not submission.terms_accepted:
        errors.append(TermsNotAccepted())
    return errors


def client_display_name(submission: AcceptanceSubmission) -> str:
    return f"{submission.name.strip()} {submission.surname.strip()}".strip()


def _write_snapshot(quote: Quote, submission: AcceptanceSubmission, *, partial: bool) -> None:
    values = {
        "client_name": client_display_name(submission),
        "client_email": submission.email.strip(),
        "client_phone": submission.phone.strip(),
        "client_address": submission.address.strip(),
        "client_population": submission.population.strip(),
        "client_tax_id": submission.tax_id.strip(),
    }
    for attr, value in values.items():
        # a saved-for-later form keeps what staff already filled in
        if partial and not value:
            continue
        setattr(quote, attr, value or None)

    quote.is_technician = bool(submission.is_technician)
    work_order = (submission.work_order_number or "").strip()
    if not submission.is_technician:
        quote.work_order_number = None
    elif work_order or not partial:
        # saved as typed; the format is only checked on confirm
        quote.work_order_number = work_order or None

    signature = (submission.signature or "").strip()
    if signature:
        quote.signature = signature


def submit_acceptance(
    db: Session,
    quote: Quote,
    submission: AcceptanceSubmission,
    ctx: QuoteContext,
    now: Optional[datetime] = None,
) -> Quote:
    """Apply a customer's save or confirm action to ``quote`` and commit."""
    now = now or datetime.utcnow()
    current = coerce_status(quote.status)

    if submission.action == "save":
        if current in TERMINAL_STATUSES:
            raise QuoteLocked(quote.id, current.value)
        if current == QuoteStatus.DRAFT:
            ensure_transition(quote, QuoteStatus.SENT)
        _write_snapshot(quote, submission, partial=True)
        if current == QuoteStatus.DRAFT:
            apply_transition(quote, QuoteStatus.SENT, now=now)
        quote.locale = ctx.locale
        db.commit()
        db.refresh(quote)
        logger.info("Quote %s saved for later by customer", quote.quote_no)
        return quote

    ensure_transition(quote, QuoteStatus.ACCEPTED)
    errors = validate_confirmation(submission)
    if errors:
        logger.info(
            "Quote %s acceptance incomplete: %s",
            quote.quote_no,
            ", ".join(sorted({e.field or "" for e in errors})),
        )
        raise AcceptanceRejected(errors)

    _write_snapshot(quote, submission, partial=False)
    quote.terms_accepted_at = now
    quote.locale = ctx.locale
    apply_transition(quote, QuoteStatus.ACCEPTED, now=now)
    db.commit()
    db.refresh(quote)
    return quote
