"""Unauthenticated routes behind the customer's acceptance link and the public configurator."""

from typing import Optional
import logging

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from .. import schemas
from ..crud import crud_quote
from ..services.acceptance import submit_acceptance
from ..services.context import QuoteContext
from ..services.quote_pdf import render_quote_pdf
from .dependencies import get_db, get_locale

router = APIRouter(prefix="/public", tags=["public"])
logger = logging.getLogger(__name__)


@router.post(
    "/tenants/{tenant_id}/quotes",
    response_model=schemas.QuoteRead,
    status_code=status.HTTP_201_CREATED,
)
def configure_quote(
    tenant_id: str,
    request_in: schemas.ConfiguratorRequest,
    db: Session = Depends(get_db),
    locale: Optional[str] = Depends(get_locale),
):
    """Build a draft from the public configurator; only active products are offered."""
    ctx = QuoteContext.build(tenant_id, request_in.locale or locale)
    return crud_quote.create_draft_from_selection(
        db,
        ctx,
        request_in,
        financing_months=request_in.financing_months,
        require_active=True,
    )


@router.get("/quotes/{quote_id}", response_model=schemas.QuoteRead)
def open_quote(quote_id: int, db: Session = Depends(get_db)):
    """Opening the acceptance page marks a sent quote as viewed."""
    quote = crud_quote.get_quote(db, quote_id)
    return crud_quote.record_view(db, quote)


@router.post("/quotes/{quote_id}/acceptance", response_model=schemas.QuoteRead)
def submit_quote_acceptance(
    quote_id: int,
    submission: schemas.AcceptanceSubmission,
    db: Session = Depends(get_db),
    locale: Optional[str] = Depends(get_locale),
):
    quote = crud_quote.get_quote(db, quote_id)
    ctx = QuoteContext.build(quote.tenant_id, locale or quote.locale)
    return submit_acceptance(db, quote, submission, ctx)


@router.post("/quotes/{quote_id}/reject", response_model=schemas.QuoteRead)
def reject_quote(quote_id: int, db: Session = Depends(get_db)):
    return crud_quote.reject_quote(db, quote_id)


@router.get("/quotes/{quote_id}/pdf")
def get_public_quote_pdf(
    quote_id: int,
    db: Session = Depends(get_db),
    locale: Optional[str] = Depends(get_locale),
):
    quote = crud_quote.get_quote(db, quote_id)
    return Response(
        content=render_quote_pdf(quote, locale),
        media_type="application/pdf",
        headers={"Content-Disposition": f'inline; filename="{quote.quote_no}.pdf"'},
    )
