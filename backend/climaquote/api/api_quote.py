from typing import List, Optional
import logging

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from .. import models, schemas
from ..core.config import acceptance_link
from ..crud import crud_quote
from ..services.context import QuoteContext
from ..services.quote_pdf import render_quote_pdf
from ..utils import error_response
from .dependencies import get_db, get_quote_context

router = APIRouter(tags=["quotes"])
logger = logging.getLogger(__name__)


@router.post("/quotes", response_model=schemas.QuoteRead, status_code=status.HTTP_201_CREATED)
def create_quote(
    quote_in: schemas.QuoteCreate,
    db: Session = Depends(get_db),
    ctx: QuoteContext = Depends(get_quote_context),
):
    """Create a draft from explicit line items or from a catalog selection."""
    if quote_in.locale:
        ctx = QuoteContext.build(ctx.tenant_id, quote_in.locale)
    if quote_in.selection is not None:
        return crud_quote.create_draft_from_selection(
            db,
            ctx,
            quote_in.selection,
            customer_info=quote_in.client,
            customer_id=quote_in.customer_id,
            financing_months=quote_in.financing_months,
        )
    return crud_quote.create_draft(
        db,
        ctx,
        quote_in.line_items or [],
        customer_info=quote_in.client,
        customer_id=quote_in.customer_id,
        financing_months=quote_in.financing_months,
    )


@router.get("/quotes", response_model=List[schemas.QuoteRead])
def list_quotes(
    status_filter: Optional[models.QuoteStatus] = Query(default=None, alias="status"),
    skip: int = Query(default=0, ge=0),
    limit: int = Query(default=100, ge=1, le=500),
    db: Session = Depends(get_db),
    ctx: QuoteContext = Depends(get_quote_context),
):
    return crud_quote.list_quotes(db, ctx.tenant_id, status_filter, skip=skip, limit=limit)


@router.get("/quotes/unreconciled", response_model=List[schemas.ReconciliationReport])
def list_unreconciled_quotes(
    db: Session = Depends(get_db),
    ctx: QuoteContext = Depends(get_quote_context),
):
    """Quotes whose stored total disagrees with their line items."""
    return [
        schemas.ReconciliationReport(
            quote_id=quote.id,
            quote_no=quote.quote_no,
            status=quote.status,
            problems=problems,
        )
        for quote, problems in crud_quote.find_unreconciled_quotes(db, ctx.tenant_id)
    ]


@router.get("/quotes/{quote_id}", response_model=schemas.QuoteRead)
def read_quote(
    quote_id: int,
    db: Session = Depends(get_db),
    ctx: QuoteContext = Depends(get_quote_context),
):
    return crud_quote.get_quote(db, quote_id, ctx.tenant_id)


@router.patch("/quotes/{quote_id}", response_model=schemas.QuoteRead)
def update_quote_header(
    quote_id: int,
    header_in: schemas.QuoteHeaderUpdate,
    db: Session = Depends(get_db),
    ctx: QuoteContext = Depends(get_quote_context),
):
    return crud_quote.update_header(db, quote_id, header_in, ctx.tenant_id)


@router.put("/quotes/{quote_id}/items", response_model=schemas.QuoteRead)
def replace_quote_items(
    quote_id: int,
    items_in: schemas.LineItemsReplace,
    db: Session = Depends(get_db),
    ctx: QuoteContext = Depends(get_quote_context),
):
    return crud_quote.replace_line_items(db, quote_id, items_in.items, ctx.tenant_id)


@router.put("/quotes/{quote_id}/financing", response_model=schemas.QuoteRead)
def update_quote_financing(
    quote_id: int,
    financing_in: schemas.FinancingUpdate,
    db: Session = Depends(get_db),
    ctx: QuoteContext = Depends(get_quote_context),
):
    return crud_quote.update_financing(db, quote_id, financing_in.term_months, ctx.tenant_id)


@router.post("/quotes/{quote_id}/reprice", response_model=schemas.QuoteRead)
def reprice_quote(
    quote_id: int,
    selection: schemas.RepriceRequest,
    db: Session = Depends(get_db),
    ctx: QuoteContext = Depends(get_quote_context),
):
    return crud_quote.reprice_draft(db, quote_id, selection, ctx)


@router.post("/quotes/{quote_id}/send", response_model=schemas.QuoteRead)
def send_quote(
    quote_id: int,
    db: Session = Depends(get_db),
    ctx: QuoteContext = Depends(get_quote_context),
):
    return crud_quote.send_quote(db, quote_id, ctx.tenant_id)


@router.post("/quotes/{quote_id}/expire", response_model=schemas.QuoteRead)
def expire_quote(
    quote_id: int,
    db: Session = Depends(get_db),
    ctx: QuoteContext = Depends(get_quote_context),
):
    return crud_quote.expire_quote(db, quote_id, ctx.tenant_id)


@router.post("/quotes/{quote_id}/repair", response_model=schemas.QuoteRead)
def repair_quote(
    quote_id: int,
    db: Session = Depends(get_db),
    ctx: QuoteContext = Depends(get_quote_context),
):
    return crud_quote.repair_totals(db, quote_id, ctx.tenant_id)


@router.get("/quotes/{quote_id}/acceptance-link", response_model=schemas.AcceptanceLink)
def get_acceptance_link(
    quote_id: int,
    db: Session = Depends(get_db),
    ctx: QuoteContext = Depends(get_quote_context),
):
    quote = crud_quote.get_quote(db, quote_id, ctx.tenant_id)
    if quote.status == models.QuoteStatus.DRAFT and not quote.items:
        raise error_response(
            "Add at least one line item before sharing the quote",
            {"items": "required"},
        )
    return schemas.AcceptanceLink(quote_id=quote.id, quote_no=quote.quote_no, url=acceptance_link(quote.id))


@router.get("/quotes/{quote_id}/pdf")
def get_quote_pdf(
    quote_id: int,
    db: Session = Depends(get_db),
    ctx: QuoteContext = Depends(get_quote_context),
):
    quote = crud_quote.get_quote(db, quote_id, ctx.tenant_id)
    pdf_bytes = render_quote_pdf(quote, ctx.locale)
    return Response(
        content=pdf_bytes,
        media_type="application/pdf",
        headers={"Content-Disposition": f'inline; filename="{quote.quote_no}.pdf"'},
    )
