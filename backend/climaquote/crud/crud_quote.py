from datetime import date, datetime, timedelta
from typing import List, Optional, Tuple

from sqlalchemy.orm import Session
import logging

from .. import models, schemas
from ..core.config import settings
from ..services.context import QuoteContext
from ..services.financing import monthly_fee
from ..services.money import sum_money, to_decimal
from ..services.pricing import price_selection
from ..services.quote_lifecycle import apply_transition, coerce_status, ensure_editable
from ..services.quote_number import unique_quote_number
from ..services.reconciliation import items_total, reconciliation_problems
from ..utils.errors import IncompleteSelection, QuoteNotFound, ReconciliationMismatch
from . import crud_catalog, crud_customer

logger = logging.getLogger(__name__)

_OPEN_STATUSES = (models.QuoteStatus.DRAFT, models.QuoteStatus.SENT, models.QuoteStatus.VIEWED)

_CLIENT_FIELDS = {
    "name": "client_name",
    "email": "client_email",
    "phone": "client_phone",
    "address": "client_address",
    "population": "client_population",
    "tax_id": "client_tax_id",
    "is_technician": "is_technician",
    "work_order_number": "work_order_number",
}


def _quote_no_taken(db: Session, tenant_id: str, quote_no: str) -> bool:
    return (
        db.query(models.Quote.id)
        .filter(models.Quote.tenant_id == tenant_id, models.Quote.quote_no == quote_no)
        .first()
        is not None
    )


def _set_items(quote: models.Quote, line_items: List[schemas.LineItem]) -> None:
    """Replace the quote's items and recompute the header from them."""
    quote.items.clear()
    for position, item in enumerate(line_items):
        quote.items.append(
            models.QuoteItem(
                position=position,
                description=item.description,
                quantity=item.quantity,
                unit_price=item.unit_price,
                total=item.line_total,
            )
        )
    quote.total_amount = sum_money(i.line_total for i in line_items)
    _refresh_financing(quote)


def _refresh_financing(quote: models.Quote) -> None:
    if quote.financing_months is None:
        quote.financing_fee = None
        return
    quote.financing_fee = monthly_fee(to_decimal(quote.total_amount), quote.financing_months)


def _copy_customer(quote: models.Quote, customer: models.Customer) -> None:
    quote.customer_id = customer.id
    quote.client_name = customer.name
    quote.client_email = customer.email
    quote.client_phone = customer.phone
    quote.client_address = customer.address
    quote.client_population = customer.population
    quote.client_tax_id = customer.tax_id


def _apply_client_info(quote: models.Quote, values: dict) -> None:
    for field, attr in _CLIENT_FIELDS.items():
        if field not in values:
            continue
        value = values[field]
        if attr == "is_technician":
            value = bool(value)
        setattr(quote, attr, value)
    if not quote.is_technician:
        quote.work_order_number = None


def _commit_and_verify(db: Session, quote: models.Quote) -> models.Quote:
    """Commit, then re-read the stored quote and check it reconciles."""
    db.commit()
    # items included, so the check sees what the database holds
    db.expire_all()
    db.refresh(quote)
    problems = reconciliation_problems(quote)
    if problems:
        logger.error("Quote %s stored out of balance: %s", quote.quote_no, "; ".join(problems))
        raise ReconciliationMismatch(
            quote.id,
            expected=items_total(quote),
            actual=to_decimal(quote.total_amount),
            problems=problems,
        )
    return quote


def create_draft(
    db: Session,
    ctx: QuoteContext,
    line_items: List[schemas.LineItem],
    customer_info: Optional[schemas.ClientInfo] = None,
    customer_id: Optional[int] = None,
    financing_months: Optional[int] = None,
    product_id: Optional[int] = None,
    selection: Optional[schemas.Selection] = None,
    today: Optional[date] = None,
) -> models.Quote:
    today = today or date.today()
    quote_no = unique_quote_number(lambda no: _quote_no_taken(db, ctx.tenant_id, no))
    db_quote = models.Quote(
        tenant_id=ctx.tenant_id,
        quote_no=quote_no,
        locale=ctx.locale,
        status=models.QuoteStatus.DRAFT,
        valid_until=today + timedelta(days=settings.QUOTE_VALIDITY_DAYS),
        financing_months=financing_months,
        product_id=product_id,
        selection=selection.model_dump(mode="json") if selection is not None else None,
        is_technician=False,
    )
    if customer_id is not None:
        _copy_customer(db_quote, crud_customer.get_customer_or_404(db, ctx.tenant_id, customer_id))
    if customer_info is not None:
        _apply_client_info(db_quote, customer_info.model_dump(exclude_unset=True))
    _set_items(db_quote, list(line_items))
    db.add(db_quote)
    _commit_and_verify(db, db_quote)
    logger.info("Created draft quote %s for tenant %s (total %s)", db_quote.quote_no, ctx.tenant_id, db_quote.total_amount)
    return db_quote


def create_draft_from_selection(
    db: Session,
    ctx: QuoteContext,
    selection: schemas.ProductSelection,
    customer_info: Optional[schemas.ClientInfo] = None,
    customer_id: Optional[int] = None,
    financing_months: Optional[int] = None,
    require_active: bool = False,
) -> models.Quote:
    product = crud_catalog.get_product_or_404(db, ctx.tenant_id, selection.product_id)
    if require_active and product.status != models.ProductStatus.ACTIVE:
        raise IncompleteSelection("Product is not available for quoting", field="product_id")
    entry = crud_catalog.to_catalog_entry(product)
    plain = schemas.Selection(
        variant_index=selection.variant_index,
        kit_index=selection.kit_index,
        extras=selection.extras,
    )
    priced = price_selection(entry, plain, ctx)
    return create_draft(
        db,
        ctx,
        list(priced.items),
        customer_info=customer_info,
        customer_id=customer_id,
        financing_months=financing_months,
        product_id=product.id,
        selection=plain,
    )


def get_quote(db: Session, quote_id: int, tenant_id: Optional[str] = None) -> models.Quote:
    """Return the quote or raise ``QuoteNotFound``; ``tenant_id`` scopes staff lookups."""
    query = db.query(models.Quote).filter(models.Quote.id == quote_id)
    if tenant_id is not None:
        query = query.filter(models.Quote.tenant_id == tenant_id)
    quote = query.first()
    if quote is None:
        raise QuoteNotFound(quote_id)
    return quote


def list_quotes(
    db: Session,
    tenant_id: str,
    status: Optional[models.QuoteStatus] = None,
    skip: int = 0,
    limit: int = 100,
) -> List[models.Quote]:
    query = db.query(models.Quote).filter(models.Quote.tenant_id == tenant_id)
    if status is not None:
        query = query.filter(models.Quote.status == status)
    return query.order_by(models.Quote.created_at.desc(), models.Quote.id.desc()).offset(skip).limit(limit).all()


def replace_line_items(
    db: Session, quote_id: int, line_items: List[schemas.LineItem], tenant_id: Optional[str] = None
) -> models.Quote:
    quote = get_quote(db, quote_id, tenant_id)
    ensure_editable(quote)
    _set_items(quote, list(line_items))
    # hand-edited items no longer come from a catalog selection
    quote.selection = None
    return _commit_and_verify(db, quote)


def update_financing(
    db: Session, quote_id: int, term_months: Optional[int], tenant_id: Optional[str] = None
) -> models.Quote:
    """Set or clear the financing term; ``None`` means paying in full."""
    quote = get_quote(db, quote_id, tenant_id)
    ensure_editable(quote)
    quote.financing_months = term_months
    _refresh_financing(quote)
    return _commit_and_verify(db, quote)


def update_header(
    db: Session, quote_id: int, header_in: schemas.QuoteHeaderUpdate, tenant_id: Optional[str] = None
) -> models.Quote:
    quote = get_quote(db, quote_id, tenant_id)
    ensure_editable(quote)
    values = header_in.model_dump(exclude_unset=True)
    customer_id = values.pop("customer_id", None)
    if customer_id is not None:
        _copy_customer(quote, crud_customer.get_customer_or_404(db, quote.tenant_id, customer_id))
    valid_until = values.pop("valid_until", None)
    if valid_until is not None:
        quote.valid_until = valid_until
    _apply_client_info(quote, values)
    return _commit_and_verify(db, quote)


def reprice_draft(
    db: Session, quote_id: int, selection: schemas.Selection, ctx: QuoteContext
) -> models.Quote:
    """Re-run the pricing calculator on a draft's product and replace its items."""
    quote = get_quote(db, quote_id, ctx.tenant_id)
    ensure_editable(quote)
    if quote.product_id is None:
        raise IncompleteSelection("Quote was not built from a catalog product", field="product_id")
    product = crud_catalog.get_product_or_404(db, ctx.tenant_id, quote.product_id)
    priced = price_selection(crud_catalog.to_catalog_entry(product), selection, ctx)
    _set_items(quote, list(priced.items))
    quote.selection = selection.model_dump(mode="json")
    return _commit_and_verify(db, quote)


def _transition(db: Session, quote: models.Quote, new: models.QuoteStatus) -> models.Quote:
    apply_transition(quote, new)
    db.commit()
    db.refresh(quote)
    return quote


def send_quote(db: Session, quote_id: int, tenant_id: Optional[str] = None) -> models.Quote:
    return _transition(db, get_quote(db, quote_id, tenant_id), models.QuoteStatus.SENT)


def record_view(db: Session, quote: models.Quote) -> models.Quote:
    """Mark a sent quote as viewed; any other status is left as it is."""
    if coerce_status(quote.status) != models.QuoteStatus.SENT:
        return quote
    problems = reconciliation_problems(quote)
    if problems:
        logger.warning("Not marking quote %s viewed; out of balance: %s", quote.quote_no, "; ".join(problems))
        return quote
    return _transition(db, quote, models.QuoteStatus.VIEWED)


def reject_quote(db: Session, quote_id: int) -> models.Quote:
    return _transition(db, get_quote(db, quote_id), models.QuoteStatus.REJECTED)


def expire_quote(db: Session, quote_id: int, tenant_id: Optional[str] = None) -> models.Quote:
    return _transition(db, get_quote(db, quote_id, tenant_id), models.QuoteStatus.EXPIRED)


def expire_overdue_quotes(db: Session, tenant_id: str, today: Optional[date] = None) -> List[models.Quote]:
    """Expire open quotes whose ``valid_until`` is before ``today``.

    Nothing schedules this; it is run on demand. Quotes that fail
    reconciliation are skipped and left for ``repair_totals``.
    """
    today = today or date.today()
    overdue = (
        db.query(models.Quote)
        .filter(
            models.Quote.tenant_id == tenant_id,
            models.Quote.status.in_(_OPEN_STATUSES),
            models.Quote.valid_until < today,
        )
        .all()
    )
    expired: List[models.Quote] = []
    now = datetime.utcnow()
    for quote in overdue:
        problems = reconciliation_problems(quote)
        if problems:
            logger.warning("Skipping expiry of %s: %s", quote.quote_no, "; ".join(problems))
            continue
        apply_transition(quote, models.QuoteStatus.EXPIRED, now=now)
        expired.append(quote)
    db.commit()
    return expired


def find_unreconciled_quotes(db: Session, tenant_id: str) -> List[Tuple[models.Quote, List[str]]]:
    out: List[Tuple[models.Quote, List[str]]] = []
    for quote in db.query(models.Quote).filter(models.Quote.tenant_id == tenant_id).order_by(models.Quote.id):
        problems = reconciliation_problems(quote)
        if problems:
            out.append((quote, problems))
    return out


def repair_totals(db: Session, quote_id: int, tenant_id: Optional[str] = None) -> models.Quote:
    """Recompute item totals, header total and monthly fee from the stored items."""
    quote = get_quote(db, quote_id, tenant_id)
    before = to_decimal(quote.total_amount)
    for item in quote.items:
        item.total = to_decimal(item.unit_price) * int(item.quantity or 0)
    quote.total_amount = sum_money(to_decimal(item.total) for item in quote.items)
    _refresh_financing(quote)
    _commit_and_verify(db, quote)
    if to_decimal(quote.total_amount) != before:
        logger.warning("Repaired quote %s total %s -> %s", quote.quote_no, before, quote.total_amount)
    return quote
