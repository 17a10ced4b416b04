from typing import List, Optional
import logging
import uuid

from fastapi import APIRouter, Depends, File, Query, UploadFile, status
from sqlalchemy.orm import Session

from .. import models, schemas
from ..core.config import settings
from ..crud import crud_catalog
from ..services.catalog_extraction import ALLOWED_MIME_TYPES, extract_catalog_entry
from ..services.context import QuoteContext
from ..services.financing import financing_options
from ..services.pricing import price_selection
from ..utils import error_response
from .dependencies import get_db, get_quote_context

router = APIRouter(tags=["catalog"])
logger = logging.getLogger(__name__)


@router.post(
    "/catalog/products",
    response_model=schemas.CatalogProductRead,
    status_code=status.HTTP_201_CREATED,
)
def create_product(
    product_in: schemas.CatalogProductCreate,
    db: Session = Depends(get_db),
    ctx: QuoteContext = Depends(get_quote_context),
):
    return crud_catalog.create_product(db, ctx.tenant_id, product_in)


@router.get("/catalog/products", response_model=List[schemas.CatalogProductRead])
def list_products(
    status_filter: Optional[models.ProductStatus] = Query(default=None, alias="status"),
    skip: int = Query(default=0, ge=0),
    limit: int = Query(default=100, ge=1, le=500),
    db: Session = Depends(get_db),
    ctx: QuoteContext = Depends(get_quote_context),
):
    return crud_catalog.list_products(db, ctx.tenant_id, status_filter, skip=skip, limit=limit)


@router.get("/catalog/products/{product_id}", response_model=schemas.CatalogProductRead)
def read_product(
    product_id: int,
    db: Session = Depends(get_db),
    ctx: QuoteContext = Depends(get_quote_context),
):
    return crud_catalog.get_product_or_404(db, ctx.tenant_id, product_id)


@router.post("/catalog/products/{product_id}/price", response_model=schemas.PricingPreview)
def price_product(
    product_id: int,
    selection: schemas.Selection,
    db: Session = Depends(get_db),
    ctx: QuoteContext = Depends(get_quote_context),
):
    """Price a selection without creating a quote; includes every financing term."""
    product = crud_catalog.get_product_or_404(db, ctx.tenant_id, product_id)
    priced = price_selection(crud_catalog.to_catalog_entry(product), selection, ctx)
    return schemas.PricingPreview(
        items=priced.items,
        subtotal=priced.subtotal,
        financing_options=financing_options(priced.subtotal),
    )


@router.post("/catalog/extract", response_model=schemas.ExtractionResponse)
async def extract_product(
    file: UploadFile = File(...),
    ctx: QuoteContext = Depends(get_quote_context),
):
    """Read a technical sheet with Gemini and return an unsaved catalog draft."""
    if file.content_type not in ALLOWED_MIME_TYPES:
        raise error_response(
            f"Unsupported file type. Allowed: {sorted(ALLOWED_MIME_TYPES)}",
            {"file": "unsupported_type"},
            status.HTTP_415_UNSUPPORTED_MEDIA_TYPE,
        )
    content = await file.read()
    if len(content) > settings.AI_MAX_UPLOAD_BYTES:
        raise error_response(
            "File is too large for extraction",
            {"file": "too_large"},
            status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
        )
    if not content:
        raise error_response("No file provided", {"file": "required"})

    request_id = uuid.uuid4().hex
    logger.info("Extraction %s for tenant %s: %s (%d bytes)", request_id, ctx.tenant_id, file.content_type, len(content))
    entry = await extract_catalog_entry(content, file.content_type)
    return schemas.ExtractionResponse(request_id=request_id, product=entry)
