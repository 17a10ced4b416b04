from typing import List

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from .. import schemas
from ..crud import crud_customer
from ..services.context import QuoteContext
from .dependencies import get_db, get_quote_context

router = APIRouter(tags=["customers"])


@router.post("/customers", response_model=schemas.CustomerRead, status_code=status.HTTP_201_CREATED)
def create_customer(
    customer_in: schemas.CustomerCreate,
    db: Session = Depends(get_db),
    ctx: QuoteContext = Depends(get_quote_context),
):
    return crud_customer.create_customer(db, ctx.tenant_id, customer_in)


@router.get("/customers", response_model=List[schemas.CustomerRead])
def list_customers(
    skip: int = Query(default=0, ge=0),
    limit: int = Query(default=100, ge=1, le=500),
    db: Session = Depends(get_db),
    ctx: QuoteContext = Depends(get_quote_context),
):
    return crud_customer.list_customers(db, ctx.tenant_id, skip=skip, limit=limit)


@router.get("/customers/{customer_id}", response_model=schemas.CustomerRead)
def read_customer(
    customer_id: int,
    db: Session = Depends(get_db),
    ctx: QuoteContext = Depends(get_quote_context),
):
    return crud_customer.get_customer_or_404(db, ctx.tenant_id, customer_id)
