from typing import List, Optional

from fastapi import status
from sqlalchemy.orm import Session

from .. import models, schemas
from ..utils import error_response


def create_customer(db: Session, tenant_id: str, customer_in: schemas.CustomerCreate) -> models.Customer:
    db_customer = models.Customer(tenant_id=tenant_id, **customer_in.model_dump())
    db.add(db_customer)
    db.commit()
    db.refresh(db_customer)
    return db_customer


def get_customer(db: Session, tenant_id: str, customer_id: int) -> Optional[models.Customer]:
    return (
        db.query(models.Customer)
        .filter(models.Customer.id == customer_id, models.Customer.tenant_id == tenant_id)
        .first()
    )


def get_customer_or_404(db: Session, tenant_id: str, customer_id: int) -> models.Customer:
    customer = get_customer(db, tenant_id, customer_id)
    if customer is None:
        raise error_response(
            "Customer not found",
            {"customer_id": "not_found"},
            status.HTTP_404_NOT_FOUND,
        )
    return customer


def list_customers(db: Session, tenant_id: str, skip: int = 0, limit: int = 100) -> List[models.Customer]:
    return (
        db.query(models.Customer)
        .filter(models.Customer.tenant_id == tenant_id)
        .order_by(models.Customer.name)
        .offset(skip)
        .limit(limit)
        .all()
    )
