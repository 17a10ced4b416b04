from typing import List, Optional

from fastapi import status
from sqlalchemy.orm import Session

from .. import models, schemas
from ..utils import error_response


def _entry_columns(entry: schemas.CatalogEntry) -> dict:
    # JSON mode keeps Decimal prices as strings so no precision is lost
    return entry.model_dump(mode="json")


def create_product(db: Session, tenant_id: str, entry: schemas.CatalogEntry) -> models.CatalogProduct:
    db_product = models.CatalogProduct(tenant_id=tenant_id, **_entry_columns(entry))
    db.add(db_product)
    db.commit()
    db.refresh(db_product)
    return db_product


def get_product(db: Session, tenant_id: str, product_id: int) -> Optional[models.CatalogProduct]:
    return (
        db.query(models.CatalogProduct)
        .filter(
            models.CatalogProduct.id == product_id,
            models.CatalogProduct.tenant_id == tenant_id,
        )
        .first()
    )


def get_product_or_404(db: Session, tenant_id: str, product_id: int) -> models.CatalogProduct:
    product = get_product(db, tenant_id, product_id)
    if product is None:
        raise error_response(
            "Product not found",
            {"product_id": "not_found"},
            status.HTTP_404_NOT_FOUND,
        )
    return product


def list_products(
    db: Session,
    tenant_id: str,
    status_filter: Optional[models.ProductStatus] = None,
    skip: int = 0,
    limit: int = 100,
) -> List[models.CatalogProduct]:
    query = db.query(models.CatalogProduct).filter(models.CatalogProduct.tenant_id == tenant_id)
    if status_filter is not None:
        query = query.filter(models.CatalogProduct.status == status_filter)
    return query.order_by(models.CatalogProduct.brand, models.CatalogProduct.model).offset(skip).limit(limit).all()


def to_catalog_entry(product: models.CatalogProduct) -> schemas.CatalogEntry:
    """Validate a stored product once into its typed form."""
    return schemas.CatalogEntry.model_validate(product)
