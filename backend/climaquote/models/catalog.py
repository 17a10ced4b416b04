import enum

from sqlalchemy import Column, Integer, String, JSON

from .base import BaseModel
from .types import CaseInsensitiveEnum


class ProductType(str, enum.Enum):
    AIR_CONDITIONER = "air_conditioner"
    BOILER = "boiler"
    ELECTRIC_WATER_HEATER = "electric_water_heater"


class ProductStatus(str, enum.Enum):
    DRAFT = "draft"
    ACTIVE = "active"
    INACTIVE = "inactive"


class CatalogProduct(BaseModel):
    __tablename__ = "catalog_products"

    id = Column(Integer, primary_key=True, index=True)
    tenant_id = Column(String(64), nullable=False, index=True)
    brand = Column(String(50), nullable=False)
    model = Column(String(50), nullable=False)
    product_type = Column(
        CaseInsensitiveEnum(ProductType, name="producttype"),
        nullable=False,
        default=ProductType.AIR_CONDITIONER,
    )
    status = Column(
        CaseInsensitiveEnum(ProductStatus, name="productstatus"),
        nullable=False,
        default=ProductStatus.DRAFT,
    )
    stock = Column(Integer, nullable=False, default=0)

    # Structured payloads; always written from a validated CatalogEntry
    # (see crud_catalog) so readers can trust their shape.
    description = Column(JSON, nullable=False, default=dict)  # {es, ca}
    variants = Column(JSON, nullable=False, default=list)  # [{label: {es, ca}, unit_price}]
    installation_kits = Column(JSON, nullable=False, default=list)  # [{label, fixed_price}]
    extras = Column(JSON, nullable=False, default=list)  # [{label, unit_price, default_qty}]
    tech_specs = Column(JSON, nullable=False, default=list)  # [{title, value}]
    financing = Column(JSON, nullable=False, default=list)  # [{months, coefficient}]
