from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Annotated, Dict, List, Optional

from pydantic import BaseModel, Field

from ..models.catalog import ProductStatus, ProductType

# largest quantity the item table stores
MAX_QUANTITY = 2**31 - 1


class LocalizedText(BaseModel):
    es: str = ""
    ca: str = ""

    def for_locale(self, locale: str) -> str:
        """Return the text for ``locale``, falling back to Spanish, then to any non-empty value."""
        value = getattr(self, locale, "") if locale in ("es", "ca") else ""
        return value or self.es or self.ca


class Variant(BaseModel):
    label: LocalizedText
    unit_price: Decimal = Field(ge=0)


class InstallationKit(BaseModel):
    label: str
    fixed_price: Decimal = Field(ge=0)


class Extra(BaseModel):
    label: str
    unit_price: Decimal = Field(ge=0)
    # Suggested quantity from the source document; selection decides the real one.
    default_qty: int = Field(default=1, ge=0)


class TechSpec(BaseModel):
    title: str
    value: str = ""


class FinancingTerm(BaseModel):
    months: int = Field(gt=0)
    coefficient: Decimal = Field(ge=0)


class CatalogEntry(BaseModel):
    brand: str
    model: str
    product_type: ProductType = ProductType.AIR_CONDITIONER
    status: ProductStatus = ProductStatus.DRAFT
    stock: int = Field(default=0, ge=0)
    description: LocalizedText = Field(default_factory=LocalizedText)
    variants: List[Variant] = Field(default_factory=list)
    installation_kits: List[InstallationKit] = Field(default_factory=list)
    extras: List[Extra] = Field(default_factory=list)
    tech_specs: List[TechSpec] = Field(default_factory=list)
    financing: List[FinancingTerm] = Field(default_factory=list)

    model_config = {"from_attributes": True}

    @property
    def is_quotable(self) -> bool:
        return bool(self.variants)


class CatalogProductCreate(CatalogEntry):
    pass


class CatalogProductRead(CatalogEntry):
    id: int
    tenant_id: str
    created_at: datetime
    updated_at: datetime


class Selection(BaseModel):
    """What the customer or staff picked from one catalog entry."""

    variant_index: Optional[int] = None
    kit_index: Optional[int] = None
    # extra index -> quantity; negative quantities are clamped to zero
    extras: Dict[int, Annotated[int, Field(le=MAX_QUANTITY)]] = Field(default_factory=dict)


class ExtractionResponse(BaseModel):
    request_id: str
    product: CatalogEntry
