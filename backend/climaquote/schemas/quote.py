from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import List, Literal, Optional

from pydantic import BaseModel, Field, computed_field, field_validator, model_validator

from ..core.config import acceptance_link
from ..models.quote import QuoteStatus
from ..services.money import quantize_cents, quantize_price
from .catalog import MAX_QUANTITY, Selection


class LineItem(BaseModel):
    description: str = Field(min_length=1)
    quantity: int = Field(ge=1, le=MAX_QUANTITY)
    unit_price: Decimal = Field(ge=0)

    model_config = {"frozen": True}

    @field_validator("unit_price")
    @classmethod
    def _storage_precision(cls, v: Decimal) -> Decimal:
        # stored prices keep four decimals
        return quantize_price(v)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def line_total(self) -> Decimal:
        return self.unit_price * self.quantity


class PricedSelection(BaseModel):
    items: List[LineItem]
    subtotal: Decimal

    model_config = {"frozen": True}


class FinancingOption(BaseModel):
    term_months: int
    coefficient: Decimal
    monthly_fee: Decimal

    @computed_field  # type: ignore[prop-decorator]
    @property
    def monthly_fee_rounded(self) -> Decimal:
        return quantize_cents(self.monthly_fee)


class PricingPreview(PricedSelection):
    financing_options: List[FinancingOption] = Field(default_factory=list)


class ClientInfo(BaseModel):
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    population: Optional[str] = None
    tax_id: Optional[str] = None
    is_technician: Optional[bool] = None
    work_order_number: Optional[str] = Field(default=None, max_length=32)


class ProductSelection(Selection):
    product_id: int


class QuoteCreate(BaseModel):
    """Staff draft: either explicit line items or a catalog selection, not both."""

    line_items: Optional[List[LineItem]] = None
    selection: Optional[ProductSelection] = None
    customer_id: Optional[int] = None
    client: Optional[ClientInfo] = None
    financing_months: Optional[int] = None
    locale: Optional[str] = None

    @model_validator(mode="after")
    def _one_source_of_items(self) -> "QuoteCreate":
        if self.line_items is not None and self.selection is not None:
            raise ValueError("Provide either line_items or selection, not both")
        return self


class ConfiguratorRequest(ProductSelection):
    financing_months: Optional[int] = None
    locale: Optional[str] = None


class QuoteHeaderUpdate(ClientInfo):
    customer_id: Optional[int] = None
    valid_until: Optional[date] = None


class LineItemsReplace(BaseModel):
    items: List[LineItem]


class FinancingUpdate(BaseModel):
    term_months: Optional[int] = None


class RepriceRequest(Selection):
    pass


class FinancingRead(BaseModel):
    term_months: int
    monthly_fee: Decimal

    @computed_field  # type: ignore[prop-decorator]
    @property
    def monthly_fee_rounded(self) -> Decimal:
        return quantize_cents(self.monthly_fee)


class QuoteItemRead(BaseModel):
    position: int
    description: str
    quantity: int
    unit_price: Decimal
    line_total: Decimal = Field(validation_alias="total")

    model_config = {"from_attributes": True}


class QuoteRead(BaseModel):
    id: int
    tenant_id: str
    quote_no: str
    status: QuoteStatus
    locale: str
    customer_id: Optional[int] = None
    product_id: Optional[int] = None
    client_name: Optional[str] = None
    client_email: Optional[str] = None
    client_phone: Optional[str] = None
    client_address: Optional[str] = None
    client_population: Optional[str] = None
    client_tax_id: Optional[str] = None
    is_technician: bool = False
    work_order_number: Optional[str] = None
    total_amount: Decimal
    financing_months: Optional[int] = Field(default=None, exclude=True)
    financing_fee: Optional[Decimal] = Field(default=None, exclude=True)
    valid_until: date
    items: List[QuoteItemRead] = Field(default_factory=list)
    sent_at: Optional[datetime] = None
    viewed_at: Optional[datetime] = None
    accepted_at: Optional[datetime] = None
    rejected_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}

    @computed_field  # type: ignore[prop-decorator]
    @property
    def financing(self) -> Optional[FinancingRead]:
        if self.financing_months is None or self.financing_fee is None:
            return None
        return FinancingRead(term_months=self.financing_months, monthly_fee=self.financing_fee)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def acceptance_url(self) -> str:
        return acceptance_link(self.id)


class AcceptanceSubmission(BaseModel):
    """Customer form; nothing is required until ``action == "confirm"``."""

    action: Literal["save", "confirm"] = "confirm"
    name: str = ""
    surname: str = ""
    email: str = ""
    phone: str = ""
    address: str = ""
    population: str = ""
    tax_id: str = ""
    is_technician: bool = False
    work_order_number: Optional[str] = Field(default=None, max_length=32)
    signature: Optional[str] = None
    terms_accepted: bool = False


class AcceptanceLink(BaseModel):
    quote_id: int
    quote_no: str
    url: str


class ReconciliationReport(BaseModel):
    quote_id: int
    quote_no: str
    status: QuoteStatus
    problems: List[str]
