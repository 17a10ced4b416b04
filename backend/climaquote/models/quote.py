import enum
from sqlalchemy import (
    Boolean,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    JSON,
    Numeric,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship

from .base import BaseModel
from .types import CaseInsensitiveEnum


class QuoteStatus(str, enum.Enum):
    DRAFT = "draft"
    SENT = "sent"
    VIEWED = "viewed"
    ACCEPTED = "accepted"
    REJECTED = "rejected"
    EXPIRED = "expired"


class Quote(BaseModel):
    __tablename__ = "quotes"
    __table_args__ = (
        UniqueConstraint("tenant_id", "quote_no", name="uq_quotes_tenant_quote_no"),
    )

    id = Column(Integer, primary_key=True, index=True)
    tenant_id = Column(String(64), nullable=False, index=True)
    quote_no = Column(String(16), nullable=False)
    customer_id = Column(Integer, ForeignKey("customers.id"), nullable=True)
    # Source product and the selection that priced it, kept so a draft can be
    # re-priced deterministically when reopened.
    product_id = Column(Integer, ForeignKey("catalog_products.id"), nullable=True)
    selection = Column(JSON, nullable=True)
    locale = Column(String(2), nullable=False, default="es")

    # Client snapshot captured on the quote itself
    client_name = Column(String, nullable=True)
    client_email = Column(String, nullable=True)
    client_phone = Column(String, nullable=True)
    client_address = Column(String, nullable=True)
    client_population = Column(String, nullable=True)
    client_tax_id = Column(String, nullable=True)
    is_technician = Column(Boolean, nullable=False, default=False)
    work_order_number = Column(String(32), nullable=True)

    # Always equal to the sum of item totals; amounts are VAT included
    total_amount = Column(Numeric(14, 4), nullable=False, default=0)
    # Both NULL when paying in full
    financing_months = Column(Integer, nullable=True)
    financing_fee = Column(Numeric(24, 10), nullable=True)

    status = Column(
        CaseInsensitiveEnum(QuoteStatus, name="quotestatus"),
        nullable=False,
        default=QuoteStatus.DRAFT,
    )
    valid_until = Column(Date, nullable=False)

    signature = Column(Text, nullable=True)
    terms_accepted_at = Column(DateTime, nullable=True)
    sent_at = Column(DateTime, nullable=True)
    viewed_at = Column(DateTime, nullable=True)
    accepted_at = Column(DateTime, nullable=True)
    rejected_at = Column(DateTime, nullable=True)
    expired_at = Column(DateTime, nullable=True)
    # bumped on every UPDATE; a stale writer gets StaleDataError
    version_id = Column(Integer, nullable=False)

    items = relationship(
        "QuoteItem",
        back_populates="quote",
        order_by="QuoteItem.position",
        cascade="all, delete-orphan",
    )
    customer = relationship("Customer")
    product = relationship("CatalogProduct")

    __mapper_args__ = {"version_id_col": version_id}


class QuoteItem(BaseModel):
    __tablename__ = "quote_items"

    id = Column(Integer, primary_key=True, index=True)
    quote_id = Column(Integer, ForeignKey("quotes.id", ondelete="CASCADE"), nullable=False, index=True)
    position = Column(Integer, nullable=False, default=0)
    description = Column(String, nullable=False)
    quantity = Column(Integer, nullable=False, default=1)
    unit_price = Column(Numeric(14, 4), nullable=False)
    total = Column(Numeric(14, 4), nullable=False)

    quote = relationship("Quote", back_populates="items")
