from sqlalchemy import Column, Integer, String

from .base import BaseModel


class Customer(BaseModel):
    """Reusable client record; quotes copy its fields rather than reference them."""

    __tablename__ = "customers"

    id = Column(Integer, primary_key=True, index=True)
    tenant_id = Column(String(64), nullable=False, index=True)
    name = Column(String, nullable=False)
    email = Column(String, nullable=False)
    phone = Column(String, nullable=True)
    address = Column(String, nullable=True)
    tax_id = Column(String, nullable=True)
    population = Column(String, nullable=True)
