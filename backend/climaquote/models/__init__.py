from .catalog import CatalogProduct, ProductType, ProductStatus
from .customer import Customer
from .quote import Quote, QuoteItem, QuoteStatus

__all__ = [
    "CatalogProduct",
    "ProductType",
    "ProductStatus",
    "Customer",
    "Quote",
    "QuoteItem",
    "QuoteStatus",
]
