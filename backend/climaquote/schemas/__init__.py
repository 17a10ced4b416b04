from .catalog import (
    LocalizedText,
    Variant,
    InstallationKit,
    Extra,
    TechSpec,
    FinancingTerm,
    CatalogEntry,
    CatalogProductCreate,
    CatalogProductRead,
    Selection,
    ExtractionResponse,
)
from .customer import CustomerCreate, CustomerRead
from .quote import (
    LineItem,
    PricedSelection,
    FinancingOption,
    PricingPreview,
    ClientInfo,
    ProductSelection,
    QuoteCreate,
    ConfiguratorRequest,
    QuoteHeaderUpdate,
    LineItemsReplace,
    FinancingUpdate,
    RepriceRequest,
    FinancingRead,
    QuoteItemRead,
    QuoteRead,
    AcceptanceSubmission,
    AcceptanceLink,
    ReconciliationReport,
)
