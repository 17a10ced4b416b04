from typing import Optional

from fastapi import Header, status

from ..database import get_db  # noqa: F401
from ..services.context import QuoteContext
from ..utils import error_response


def get_quote_context(
    x_tenant_id: Optional[str] = Header(default=None),
    x_locale: Optional[str] = Header(default=None),
) -> QuoteContext:
    """Build the staff request context from the ``X-Tenant-ID`` and ``X-Locale`` headers."""
    tenant_id = (x_tenant_id or "").strip()
    if not tenant_id:
        raise error_response(
            "X-Tenant-ID header is required",
            {"tenant_id": "required"},
            status.HTTP_400_BAD_REQUEST,
        )
    return QuoteContext.build(tenant_id, x_locale)


def get_locale(x_locale: Optional[str] = Header(default=None)) -> Optional[str]:
    return x_locale
