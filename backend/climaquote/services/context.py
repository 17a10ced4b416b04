from __future__ import annotations

from dataclasses import dataclass

from ..core.config import settings


@dataclass(frozen=True)
class QuoteContext:
    """Tenant and language a pricing or acceptance call runs under."""

    tenant_id: str
    locale: str = "es"

    @classmethod
    def build(cls, tenant_id: str, locale: str | None = None) -> "QuoteContext":
        loc = (locale or settings.DEFAULT_LOCALE or "es").strip().lower()[:2]
        if loc not in settings.SUPPORTED_LOCALES:
            loc = settings.DEFAULT_LOCALE
        return cls(tenant_id=str(tenant_id), locale=loc)
