"""Turn raw document-extraction output into a validated catalog draft.

Extraction output is never trusted: numbers are coerced, text is truncated
and the product type is clamped to the known categories before anything is
stored.
"""

from __future__ import annotations

import logging
import re
from decimal import Decimal
from typing import Any, Dict, List

from ..models.catalog import ProductStatus, ProductType
from ..schemas.catalog import (
    CatalogEntry,
    Extra,
    FinancingTerm,
    InstallationKit,
    LocalizedText,
    TechSpec,
    Variant,
)
from .money import to_decimal

logger = logging.getLogger(__name__)

BRAND_MAX = 50
MODEL_MAX = 50
VARIANT_LABEL_MAX = 40
KIT_LABEL_MAX = 60
EXTRA_LABEL_MAX = 100
DESCRIPTION_MAX = 150
SPEC_TITLE_MAX = 40
SPEC_VALUE_MAX = 150

_NON_NUMERIC = re.compile(r"[^0-9,.\-]")

_TYPE_KEYWORDS = (
    (ProductType.AIR_CONDITIONER, ("aire", "split", "acondicionado", "air")),
    (ProductType.BOILER, ("caldera", "boiler")),
    (ProductType.ELECTRIC_WATER_HEATER, ("termo", "heater")),
)


def parse_number(value: Any, default: Decimal = Decimal("0")) -> Decimal:
    """Coerce ``"1.234,5 €"``-style input to a non-negative Decimal."""
    if isinstance(value, (int, float, Decimal)) and not isinstance(value, bool):
        num = to_decimal(value, default)
    elif isinstance(value, str):
        cleaned = _NON_NUMERIC.sub("", value)
        if "," in cleaned:
            # comma is the decimal separator; dots before it group thousands
            cleaned = cleaned.replace(".", "").replace(",", ".")
        num = to_decimal(cleaned, default) if cleaned else default
    else:
        num = default
    return num if num > 0 else Decimal("0")


def parse_int(value: Any, default: int = 0) -> int:
    return int(parse_number(value, Decimal(default)))


def clean_text(value: Any, max_len: int, default: str = "") -> str:
    if value is None:
        return default
    text = str(value).strip()
    return text[:max_len] if text else default


def clamp_product_type(value: Any) -> ProductType:
    raw = str(value or "").strip().lower()
    for member in ProductType:
        if raw == member.value:
            return member
    for member, keywords in _TYPE_KEYWORDS:
        if any(k in raw for k in keywords):
            return member
    return ProductType.AIR_CONDITIONER


def _localized(value: Any, max_len: int, default: str = "") -> LocalizedText:
    if isinstance(value, dict):
        es = clean_text(value.get("es"), max_len)
        ca = clean_text(value.get("ca"), max_len)
    else:
        es = clean_text(value, max_len)
        ca = ""
    if not es and not ca:
        es = default
    return LocalizedText(es=es, ca=ca)


def _as_list(value: Any) -> List[Dict[str, Any]]:
    if not isinstance(value, list):
        return []
    return [v for v in value if isinstance(v, dict)]


def normalize_extraction(raw: Dict[str, Any]) -> CatalogEntry:
    """Return a draft CatalogEntry built from an extraction payload."""
    if not isinstance(raw, dict):
        raw = {}

    variants = [
        Variant(
            label=_localized(p.get("name"), VARIANT_LABEL_MAX, "Variante"),
            unit_price=parse_number(p.get("price")),
        )
        for p in _as_list(raw.get("pricing"))
    ]
    kits = [
        InstallationKit(
            label=clean_text(k.get("name"), KIT_LABEL_MAX, "Kit Instalación"),
            fixed_price=parse_number(k.get("price")),
        )
        for k in _as_list(raw.get("installation_kits"))
    ]
    extras = [
        Extra(
            label=clean_text(e.get("name"), EXTRA_LABEL_MAX, "Material extra"),
            unit_price=parse_number(e.get("unit_price")),
            default_qty=parse_int(e.get("qty"), 1),
        )
        for e in _as_list(raw.get("extras"))
    ]
    specs = [
        TechSpec(
            title=clean_text(s.get("title"), SPEC_TITLE_MAX),
            value=clean_text(s.get("value"), SPEC_VALUE_MAX),
        )
        for s in _as_list(raw.get("techSpecs") or raw.get("tech_specs"))
        if clean_text(s.get("title"), SPEC_TITLE_MAX)
    ]
    financing = []
    for f in _as_list(raw.get("financing")):
        months = parse_int(f.get("months"))
        if months > 0:
            financing.append(FinancingTerm(months=months, coefficient=parse_number(f.get("coefficient"))))

    entry = CatalogEntry(
        brand=clean_text(raw.get("brand"), BRAND_MAX, "Desconocida"),
        model=clean_text(raw.get("model"), MODEL_MAX, "Desconocido"),
        product_type=clamp_product_type(raw.get("type")),
        status=ProductStatus.DRAFT,
        stock=parse_int(raw.get("stock")),
        description=_localized(raw.get("description"), DESCRIPTION_MAX),
        variants=variants,
        installation_kits=kits,
        extras=extras,
        tech_specs=specs,
        financing=financing,
    )
    if not entry.is_quotable:
        logger.info("Extracted %s %s has no priced variants", entry.brand, entry.model)
    return entry
