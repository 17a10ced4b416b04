from __future__ import annotations

import logging
from typing import Dict, List, Optional

from ..schemas.catalog import MAX_QUANTITY, CatalogEntry, Selection
from ..schemas.quote import LineItem, PricedSelection
from ..utils.errors import IncompleteSelection
from .context import QuoteContext
from .money import sum_money

logger = logging.getLogger(__name__)


def _clamp_qty(val: object) -> int:
    try:
        n = int(val)  # type: ignore[arg-type]
        return n if n > 0 else 0
    except (TypeError, ValueError):
        return 0


def _variant_line(entry: CatalogEntry, variant_index: Optional[int], locale: str) -> LineItem:
    if variant_index is None:
        raise IncompleteSelection("A variant must be selected", field="variant_index")
    if not entry.variants:
        raise IncompleteSelection(
            f"{entry.brand} {entry.model} has no priced variants", field="variant_index"
        )
    if not 0 <= variant_index < len(entry.variants):
        raise IncompleteSelection(f"Unknown variant {variant_index}", field="variant_index")

    variant = entry.variants[variant_index]
    label = variant.label.for_locale(locale)
    description = f"{entry.brand} {entry.model}".strip()
    if label:
        description = f"{description} - {label}"
    return LineItem(description=description, quantity=1, unit_price=variant.unit_price)


def _kit_line(entry: CatalogEntry, kit_index: Optional[int]) -> Optional[LineItem]:
    if kit_index is None:
        return None
    if not 0 <= kit_index < len(entry.installation_kits):
        raise IncompleteSelection(f"Unknown installation kit {kit_index}", field="kit_index")
    kit = entry.installation_kits[kit_index]
    return LineItem(description=kit.label, quantity=1, unit_price=kit.fixed_price)


def _extra_lines(entry: CatalogEntry, extras: Dict[int, int]) -> List[LineItem]:
    items: List[LineItem] = []
    for idx in sorted(extras):
        if not 0 <= idx < len(entry.extras):
            raise IncompleteSelection(f"Unknown extra {idx}", field=f"extras.{idx}")
        qty = _clamp_qty(extras[idx])
        if qty == 0:
            continue
        if qty > MAX_QUANTITY:
            raise IncompleteSelection(f"Quantity {qty} for extra {idx} is too large", field=f"extras.{idx}")
        extra = entry.extras[idx]
        items.append(LineItem(description=extra.label, quantity=qty, unit_price=extra.unit_price))
    return items


def price_selection(entry: CatalogEntry, selection: Selection, ctx: QuoteContext) -> PricedSelection:
    """Turn a catalog selection into ordered line items and their subtotal.

    Order is variant, installation kit, then extras by ascending index.
    The result depends only on the inputs, so re-pricing a reopened draft
    reproduces the same items.
    """
    items: List[LineItem] = [_variant_line(entry, selection.variant_index, ctx.locale)]
    kit = _kit_line(entry, selection.kit_index)
    if kit is not None:
        items.append(kit)
    items.extend(_extra_lines(entry, selection.extras or {}))

    subtotal = sum_money(item.line_total for item in items)
    logger.debug(
        "Priced %s %s for tenant %s: %d items, subtotal %s",
        entry.brand,
        entry.model,
        ctx.tenant_id,
        len(items),
        subtotal,
    )
    return PricedSelection(items=items, subtotal=subtotal)
