from __future__ import annotations

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any, Iterable

_CENT = Decimal("0.01")
_PRICE_STEP = Decimal("0.0001")


def to_decimal(value: Any, default: Decimal = Decimal("0")) -> Decimal:
    if value is None:
        return default
    if isinstance(value, Decimal):
        return value if value.is_finite() else default
    if isinstance(value, bool):
        return default
    try:
        out = Decimal(str(value))
    except (InvalidOperation, ValueError, TypeError):
        return default
    return out if out.is_finite() else default


def quantize_cents(value: Decimal) -> Decimal:
    """Round for display only; stored amounts keep full precision."""
    return to_decimal(value).quantize(_CENT, rounding=ROUND_HALF_UP)


def quantize_price(value: Decimal) -> Decimal:
    return to_decimal(value).quantize(_PRICE_STEP, rounding=ROUND_HALF_UP)


def sum_money(values: Iterable[Decimal]) -> Decimal:
    return sum((to_decimal(v) for v in values), Decimal("0"))


def format_money(value: Any, locale: str = "es", currency_symbol: str = "€") -> str:
    """Format an amount the way Spanish and Catalan quotes print it: ``1.105,00 €``."""
    amount = quantize_cents(to_decimal(value))
    sign = "-" if amount < 0 else ""
    whole, frac = f"{abs(amount):.2f}".split(".")
    groups = []
    while whole:
        groups.insert(0, whole[-3:])
        whole = whole[:-3]
    # es and ca share separators
    return f"{sign}{'.'.join(groups)},{frac} {currency_symbol}"
