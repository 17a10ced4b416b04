from __future__ import annotations

from decimal import Decimal
from typing import List

from ..models.quote import Quote
from ..utils.errors import ReconciliationMismatch
from .money import sum_money, to_decimal


def items_total(quote: Quote) -> Decimal:
    return sum_money(item.total for item in quote.items)


def reconciliation_problems(quote: Quote) -> List[str]:
    """List every way the stored quote disagrees with its own line items."""
    problems: List[str] = []
    for item in quote.items:
        expected = to_decimal(item.unit_price) * int(item.quantity or 0)
        if to_decimal(item.total) != expected:
            problems.append(
                f"item {item.position} total {to_decimal(item.total)} != {item.quantity} x {to_decimal(item.unit_price)}"
            )
    expected_total = items_total(quote)
    actual_total = to_decimal(quote.total_amount)
    if actual_total != expected_total:
        problems.append(f"total {actual_total} != items {expected_total}")
    return problems


def ensure_reconciled(quote: Quote) -> None:
    problems = reconciliation_problems(quote)
    if problems:
        raise ReconciliationMismatch(
            quote.id,
            expected=items_total(quote),
            actual=to_decimal(quote.total_amount),
            problems=problems,
        )
