from __future__ import annotations

import logging
from decimal import Decimal
from typing import List

from ..schemas.quote import FinancingOption
from .money import to_decimal

logger = logging.getLogger(__name__)

DEFAULT_TERM_MONTHS = 12

# Monthly fee per unit of financed amount, by term in months.
FINANCING_COEFFICIENTS: dict[int, Decimal] = {
    12: Decimal("0.087"),
    24: Decimal("0.045104"),
    36: Decimal("0.032206"),
    48: Decimal("0.0253"),
    60: Decimal("0.021183"),
}

TERMS_MONTHS = tuple(sorted(FINANCING_COEFFICIENTS))


def coefficient(term_months: int | None) -> Decimal:
    """Return the coefficient for ``term_months``.

    Unknown terms use the 12-month coefficient; the fee is a display
    estimate, not a loan offer.
    """
    coeff = FINANCING_COEFFICIENTS.get(term_months) if term_months is not None else None
    if coeff is None:
        logger.info("Unknown financing term %s; using %s-month coefficient", term_months, DEFAULT_TERM_MONTHS)
        return FINANCING_COEFFICIENTS[DEFAULT_TERM_MONTHS]
    return coeff


def monthly_fee(subtotal: Decimal, term_months: int | None) -> Decimal:
    """Return ``subtotal * coefficient(term_months)`` without rounding."""
    return to_decimal(subtotal) * coefficient(term_months)


def financing_options(subtotal: Decimal) -> List[FinancingOption]:
    return [
        FinancingOption(
            term_months=months,
            coefficient=FINANCING_COEFFICIENTS[months],
            monthly_fee=monthly_fee(subtotal, months),
        )
        for months in TERMS_MONTHS
    ]
