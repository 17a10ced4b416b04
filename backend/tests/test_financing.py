from decimal import Decimal

from climaquote.services.financing import (
    FINANCING_COEFFICIENTS,
    coefficient,
    financing_options,
    monthly_fee,
)
from climaquote.services.money import format_money, quantize_cents


def test_sixty_month_coefficient():
    assert monthly_fee(Decimal("1000"), 60) == Decimal("21.183")


def test_twenty_four_months_on_1105():
    fee = monthly_fee(Decimal("1105"), 24)
    assert fee == Decimal("1105") * Decimal("0.045104")
    assert quantize_cents(fee) == Decimal("49.84")


def test_unknown_term_uses_twelve_month_coefficient():
    assert coefficient(18) == FINANCING_COEFFICIENTS[12]
    assert coefficient(None) == Decimal("0.087")
    assert monthly_fee(Decimal("100"), 7) == Decimal("8.700")


def test_full_precision_until_display():
    fee = monthly_fee(Decimal("1234.56"), 36)
    assert fee == Decimal("1234.56") * Decimal("0.032206")
    assert fee != quantize_cents(fee)


def test_options_cover_every_term_in_order():
    options = financing_options(Decimal("1105"))
    assert [o.term_months for o in options] == [12, 24, 36, 48, 60]
    by_term = {o.term_months: o for o in options}
    assert by_term[24].monthly_fee_rounded == Decimal("49.84")
    assert by_term[12].monthly_fee == Decimal("96.135")


def test_format_money_uses_spanish_separators():
    assert format_money(Decimal("1105")) == "1.105,00 €"
    assert format_money(Decimal("49.83992")) == "49,84 €"
    assert format_money(Decimal("1234567.891")) == "1.234.567,89 €"
    assert format_money(None) == "0,00 €"
