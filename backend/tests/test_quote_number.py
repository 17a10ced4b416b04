import re

import pytest

from climaquote.core.config import acceptance_link, settings
from climaquote.services import quote_number
from climaquote.services.context import QuoteContext


def test_quote_number_format():
    numbers = {quote_number.generate_quote_number() for _ in range(50)}
    assert all(re.fullmatch(r"PRE-[0-9A-Z]{6}", n) for n in numbers)
    assert len(numbers) > 1


def test_unique_quote_number_gives_up_after_bounded_attempts():
    with pytest.raises(RuntimeError):
        quote_number.unique_quote_number(lambda candidate: True)


def test_context_normalizes_locale():
    assert QuoteContext.build("t", "CA").locale == "ca"
    assert QuoteContext.build("t", "ca-ES").locale == "ca"
    assert QuoteContext.build("t", "fr").locale == settings.DEFAULT_LOCALE
    assert QuoteContext.build("t").locale == "es"


def test_acceptance_link(monkeypatch):
    monkeypatch.setattr(settings, "FRONTEND_URL", "https://presupuestos.example.com/")
    assert acceptance_link(42) == "https://presupuestos.example.com/#/presupuestos/42/aceptar"
