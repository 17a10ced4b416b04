from decimal import Decimal

import pytest
from pydantic import ValidationError

from climaquote.schemas import Selection
from climaquote.services.context import QuoteContext
from climaquote.services.pricing import price_selection
from climaquote.utils.errors import IncompleteSelection


def test_full_selection_prices_variant_kit_and_extras(split_entry, ctx, expected_total):
    priced = price_selection(
        split_entry,
        Selection(variant_index=0, kit_index=0, extras={1: 1, 0: 2}),
        ctx,
    )
    assert [i.description for i in priced.items] == [
        "Daikin TXF35 - 3,5 kW",
        "Kit instalación básica",
        "Metro de tubería frigorífica",
        "Soporte de pared",
    ]
    assert [i.quantity for i in priced.items] == [1, 1, 2, 1]
    assert [i.line_total for i in priced.items] == [
        Decimal("900"),
        Decimal("150"),
        Decimal("20"),
        Decimal("35"),
    ]
    assert priced.subtotal == expected_total
    assert priced.subtotal == sum(i.line_total for i in priced.items)


def test_missing_variant_is_incomplete(split_entry, ctx):
    with pytest.raises(IncompleteSelection) as exc:
        price_selection(split_entry, Selection(kit_index=0), ctx)
    assert exc.value.field_errors() == {"variant_index": "incomplete_selection"}


def test_entry_without_variants_cannot_be_priced(split_entry, ctx):
    entry = split_entry.model_copy(update={"variants": []})
    assert not entry.is_quotable
    with pytest.raises(IncompleteSelection):
        price_selection(entry, Selection(variant_index=0), ctx)


@pytest.mark.parametrize(
    "selection, field",
    [
        (Selection(variant_index=5), "variant_index"),
        (Selection(variant_index=0, kit_index=9), "kit_index"),
        (Selection(variant_index=0, extras={7: 1}), "extras.7"),
    ],
)
def test_out_of_range_indexes_name_the_field(split_entry, ctx, selection, field):
    with pytest.raises(IncompleteSelection) as exc:
        price_selection(split_entry, selection, ctx)
    assert exc.value.field == field


def test_negative_and_zero_extra_quantities_are_omitted(split_entry, ctx):
    priced = price_selection(
        split_entry,
        Selection(variant_index=0, extras={0: -3, 1: 0}),
        ctx,
    )
    assert len(priced.items) == 1
    assert all(i.quantity > 0 for i in priced.items)
    assert priced.subtotal == Decimal("900")


def test_kit_is_optional(split_entry, ctx):
    priced = price_selection(split_entry, Selection(variant_index=1), ctx)
    assert [i.description for i in priced.items] == ["Daikin TXF35 - 5 kW"]
    assert priced.subtotal == Decimal("1250")


def test_pricing_is_deterministic(split_entry, ctx):
    selection = Selection(variant_index=0, kit_index=1, extras={0: 4})
    first = price_selection(split_entry, selection, ctx)
    second = price_selection(split_entry, selection, ctx)
    assert first == second
    assert first.model_dump_json() == second.model_dump_json()


def test_variant_label_follows_locale_with_spanish_fallback(split_entry):
    ca = QuoteContext.build("t", "ca")
    priced = price_selection(split_entry, Selection(variant_index=1), ca)
    # the 5 kW variant has no Catalan label
    assert priced.items[0].description == "Daikin TXF35 - 5 kW"

    entry = split_entry.model_copy(deep=True)
    entry.variants[0].label.ca = "3,5 kW (ca)"
    priced = price_selection(entry, Selection(variant_index=0), ca)
    assert priced.items[0].description == "Daikin TXF35 - 3,5 kW (ca)"


def test_extra_quantity_beyond_item_column_is_refused(split_entry, ctx):
    with pytest.raises(ValidationError):
        Selection(variant_index=0, extras={0: 10**19})
    with pytest.raises(IncompleteSelection) as exc:
        price_selection(
            split_entry,
            Selection.model_construct(variant_index=0, kit_index=None, extras={0: 2**31}),
            ctx,
        )
    assert exc.value.field == "extras.0"
