from decimal import Decimal

import pytest

from polleria.core.exceptions import NotAnOrder
from polleria.integrations.keyword_interpreter import KeywordInterpreter, tokenize
from polleria.schemas.intake import CatalogEntry, PaymentMethod

CATALOG = [
    CatalogEntry(id=1, name="Pollo Frito", price=Decimal("185")),
    CatalogEntry(id=2, name="Pollo Frito por Piezas", price=Decimal("25")),
    CatalogEntry(id=3, name="Alitas", price=Decimal("95")),
    CatalogEntry(id=4, name="Pechuga", price=Decimal("120")),
    CatalogEntry(id=6, name="Mollejas", price=Decimal("60")),
]


def test_tokenize_folds_plurals_and_accents():
    assert tokenize("Pollos FRITOS, más alitas") == ["pollo", "frito", "mas", "alita"]
    assert tokenize("tres pechugas") == ["tres", "pechuga"]


@pytest.mark.asyncio
async def test_plural_mention_with_digit_quantity():
    intent = await KeywordInterpreter().interpret("Quiero 2 pollos fritos", "+528112345678", CATALOG)
    
    assert len(intent.products) == 1
    assert intent.products[0].product_id == 1
    assert intent.products[0].quantity == 2
    assert intent.payment_method is None


@pytest.mark.asyncio
async def test_longest_catalog_name_wins():
    intent = await KeywordInterpreter().interpret("me das 5 pollo frito por piezas", "+528112345678", CATALOG)
    
    assert [(p.product_id, p.quantity) for p in intent.products] == [(2, 5)]


@pytest.mark.asyncio
async def test_number_words_filler_and_payment():
    intent = await KeywordInterpreter().interpret(
        "Una docena de alitas y tres kilos de pechuga, pago con tarjeta", "+528112345678", CATALOG
    )
    
    quantities = {p.name: p.quantity for p in intent.products}
    assert quantities == {"Alitas": 12, "Pechuga": 3}
    assert intent.payment_method == PaymentMethod.CARD


@pytest.mark.asyncio
async def test_missing_quantity_defaults_to_one():
    intent = await KeywordInterpreter().interpret("mollejas por favor", "+528112345678", CATALOG)
    assert intent.products[0].quantity == 1


@pytest.mark.asyncio
async def test_address_and_name_are_extracted():
    intent = await KeywordInterpreter().interpret(
        "Me llamo Juan Pérez, quiero alitas. Mi dirección es Calle Hidalgo 123, Centro\nEn efectivo",
        "+528112345678",
        CATALOG,
    )
    
    assert intent.customer_name == "Juan Pérez"
    assert intent.delivery_address == "Calle Hidalgo 123, Centro"
    assert intent.payment_method == PaymentMethod.CASH


@pytest.mark.asyncio
async def test_greeting_is_not_an_order():
    with pytest.raises(NotAnOrder):
        await KeywordInterpreter().interpret("hola", "+528112345678", CATALOG)


def test_payment_method_from_text():
    assert PaymentMethod.from_text("tarjeta") == PaymentMethod.CARD
    assert PaymentMethod.from_text("con tarjeta de crédito") == PaymentMethod.CARD
    assert PaymentMethod.from_text("transfer") == PaymentMethod.TRANSFER
    assert PaymentMethod.from_text("pago con tarjeta o efectivo") is None
    assert PaymentMethod.from_text("como sea") is None


@pytest.mark.asyncio
async def test_undecided_payment_is_left_open():
    intent = await KeywordInterpreter().interpret(
        "2 alitas, pago con tarjeta o efectivo", "+528112345678", CATALOG
    )
    
    assert intent.payment_method is None
