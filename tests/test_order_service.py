from datetime import date
from decimal import Decimal

import pytest

from polleria.core.exceptions import PersistenceFailure
from polleria.models import OrderHeader, OrderItem
from polleria.schemas.intake import PaymentMethod
from polleria.services import customer_service
from polleria.services.order_service import OrderService, split_payment
from polleria.services.product_resolver import ResolvedLineItem

FRIED = ResolvedLineItem(name="Pollo Frito", quantity=2, unit_price=Decimal("185"), catalog_id=1)
WINGS = ResolvedLineItem(name="Alitas", quantity=1, unit_price=Decimal("95"), catalog_id=3)
UNKNOWN = ResolvedLineItem(name="Tamales", quantity=3, unit_price=Decimal("0"))
BROKEN = ResolvedLineItem(name="Producto borrado", quantity=1, unit_price=Decimal("10"), catalog_id=999)


@pytest.fixture
def customer(seeded):
    customer, _ = customer_service.get_or_create(seeded, "8112345678")
    return customer


def test_split_payment():
    assert split_payment(Decimal("100"), PaymentMethod.CASH) == (Decimal("100"), Decimal("0"))
    assert split_payment(Decimal("100"), None) == (Decimal("100"), Decimal("0"))
    assert split_payment(Decimal("100"), PaymentMethod.CARD) == (Decimal("0"), Decimal("100"))
    assert split_payment(Decimal("100"), PaymentMethod.TRANSFER) == (Decimal("0"), Decimal("100"))


def test_order_numbers_follow_daily_sequence(seeded, customer):
    today = date.today().strftime("%Y%m%d")
    
    first = OrderService.create_intake_order(seeded, customer.id, 1, Decimal("95"), PaymentMethod.CASH, [WINGS])
    second = OrderService.create_intake_order(seeded, customer.id, 1, Decimal("95"), PaymentMethod.CASH, [WINGS])
    
    assert first.order_number == f"PED-{today}-0001"
    assert second.order_number == f"PED-{today}-0002"
    assert OrderService.next_order_number(seeded, date(2020, 1, 31)) == "PED-20200131-0001"


def test_cash_order_is_paid(seeded, customer):
    order = OrderService.create_intake_order(seeded, customer.id, 2, Decimal("370"), PaymentMethod.CASH, [FRIED])
    
    header = seeded.get(OrderHeader, order.order_id)
    assert header.paid_amount == Decimal("370")
    assert header.outstanding_amount == Decimal("0")
    assert header.payment_method == "cash"
    assert header.channel == "whatsapp"


def test_card_order_is_outstanding(seeded, customer):
    order = OrderService.create_intake_order(seeded, customer.id, 2, Decimal("370"), PaymentMethod.CARD, [FRIED])
    
    assert order.paid == Decimal("0")
    assert order.outstanding == Decimal("370")
    assert order.paid + order.outstanding == order.total


def test_unresolved_items_are_skipped(seeded, customer):
    order = OrderService.create_intake_order(seeded, customer.id, 1, Decimal("95"), PaymentMethod.CASH, [WINGS, UNKNOWN])
    
    lines = seeded.query(OrderItem).filter(OrderItem.order_id == order.order_id).all()
    assert [line.product_id for line in lines] == [3]
    assert lines[0].product_name == "Alitas"
    assert order.skipped_items == [UNKNOWN]


def test_order_without_resolved_items_is_still_saved(seeded, customer):
    order = OrderService.create_intake_order(seeded, customer.id, 1, Decimal("0"), PaymentMethod.CASH, [UNKNOWN])
    
    assert seeded.query(OrderHeader).count() == 1
    assert order.items_written == []


def test_failing_line_item_does_not_lose_the_order(seeded, customer):
    order = OrderService.create_intake_order(seeded, customer.id, 1, Decimal("380"), PaymentMethod.CASH, [FRIED, BROKEN])
    
    assert order.items_written == [FRIED]
    assert order.failed_items == [BROKEN]
    assert seeded.query(OrderHeader).count() == 1
    assert seeded.query(OrderItem).count() == 1


def test_atomic_mode_rolls_back_everything(seeded, customer):
    with pytest.raises(PersistenceFailure):
        OrderService.create_intake_order(
            seeded, customer.id, 1, Decimal("380"), PaymentMethod.CASH, [FRIED, BROKEN], atomic=True
        )
    
    assert seeded.query(OrderHeader).count() == 0
    assert seeded.query(OrderItem).count() == 0


def test_header_failure_is_fatal(seeded):
    with pytest.raises(PersistenceFailure):
        OrderService.create_intake_order(seeded, 12345, 1, Decimal("95"), PaymentMethod.CASH, [WINGS])
    
    assert seeded.query(OrderHeader).count() == 0


def test_get_orders_filters_by_phone(seeded, customer):
    other, _ = customer_service.get_or_create(seeded, "5213334445555")
    OrderService.create_intake_order(seeded, customer.id, 1, Decimal("95"), PaymentMethod.CASH, [WINGS])
    OrderService.create_intake_order(seeded, other.id, 1, Decimal("95"), PaymentMethod.CASH, [WINGS])
    
    orders, total = OrderService.get_orders(seeded, phone="811 234 5678")
    
    assert total == 1
    assert orders[0].customer_id == customer.id


def test_order_number_after_deleting_an_earlier_order(seeded, customer):
    today = date.today().strftime("%Y%m%d")
    orders = [
        OrderService.create_intake_order(seeded, customer.id, 1, Decimal("0"), PaymentMethod.CASH, [UNKNOWN])
        for _ in range(3)
    ]
    seeded.delete(seeded.get(OrderHeader, orders[0].order_id))
    seeded.commit()
    
    order = OrderService.create_intake_order(seeded, customer.id, 1, Decimal("95"), PaymentMethod.CASH, [WINGS])
    
    assert order.order_number == f"PED-{today}-0004"
    assert order.items_written == [WINGS]
    assert seeded.query(OrderHeader).count() == 3


def test_taken_order_number_is_retried(seeded, customer, monkeypatch):
    first = OrderService.create_intake_order(seeded, customer.id, 1, Decimal("95"), PaymentMethod.CASH, [WINGS])
    real_next = OrderService.next_order_number
    numbers = iter([first.order_number])
    
    def stale_then_real(db, today=None):
        return next(numbers, None) or real_next(db, today)
    
    monkeypatch.setattr(OrderService, "next_order_number", staticmethod(stale_then_real))
    
    second = OrderService.create_intake_order(seeded, customer.id, 1, Decimal("95"), PaymentMethod.CASH, [WINGS])
    
    assert second.order_number != first.order_number
    assert second.items_written == [WINGS]
    assert seeded.query(OrderHeader).count() == 2
