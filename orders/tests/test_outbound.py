import re

import pytest
from catalog.tests.factories import ProductFactory
from common.exceptions import InvalidTransition, NotFound
from customer.models import Customer
from inventory.models import ShipmentItem
from inventory.tests.factories import ReceivedUnitFactory, ShipmentItemFactory
from orders import services
from orders.models import Order
from orders.services import OrderError
from scanning.models import ScanningSession
from users.tests.factories import UserFactory


def test_order_number_format():
    assert re.fullmatch(r"ORD-\d{8}-\d{4}", services.generate_order_number())


@pytest.mark.django_db
def test_validate_item_for_sale_returns_product_block():
    unit = ReceivedUnitFactory(qr_code="ABCD1234", product=ProductFactory(price=500000))
    data = services.validate_item_for_sale("abcd-1234")
    assert data["shipment_item_id"] == unit.id
    assert data["price"] == 500000


@pytest.mark.django_db
def test_validate_item_for_sale_rejects_pending_and_unknown():
    ShipmentItemFactory(qr_code="PEND1234")
    with pytest.raises(InvalidTransition):
        services.validate_item_for_sale("PEND1234")
    with pytest.raises(NotFound):
        services.validate_item_for_sale("ZZZZ9999")


@pytest.mark.django_db
def test_outbound_order_sells_units_and_clears_session():
    user = UserFactory()
    product = ProductFactory(price=300000)
    units = ReceivedUnitFactory.create_batch(2, product=product)
    ScanningSession.objects.create(user=user, cart_items=[{"shipment_item_id": units[0].id}])

    result = services.process_outbound_order(
        user=user,
        cart_items=[{"shipment_item_id": u.id} for u in units],
        customer_info={"name": "Tran Thi B", "phone": "0901 234 567"},
    )

    order = Order.objects.get(id=result["order_id"])
    assert order.source == Order.SOURCE_IN_STORE
    assert order.payment_status == Order.PAYMENT_PAID
    assert order.total_amount == 600000
    assert order.items.count() == 2
    assert order.customer.phone == "0901234567"
    assert set(ShipmentItem.objects.filter(id__in=[u.id for u in units]).values_list("status", flat=True)) == {
        ShipmentItem.STATUS_SOLD
    }
    session = ScanningSession.objects.get(user=user)
    assert session.cart_items == []


@pytest.mark.django_db
def test_bank_transfer_sale_is_unpaid():
    unit = ReceivedUnitFactory()
    result = services.process_outbound_order(
        user=UserFactory(),
        cart_items=[{"shipment_item_id": unit.id}],
        customer_info={"name": "A", "phone": "0911111111"},
        payment_method=Order.PAYMENT_BANK_TRANSFER,
    )
    assert Order.objects.get(id=result["order_id"]).payment_status == Order.PAYMENT_UNPAID


@pytest.mark.django_db
def test_outbound_order_is_all_or_nothing():
    available = ReceivedUnitFactory()
    taken = ReceivedUnitFactory(status=ShipmentItem.STATUS_SOLD)

    with pytest.raises(OrderError) as exc:
        services.process_outbound_order(
            user=UserFactory(),
            cart_items=[{"shipment_item_id": available.id}, {"shipment_item_id": taken.id}],
            customer_info={"name": "A", "phone": "0922222222"},
        )

    assert exc.value.message == "1 items are no longer available"
    available.refresh_from_db()
    assert available.status == ShipmentItem.STATUS_RECEIVED
    assert not Order.objects.exists()
    assert not Customer.objects.exists()


@pytest.mark.django_db
def test_outbound_order_rejects_empty_cart():
    with pytest.raises(OrderError):
        services.process_outbound_order(user=UserFactory(), cart_items=[], customer_info={"name": "A"})
