import pytest
from inventory.models import ShipmentItem
from inventory.tests.factories import ReceivedUnitFactory
from orders.models import Order
from orders.tests.factories import OrderFactory, OrderItemFactory, ShopifyOrderFactory
from rest_framework.test import APIClient
from users.tests.factories import UserFactory


@pytest.fixture
def client():
    api = APIClient()
    api.force_authenticate(user=UserFactory())
    return api


@pytest.mark.django_db
def test_orders_require_authentication():
    resp = APIClient().get("/api/v1/orders/")
    assert resp.status_code == 401


@pytest.mark.django_db
def test_list_orders_filters_by_source(client):
    OrderFactory()
    shopify = ShopifyOrderFactory()
    resp = client.get("/api/v1/orders/?source=shopify")
    assert resp.status_code == 200
    assert [row["id"] for row in resp.json()["results"]] == [shopify.id]


@pytest.mark.django_db
def test_outbound_sale_endpoint(client):
    unit = ReceivedUnitFactory()
    resp = client.post(
        "/api/v1/orders/outbound/",
        {"cart_items": [{"shipment_item_id": unit.id}], "customer_info": {"name": "Pham D", "phone": "0955555555"}},
        format="json",
    )
    assert resp.status_code == 201
    body = resp.json()
    assert body["success"] is True
    assert body["data"]["item_count"] == 1
    unit.refresh_from_db()
    assert unit.status == ShipmentItem.STATUS_SOLD


@pytest.mark.django_db
def test_outbound_sale_of_taken_unit_returns_envelope(client):
    unit = ReceivedUnitFactory(status=ShipmentItem.STATUS_SOLD)
    resp = client.post(
        "/api/v1/orders/outbound/",
        {"cart_items": [{"shipment_item_id": unit.id}], "customer_info": {"name": "Pham D", "phone": "0955555555"}},
        format="json",
    )
    assert resp.status_code == 400
    assert resp.json() == {"success": False, "message": "1 items are no longer available", "error": "OrderError"}


@pytest.mark.django_db
def test_fulfillment_scan_endpoint(client):
    order = ShopifyOrderFactory()
    item = OrderItemFactory(order=order)
    unit = ReceivedUnitFactory(product=item.product)

    resp = client.post(f"/api/v1/orders/{order.id}/fulfillment/scan/", {"qr_code": unit.qr_code}, format="json")

    assert resp.status_code == 200
    assert resp.json()["data"]["fulfillment_status"] == Order.FULFILLMENT_FULFILLED
    detail = client.get(f"/api/v1/orders/{order.id}/").json()
    assert detail["items"][0]["qr_code"] == unit.qr_code


@pytest.mark.django_db
def test_fulfillment_details_for_unknown_order(client):
    resp = client.get("/api/v1/orders/999/fulfillment/")
    assert resp.status_code == 404
    assert resp.json()["message"] == "Order not found"
