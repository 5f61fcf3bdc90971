import json
import time

import pytest
from catalog.tests.factories import ProductFactory
from inventory.tests.factories import ReceivedUnitFactory
from orders.models import Order
from rest_framework.test import APIClient
from shopify_sync.signing import build_signed_headers, sign_body, verify_signature
from shopify_sync.tests.factories import ShopifySettingsFactory


def _event(product, quantity=1, **overrides):
    event = {
        "event": "order.paid",
        "provider": "sepay",
        "shopifyOrderId": "820982911946154508",
        "shopifyOrderNumber": "#1001",
        "paymentCode": "SP1001",
        "amount": float(product.price * quantity),
        "currency": "VND",
        "paidAt": "2025-06-01T10:00:00Z",
        "referenceCode": "FT2515200001",
        "gateway": "SePay",
        "lineItems": [
            {
                "sku": str(product.id),
                "variantId": "4455",
                "quantity": quantity,
                "price": float(product.price),
                "title": product.name,
            }
        ],
        "customer": {"email": "buyer@example.com", "name": "Le Van C", "phone": "0933333333"},
        "shippingAddress": {"address1": "12 Nguyen Hue", "city": "Ho Chi Minh"},
    }
    event.update(overrides)
    return event


def _post(org_id, raw, headers):
    return APIClient().post(
        f"/api/v1/webhooks/shopify/{org_id}/orders/",
        data=raw,
        content_type="application/json",
        HTTP_X_SIGNATURE=headers.get("X-Signature", ""),
        HTTP_X_TIMESTAMP=headers.get("X-Timestamp", ""),
    )


def _signed_post(store, payload):
    raw, headers = build_signed_headers(payload, store.webhook_secret)
    return _post(store.organization_id, raw, headers)


def test_signature_round_trip_and_expiry():
    now = 1_750_000_000
    body = '{"a": 1}'
    signature = sign_body(f"{body}.{now}", "secret")
    assert verify_signature(body, signature, str(now), "secret", max_age=300, now=now + 10)
    assert not verify_signature(body, signature, str(now), "secret", max_age=300, now=now + 301)
    assert not verify_signature(body, signature, str(now), "other", max_age=300, now=now)
    assert not verify_signature(body, signature, "yesterday", "secret", max_age=300, now=now)


@pytest.mark.django_db
def test_paid_order_creates_warehouse_order():
    store = ShopifySettingsFactory()
    product = ProductFactory(organization=store.organization)
    ReceivedUnitFactory.create_batch(2, product=product)

    resp = _signed_post(store, _event(product, quantity=2))

    assert resp.status_code == 200
    body = resp.json()
    assert body["success"] is True
    assert body["shopifyOrderId"] == "820982911946154508"
    assert body["itemsFulfilled"] == 0
    order = Order.objects.get(id=body["warehouseOrderId"])
    assert order.organization_id == store.organization_id
    assert order.items.count() == 2
    assert order.customer.name == "Le Van C"


@pytest.mark.django_db
def test_replayed_event_answers_with_first_order():
    store = ShopifySettingsFactory()
    product = ProductFactory(organization=store.organization)
    ReceivedUnitFactory(product=product)

    first = _signed_post(store, _event(product)).json()
    second = _signed_post(store, _event(product)).json()

    assert second["warehouseOrderId"] == first["warehouseOrderId"]
    assert Order.objects.count() == 1


@pytest.mark.django_db
def test_bad_or_missing_signature_is_unauthorized():
    store = ShopifySettingsFactory()
    product = ProductFactory(organization=store.organization)
    raw, headers = build_signed_headers(_event(product), "wrong-secret")

    assert _post(store.organization_id, raw, headers).status_code == 401
    resp = _post(store.organization_id, raw, {})
    assert resp.status_code == 401
    assert resp.json()["error"] == "Unauthorized"


@pytest.mark.django_db
def test_expired_signature_is_unauthorized():
    store = ShopifySettingsFactory()
    product = ProductFactory(organization=store.organization)
    raw, headers = build_signed_headers(_event(product), store.webhook_secret, now=time.time() - 301)
    assert _post(store.organization_id, raw, headers).status_code == 401


@pytest.mark.django_db
def test_unconfigured_org_and_missing_secret():
    unconfigured = ShopifySettingsFactory(enabled=False)
    no_secret = ShopifySettingsFactory(webhook_secret="")
    raw, headers = build_signed_headers({"event": "order.paid"}, "whatever")

    assert _post(unconfigured.organization_id, raw, headers).status_code == 404
    assert _post(9999, raw, headers).status_code == 404
    assert _post(no_secret.organization_id, raw, headers).status_code == 500


@pytest.mark.django_db
def test_invalid_json_and_invalid_payload():
    store = ShopifySettingsFactory()
    timestamp = str(int(time.time()))
    raw = "{not json"
    headers = {"X-Signature": sign_body(f"{raw}.{timestamp}", store.webhook_secret), "X-Timestamp": timestamp}
    resp = _post(store.organization_id, raw, headers)
    assert resp.status_code == 400
    assert resp.json()["code"] == "INVALID_JSON"

    product = ProductFactory(organization=store.organization)
    resp = _signed_post(store, _event(product, currency="USD", lineItems=[]))
    assert resp.status_code == 400
    body = resp.json()
    assert body["code"] == "VALIDATION_ERROR"
    assert set(body["details"]) == {"currency", "lineItems"}


@pytest.mark.django_db
def test_missing_sku_and_insufficient_inventory_codes():
    store = ShopifySettingsFactory()
    product = ProductFactory(organization=store.organization)

    event = _event(product)
    event["lineItems"][0]["sku"] = "999999"
    resp = _signed_post(store, event)
    assert resp.status_code == 400
    assert resp.json()["code"] == "MISSING_SKU"

    resp = _signed_post(store, _event(product, quantity=3))
    assert resp.status_code == 400
    assert resp.json() == {
        "error": f"Insufficient inventory: {product.name} (need 3, have 0)",
        "code": "INSUFFICIENT_INVENTORY",
    }
    assert not Order.objects.exists()


def test_signed_body_is_the_exact_json_sent():
    raw, headers = build_signed_headers({"b": 2, "a": 1}, "s", now=100)
    assert json.loads(raw) == {"b": 2, "a": 1}
    assert headers["X-Timestamp"] == "100"
    assert headers["X-Signature"] == sign_body(f"{raw}.100", "s")
