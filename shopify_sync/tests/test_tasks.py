from unittest import mock

import pytest
from catalog.tests.factories import ProductFactory
from deliveries.tests.factories import DeliveryFactory
from orders.tests.factories import ShopifyOrderFactory
from shopify_sync import queue, tasks
from shopify_sync.models import ShopifyProductMapping
from shopify_sync.tests.factories import ShopifySettingsFactory
from shopify_sync.tests.helpers import fake_response, fake_session

FULFILLMENT_ORDERS = {
    "data": {
        "order": {
            "id": "gid://shopify/Order/5001",
            "fulfillmentOrders": {
                "edges": [
                    {"node": {"id": "gid://shopify/FulfillmentOrder/1", "status": "OPEN"}},
                    {"node": {"id": "gid://shopify/FulfillmentOrder/2", "status": "CLOSED"}},
                ]
            },
        }
    }
}


@pytest.mark.django_db
def test_queue_waits_for_commit(django_capture_on_commit_callbacks):
    with mock.patch("shopify_sync.tasks.sync_inventory.delay") as task:
        with django_capture_on_commit_callbacks() as callbacks:
            queue.queue_inventory_sync([3, 1, 3])
        task.assert_not_called()
        for callback in callbacks:
            callback()
    task.assert_called_once_with([1, 3])


@pytest.mark.django_db
def test_empty_batches_are_not_queued(django_capture_on_commit_callbacks):
    with django_capture_on_commit_callbacks() as callbacks:
        queue.queue_inventory_sync([])
        queue.queue_shopify_product_creation(None)
    assert callbacks == []


@pytest.mark.django_db
def test_enqueue_failure_is_logged_not_raised(django_capture_on_commit_callbacks, caplog):
    with mock.patch("shopify_sync.tasks.create_shopify_products.delay", side_effect=ConnectionError("broker down")):
        with django_capture_on_commit_callbacks(execute=True):
            queue.queue_shopify_product_creation([7])
    assert "shopify.enqueue_failed" in caplog.text


@pytest.mark.django_db
def test_fulfillment_create_stores_id_on_delivery():
    store = ShopifySettingsFactory()
    order = ShopifyOrderFactory(organization=store.organization, shopify_order_id="5001")
    delivery = DeliveryFactory(order=order)
    session = fake_session(
        fake_response(200, FULFILLMENT_ORDERS),
        fake_response(
            200,
            {
                "data": {
                    "fulfillmentCreate": {
                        "fulfillment": {"id": "gid://shopify/Fulfillment/99", "status": "SUCCESS"},
                        "userErrors": [],
                    }
                }
            },
        ),
    )

    with mock.patch("shopify_sync.client.requests.Session", return_value=session):
        result = tasks.sync_shopify_fulfillment(
            "create",
            {
                "organization_id": store.organization_id,
                "shopify_order_id": "5001",
                "tracking_number": "GHN123",
                "delivery_id": delivery.id,
            },
        )

    assert result["success"] is True
    delivery.refresh_from_db()
    assert delivery.shopify_fulfillment_id == "gid://shopify/Fulfillment/99"
    query_vars = session.request.call_args_list[0].kwargs["json"]["variables"]
    assert query_vars == {"orderId": "gid://shopify/Order/5001"}
    mutation = session.request.call_args_list[1].kwargs["json"]["variables"]["fulfillment"]
    assert mutation == {
        "lineItemsByFulfillmentOrder": [{"fulfillmentOrderId": "gid://shopify/FulfillmentOrder/1"}],
        "notifyCustomer": True,
        "trackingInfo": {"number": "GHN123"},
    }


@pytest.mark.django_db
def test_fulfillment_user_errors_are_joined():
    store = ShopifySettingsFactory()
    session = fake_session(
        fake_response(200, FULFILLMENT_ORDERS),
        fake_response(
            200,
            {"data": {"fulfillmentCreate": {"fulfillment": None, "userErrors": [{"message": "A"}, {"message": "B"}]}}},
        ),
    )
    with mock.patch("shopify_sync.client.requests.Session", return_value=session):
        result = tasks.sync_shopify_fulfillment(
            "create", {"organization_id": store.organization_id, "shopify_order_id": "5001"}
        )
    assert result == {"success": False, "fulfillment_id": None, "error": "A; B"}


@pytest.mark.django_db
def test_delivered_event_and_failures_never_raise():
    store = ShopifySettingsFactory()
    session = fake_session(
        fake_response(
            200,
            {
                "data": {
                    "fulfillmentEventCreate": {
                        "fulfillmentEvent": {"id": "gid://shopify/FulfillmentEvent/5"},
                        "userErrors": [],
                    }
                }
            },
        ),
        fake_response(401, {"errors": "Invalid API key or access token"}),
    )
    params = {"organization_id": store.organization_id, "shopify_fulfillment_id": "gid://shopify/Fulfillment/99"}
    with mock.patch("shopify_sync.client.requests.Session", return_value=session):
        delivered = tasks.sync_shopify_fulfillment("delivered", params)
        failed = tasks.sync_shopify_fulfillment("delivered", params)

    assert delivered["success"] is True
    assert session.request.call_args_list[0].kwargs["json"]["variables"] == {
        "fulfillmentEventInput": {"fulfillmentId": "gid://shopify/Fulfillment/99", "status": "DELIVERED"}
    }
    assert failed["success"] is False
    assert "401" in failed["error"]


@pytest.mark.django_db
def test_fulfillment_for_unconfigured_org_is_skipped():
    result = tasks.sync_shopify_fulfillment("create", {"organization_id": None, "shopify_order_id": "1"})
    assert result["skipped"] is True
    assert tasks.sync_shopify_fulfillment("refund", {})["success"] is False


@pytest.mark.django_db
def test_product_creation_task_reports_each_product():
    store = ShopifySettingsFactory()
    product = ProductFactory(organization=store.organization)
    session = fake_session(
        fake_response(201, {"product": {"id": 11, "variants": [{"id": 22, "inventory_item_id": 33}]}}),
        fake_response(200, {}),
    )
    with mock.patch("shopify_sync.client.requests.Session", return_value=session):
        result = tasks.create_shopify_products([product.id])

    assert result["success"] is True
    assert result["results"][0]["status"] == "success"
    assert result["inventory"][0]["status"] == "success"
    assert ShopifyProductMapping.objects.filter(product=product).exists()
