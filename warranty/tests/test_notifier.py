from unittest import mock

import pytest
import requests
from deliveries import services as delivery_services
from deliveries.models import Delivery
from inventory.models import ShipmentItem
from inventory.tests.factories import ReceivedUnitFactory
from orders.tests.factories import OrderFactory, OrderItemFactory
from warranty import tasks
from warranty.notifier import queue_portal_event


@pytest.mark.django_db
def test_event_is_queued_after_commit(django_capture_on_commit_callbacks):
    with mock.patch("warranty.tasks.notify_portal_event.delay") as task:
        with django_capture_on_commit_callbacks() as callbacks:
            queue_portal_event("product.returned", {"qrCode": "ABCD1234"})
        task.assert_not_called()
        for callback in callbacks:
            callback()
    task.assert_called_once_with("product.returned", {"qrCode": "ABCD1234"})


@pytest.mark.django_db
def test_enqueue_failure_is_logged(django_capture_on_commit_callbacks, caplog):
    with mock.patch("warranty.tasks.notify_portal_event.delay", side_effect=ConnectionError("broker down")):
        with django_capture_on_commit_callbacks(execute=True):
            queue_portal_event("product.returned", {"qrCode": "ABCD1234"})
    assert "warranty.enqueue_failed" in caplog.text


def test_task_skips_without_portal_url(settings):
    settings.PORTAL_WEBHOOK_URL = ""
    with mock.patch("warranty.tasks.requests.post") as post:
        result = tasks.notify_portal_event("product.sold", {})
    post.assert_not_called()
    assert result == {"success": False, "skipped": True, "event": "product.sold"}


def test_task_posts_event_with_shared_secret(settings):
    settings.PORTAL_WEBHOOK_URL = "https://portal.example.com/api/webhooks/warehouse-sync"
    settings.PORTAL_WEBHOOK_SECRET = "s3cret"
    response = mock.Mock(ok=True, status_code=200)
    with mock.patch("warranty.tasks.requests.post", return_value=response) as post:
        result = tasks.notify_portal_event("product.replaced", {"qrCode": "ABCD1234"})

    assert result["success"] is True
    post.assert_called_once_with(
        "https://portal.example.com/api/webhooks/warehouse-sync",
        json={"event": "product.replaced", "data": {"qrCode": "ABCD1234"}},
        headers={"X-Webhook-Secret": "s3cret"},
        timeout=settings.PORTAL_WEBHOOK_TIMEOUT,
    )


@pytest.mark.parametrize(
    "outcome,expected",
    [
        ({"side_effect": requests.ConnectionError("refused")}, {"error": "refused"}),
        ({"return_value": mock.Mock(ok=False, status_code=503)}, {"status": 503}),
    ],
)
def test_task_reports_delivery_failures(settings, outcome, expected):
    settings.PORTAL_WEBHOOK_URL = "https://portal.example.com/api/webhooks/warehouse-sync"
    with mock.patch("warranty.tasks.requests.post", **outcome):
        result = tasks.notify_portal_event("product.sold", {})
    assert result["success"] is False
    for key, value in expected.items():
        assert result[key] == value


@pytest.mark.django_db
def test_delivered_order_notifies_portal_per_unit(django_capture_on_commit_callbacks):
    order = OrderFactory(customer__email="Buyer@Example.com")
    unit = ReceivedUnitFactory(status=ShipmentItem.STATUS_SOLD, warranty_months=24)
    OrderItemFactory(order=order, product=unit.product, unit=unit, qr_code=unit.qr_code)
    delivery = delivery_services.mark_order_shipped(order_id=order.id, shipper_name="GHN")

    with mock.patch("warranty.tasks.notify_portal_event.delay") as task:
        with django_capture_on_commit_callbacks(execute=True):
            delivery_services.update_delivery_status(delivery_id=delivery.id, status=Delivery.STATUS_DELIVERED)

    task.assert_called_once()
    event, data = task.call_args.args
    assert event == "product.sold"
    assert data["qrCode"] == unit.qr_code
    assert data["customerId"] == "email:buyer@example.com"
    assert data["warrantyMonths"] == 24
    assert data["productDetails"]["name"] == unit.product.name
