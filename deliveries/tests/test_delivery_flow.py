from unittest import mock

import pytest
from common.exceptions import ConflictError, ValidationFailed
from deliveries import selectors, services
from deliveries.models import Delivery, DeliveryResolution
from deliveries.services import DeliveryError
from inventory.models import ShipmentItem
from inventory.tests.factories import ReceivedUnitFactory, StorageFactory
from orders.models import Order
from orders.tests.factories import OrderFactory, OrderItemFactory, ShopifyOrderFactory
from users.tests.factories import UserFactory


def _sold_order(unit_count=2, **order_kwargs):
    order = OrderFactory(total_amount=500000, **order_kwargs)
    units = []
    for _ in range(unit_count):
        unit = ReceivedUnitFactory(status=ShipmentItem.STATUS_SOLD)
        OrderItemFactory(order=order, product=unit.product, unit=unit, qr_code=unit.qr_code)
        units.append(unit)
    return order, units


def _statuses(units):
    return {u.status for u in ShipmentItem.objects.filter(id__in=[u.id for u in units])}


@pytest.mark.django_db
def test_mark_shipped_moves_units_and_records_history():
    order, units = _sold_order()
    delivery = services.mark_order_shipped(order_id=order.id, shipper_name="GHN", user=UserFactory())

    order.refresh_from_db()
    assert order.delivery_status == Order.DELIVERY_WAITING
    assert _statuses(units) == {ShipmentItem.STATUS_SHIPPED}
    assert delivery.status == Delivery.STATUS_WAITING
    assert [h["to_status"] for h in selectors.delivery_history(delivery.id)] == [Delivery.STATUS_WAITING]


@pytest.mark.django_db
def test_allocated_units_pass_through_sold_when_shipped():
    order = ShopifyOrderFactory(fulfillment_status=Order.FULFILLMENT_FULFILLED)
    unit = ReceivedUnitFactory(status=ShipmentItem.STATUS_ALLOCATED)
    OrderItemFactory(order=order, product=unit.product, unit=unit)
    services.mark_order_shipped(order_id=order.id, shipper_name="GHN")
    unit.refresh_from_db()
    assert unit.status == ShipmentItem.STATUS_SHIPPED


@pytest.mark.django_db
def test_shopify_order_queues_fulfillment_after_commit(django_capture_on_commit_callbacks):
    order = ShopifyOrderFactory(fulfillment_status=Order.FULFILLMENT_FULFILLED)

    with mock.patch("shopify_sync.tasks.sync_shopify_fulfillment.delay") as task:
        with django_capture_on_commit_callbacks(execute=True):
            delivery = services.mark_order_shipped(order_id=order.id, shipper_name="GHN", tracking_number="T1")

    task.assert_called_once_with(
        "create",
        {
            "organization_id": order.organization_id,
            "shopify_order_id": order.shopify_order_id,
            "tracking_number": "T1",
            "delivery_id": delivery.id,
        },
    )


@pytest.mark.django_db
def test_second_delivery_and_unfulfilled_orders_are_rejected():
    order, _ = _sold_order()
    services.mark_order_shipped(order_id=order.id, shipper_name="GHN")
    with pytest.raises(DeliveryError):
        services.mark_order_shipped(order_id=order.id, shipper_name="GHN")

    pending = ShopifyOrderFactory()
    OrderItemFactory(order=pending)
    with pytest.raises(DeliveryError):
        services.mark_order_shipped(order_id=pending.id, shipper_name="GHN")


@pytest.mark.django_db
def test_delivered_sets_units_delivered():
    order, units = _sold_order()
    delivery = services.mark_order_shipped(order_id=order.id, shipper_name="GHN")

    services.update_delivery_status(delivery_id=delivery.id, status=Delivery.STATUS_DELIVERED)

    delivery.refresh_from_db()
    order.refresh_from_db()
    assert delivery.delivered_at is not None
    assert order.delivery_status == Order.DELIVERY_DELIVERED
    assert _statuses(units) == {ShipmentItem.STATUS_DELIVERED}
    assert ShipmentItem.objects.filter(delivered_at__isnull=True, id__in=[u.id for u in units]).count() == 0


@pytest.mark.django_db
def test_failed_needs_a_category_and_final_statuses_are_final():
    order, _ = _sold_order()
    delivery = services.mark_order_shipped(order_id=order.id, shipper_name="GHN")
    with pytest.raises(ValidationFailed):
        services.update_delivery_status(delivery_id=delivery.id, status=Delivery.STATUS_FAILED)

    services.update_delivery_status(
        delivery_id=delivery.id, status=Delivery.STATUS_FAILED, failure_category="wrong_address"
    )
    with pytest.raises(DeliveryError):
        services.update_delivery_status(delivery_id=delivery.id, status=Delivery.STATUS_DELIVERED)


def _failed_delivery(unit_count=2):
    order, units = _sold_order(unit_count)
    delivery = services.mark_order_shipped(order_id=order.id, shipper_name="GHN")
    services.update_delivery_status(
        delivery_id=delivery.id, status=Delivery.STATUS_FAILED, failure_category="customer_unavailable"
    )
    return delivery, units


@pytest.mark.django_db
def test_resolution_only_for_failed_deliveries():
    order, _ = _sold_order()
    delivery = services.mark_order_shipped(order_id=order.id, shipper_name="GHN")
    with pytest.raises(DeliveryError):
        services.create_failure_resolution(delivery_id=delivery.id, resolution_type="re_import")


@pytest.mark.django_db
def test_re_import_returns_units_to_stock_in_target_storage():
    delivery, units = _failed_delivery()
    storage = StorageFactory(capacity=10, used_capacity=3)
    resolution = services.create_failure_resolution(
        delivery_id=delivery.id, resolution_type="re_import", target_storage_id=storage.id
    )
    assert resolution.resolution_status == DeliveryResolution.STATUS_PENDING

    services.process_resolution(resolution_id=resolution.id, status="in_progress")
    services.process_resolution(resolution_id=resolution.id, status="completed")

    storage.refresh_from_db()
    assert _statuses(units) == {ShipmentItem.STATUS_RECEIVED}
    assert set(ShipmentItem.objects.filter(id__in=[u.id for u in units]).values_list("storage_id", flat=True)) == {
        storage.id
    }
    assert storage.used_capacity == 5


@pytest.mark.django_db
def test_retry_delivery_puts_delivery_back_on_the_road():
    delivery, _ = _failed_delivery()
    resolution = services.create_failure_resolution(delivery_id=delivery.id, resolution_type="retry_delivery")
    services.process_resolution(resolution_id=resolution.id, status="completed")

    delivery.refresh_from_db()
    assert delivery.status == Delivery.STATUS_WAITING
    assert delivery.failure_category == ""
    assert delivery.order.delivery_status == Order.DELIVERY_WAITING
    history = [h["to_status"] for h in selectors.delivery_history(delivery.id)]
    assert history[-2:] == [Delivery.STATUS_WAITING, "resolution_completed"]


@pytest.mark.django_db
def test_return_to_supplier_marks_units_returned():
    delivery, units = _failed_delivery(1)
    resolution = services.create_failure_resolution(
        delivery_id=delivery.id, resolution_type="return_to_supplier", supplier_return_reason="Damaged"
    )
    services.process_resolution(resolution_id=resolution.id, status="completed")
    assert _statuses(units) == {ShipmentItem.STATUS_RETURNED}


@pytest.mark.django_db
def test_completed_resolution_cannot_move_again():
    delivery, _ = _failed_delivery(1)
    resolution = services.create_failure_resolution(delivery_id=delivery.id, resolution_type="return_to_supplier")
    services.process_resolution(resolution_id=resolution.id, status="completed")
    with pytest.raises(DeliveryError):
        services.process_resolution(resolution_id=resolution.id, status="in_progress")


@pytest.mark.django_db
def test_delivery_stats():
    delivered_order, _ = _sold_order(1)
    delivery = services.mark_order_shipped(order_id=delivered_order.id, shipper_name="GHN")
    services.update_delivery_status(delivery_id=delivery.id, status=Delivery.STATUS_DELIVERED)
    failed, _ = _failed_delivery(1)
    services.create_failure_resolution(delivery_id=failed.id, resolution_type="re_import")

    stats = selectors.delivery_stats()

    assert stats["total_deliveries"] == 2
    assert stats["today_deliveries"] == 2
    assert stats["delivered_count"] == 1
    assert stats["failed_count"] == 1
    assert stats["total_delivered_value"] == 500000
    assert stats["total_failed_value"] == 500000
    assert stats["pending_resolution_count"] == 1
    assert stats["resolutions"]["re_importing_count"] == 1


@pytest.mark.django_db
def test_only_one_open_resolution_per_delivery():
    delivery, _ = _failed_delivery(1)
    first = services.create_failure_resolution(delivery_id=delivery.id, resolution_type="retry_delivery")
    services.process_resolution(resolution_id=first.id, status="in_progress")

    with pytest.raises(ConflictError):
        services.create_failure_resolution(delivery_id=delivery.id, resolution_type="re_import")
    assert delivery.resolutions.count() == 1


@pytest.mark.django_db
def test_settled_units_cannot_be_resolved_twice():
    delivery, units = _failed_delivery(1)
    storage = StorageFactory(capacity=10, used_capacity=0)
    first = services.create_failure_resolution(
        delivery_id=delivery.id, resolution_type="re_import", target_storage_id=storage.id
    )
    services.process_resolution(resolution_id=first.id, status="completed")

    with pytest.raises(ConflictError):
        services.create_failure_resolution(
            delivery_id=delivery.id, resolution_type="re_import", target_storage_id=storage.id
        )
    storage.refresh_from_db()
    assert storage.used_capacity == 1
    assert _statuses(units) == {ShipmentItem.STATUS_RECEIVED}


@pytest.mark.django_db
def test_resolution_left_open_after_retry_cannot_complete():
    delivery, units = _failed_delivery(1)
    retry = services.create_failure_resolution(delivery_id=delivery.id, resolution_type="retry_delivery")
    services.process_resolution(resolution_id=retry.id, status="completed")
    # Written directly, as an admin edit would
    stale = DeliveryResolution.objects.create(delivery=delivery, resolution_type=DeliveryResolution.TYPE_RE_IMPORT)

    with pytest.raises(DeliveryError):
        services.process_resolution(resolution_id=stale.id, status="completed")

    delivery.refresh_from_db()
    assert delivery.status == Delivery.STATUS_WAITING
    assert _statuses(units) == {ShipmentItem.STATUS_SHIPPED}
