import pytest
from assembly import selectors, services
from assembly.models import AssemblyScan, Bundle, BundleItem
from assembly.services import AssemblyError
from catalog.tests.factories import ProductFactory
from common.codes import is_valid_short_code
from common.exceptions import InvalidTransition, NotFound, UnitBoundToBundle
from inventory.models import InventoryItem, ShipmentItem
from inventory.selectors import availability_by_product, calculate_available_quantity
from inventory.tests.factories import ReceivedUnitFactory, ShipmentItemFactory
from orders import services as order_services
from orders.services import InsufficientInventoryError
from orders.tests.factories import OrderItemFactory, ShopifyOrderFactory
from users.tests.factories import UserFactory


@pytest.fixture
def kit():
    """Two-phase bundle: two paddles, then one ball."""
    paddle = ProductFactory(name="Paddle")
    ball = ProductFactory(name="Ball")
    bundle = services.create_bundle(
        name="Starter kit",
        items=[{"product_id": paddle.id, "expected_count": 2}, {"product_id": ball.id, "expected_count": 1}],
    )
    return bundle, paddle, ball


def _start(bundle):
    return services.start_assembly_session(bundle_qr=bundle.qr_code)


@pytest.mark.django_db
def test_create_bundle_orders_phases_and_assigns_code(kit):
    bundle, paddle, ball = kit
    assert bundle.status == Bundle.STATUS_PENDING
    assert is_valid_short_code(bundle.qr_code)
    phases = list(bundle.items.order_by("phase_order").values_list("product_id", "phase_order", "expected_count"))
    assert phases == [(paddle.id, 0, 2), (ball.id, 1, 1)]


@pytest.mark.django_db
@pytest.mark.parametrize(
    "name,items",
    [("", [{"product_id": 1, "expected_count": 1}]), ("Kit", []), ("Kit", [{"product_id": 1, "expected_count": 0}])],
)
def test_create_bundle_validation(name, items):
    with pytest.raises(AssemblyError):
        services.create_bundle(name=name, items=items)
    assert Bundle.objects.count() == 0


@pytest.mark.django_db
def test_create_bundle_missing_product():
    with pytest.raises(NotFound):
        services.create_bundle(name="Kit", items=[{"product_id": 123456, "expected_count": 1}])


@pytest.mark.django_db
def test_start_session_moves_to_assembling(kit):
    bundle, _, _ = kit
    session = _start(bundle)
    bundle.refresh_from_db()
    assert bundle.status == Bundle.STATUS_ASSEMBLING
    assert bundle.assembly_started_at is not None
    assert session["current_phase"]["product_name"] == "Paddle"
    assert [p["expected_count"] for p in session["phases"]] == [2, 1]
    assert session["version"]


@pytest.mark.django_db
def test_start_session_rejects_closed_bundles(kit):
    bundle, _, _ = kit
    for status in (Bundle.STATUS_COMPLETED, Bundle.STATUS_SOLD, Bundle.STATUS_ABANDONED):
        Bundle.objects.filter(id=bundle.id).update(status=status)
        with pytest.raises(AssemblyError):
            _start(bundle)
    with pytest.raises(NotFound):
        services.start_assembly_session(bundle_qr="ZZZZ0000")


@pytest.mark.django_db
def test_scan_must_match_current_phase(kit):
    bundle, paddle, ball = kit
    _start(bundle)
    ball_unit = ReceivedUnitFactory(product=ball)

    with pytest.raises(AssemblyError) as exc:
        services.scan_assembly(bundle_id=bundle.id, code=ball_unit.qr_code)
    assert "belongs to phase 2" in exc.value.message

    stranger = ReceivedUnitFactory(product=ProductFactory(name="Net"))
    with pytest.raises(AssemblyError) as exc:
        services.scan_assembly(bundle_id=bundle.id, code=stranger.qr_code)
    assert "not part of this bundle" in exc.value.message
    assert AssemblyScan.objects.count() == 0


@pytest.mark.django_db
def test_scan_requires_received_unused_unit(kit):
    bundle, paddle, _ = kit
    _start(bundle)
    pending = ShipmentItemFactory(product=paddle)
    with pytest.raises(InvalidTransition):
        services.scan_assembly(bundle_id=bundle.id, code=pending.qr_code)

    unit = ReceivedUnitFactory(product=paddle)
    services.scan_assembly(bundle_id=bundle.id, code=unit.qr_code)
    with pytest.raises(AssemblyError) as exc:
        services.scan_assembly(bundle_id=bundle.id, code=unit.qr_code)
    assert "already been used" in exc.value.message


@pytest.mark.django_db
def test_phase_gating_and_full_flow(kit):
    bundle, paddle, ball = kit
    user = UserFactory()
    _start(bundle)
    paddles = [ReceivedUnitFactory(product=paddle) for _ in range(3)]
    ball_unit = ReceivedUnitFactory(product=ball)

    first = services.scan_assembly(bundle_id=bundle.id, code=paddles[0].qr_code)
    assert (first["scanned_count"], first["expected_count"], first["is_phase_complete"]) == (1, 2, False)

    # Cannot advance an incomplete phase
    with pytest.raises(AssemblyError):
        services.confirm_phase_transition(bundle_id=bundle.id)

    second = services.scan_assembly(bundle_id=bundle.id, code=paddles[1].qr_code)
    assert second["is_phase_complete"] is True
    assert second["is_all_complete"] is False

    # Full phase refuses more scans and does not overshoot
    with pytest.raises(AssemblyError):
        services.scan_assembly(bundle_id=bundle.id, code=paddles[2].qr_code)
    assert BundleItem.objects.get(bundle=bundle, phase_order=0).scanned_count == 2

    # Cannot complete before the last phase is done
    with pytest.raises(AssemblyError):
        services.complete_assembly(bundle_id=bundle.id, user=user)

    assert services.confirm_phase_transition(bundle_id=bundle.id) == {"is_complete": False, "current_phase_index": 1}
    last = services.scan_assembly(bundle_id=bundle.id, code=ball_unit.qr_code)
    assert last["is_all_complete"] is True
    assert services.confirm_phase_transition(bundle_id=bundle.id) == {"is_complete": True, "current_phase_index": 1}

    result = services.complete_assembly(bundle_id=bundle.id, user=user)
    assert result["items_created"] == 3

    bundle.refresh_from_db()
    assert bundle.status == Bundle.STATUS_COMPLETED
    assert bundle.assembled_by_id == user.id
    assert bundle.assembly_completed_at is not None

    consumed = ShipmentItem.objects.filter(id__in=[paddles[0].id, paddles[1].id, ball_unit.id])
    assert set(consumed.values_list("status", flat=True)) == {ShipmentItem.STATUS_SOLD}
    paddles[2].refresh_from_db()
    assert paddles[2].status == ShipmentItem.STATUS_RECEIVED

    outputs = InventoryItem.objects.filter(bundle=bundle)
    assert outputs.count() == 3
    assert set(outputs.values_list("source_type", flat=True)) == {InventoryItem.SOURCE_ASSEMBLY}
    assert set(outputs.values_list("status", flat=True)) == {InventoryItem.STATUS_IN_STOCK}
    consumed_codes = set(consumed.values_list("qr_code", flat=True))
    assert not consumed_codes & set(outputs.values_list("qr_code", flat=True))


@pytest.mark.django_db
def test_abandon_releases_scans(kit):
    bundle, paddle, _ = kit
    _start(bundle)
    unit = ReceivedUnitFactory(product=paddle)
    services.scan_assembly(bundle_id=bundle.id, code=unit.qr_code)

    services.abandon_bundle(bundle_id=bundle.id)
    bundle.refresh_from_db()
    assert bundle.status == Bundle.STATUS_ABANDONED
    assert AssemblyScan.objects.filter(unit=unit).count() == 0
    assert list(bundle.items.values_list("scanned_count", flat=True)) == [0, 0]
    unit.refresh_from_db()
    assert unit.status == ShipmentItem.STATUS_RECEIVED

    with pytest.raises(AssemblyError):
        services.abandon_bundle(bundle_id=bundle.id)


@pytest.mark.django_db
def test_delete_only_pending(kit):
    bundle, _, _ = kit
    _start(bundle)
    with pytest.raises(AssemblyError):
        services.delete_bundle(bundle_id=bundle.id)

    other = services.create_bundle(name="Other", items=[{"product_id": ProductFactory().id, "expected_count": 1}])
    services.delete_bundle(bundle_id=other.id)
    assert not Bundle.objects.filter(id=other.id).exists()


@pytest.mark.django_db
def test_selectors_list_and_detail(kit):
    bundle, paddle, _ = kit
    _start(bundle)
    services.scan_assembly(bundle_id=bundle.id, code=ReceivedUnitFactory(product=paddle).qr_code)

    row = selectors.list_bundles(status=Bundle.STATUS_ASSEMBLING).get(id=bundle.id)
    assert (row.expected_total, row.scanned_total) == (3, 1)
    assert selectors.list_bundles(search="starter").filter(id=bundle.id).exists()

    detail = selectors.get_bundle_detail(bundle.id)
    assert len(detail["scans"]) == 1
    assert detail["phases"][0]["scanned_count"] == 1


@pytest.fixture
def bound_unit(kit):
    bundle, paddle, _ = kit
    _start(bundle)
    unit = ReceivedUnitFactory(product=paddle)
    services.scan_assembly(bundle_id=bundle.id, code=unit.qr_code)
    return bundle, unit


@pytest.mark.django_db
def test_bound_unit_is_not_available_stock(bound_unit):
    bundle, unit = bound_unit
    ReceivedUnitFactory(product=unit.product)

    assert calculate_available_quantity(unit.product_id) == 1
    assert availability_by_product([unit.product_id]) == {unit.product_id: 1}
    with pytest.raises(InsufficientInventoryError):
        order_services.validate_inventory_availability([{"sku": str(unit.product_id), "quantity": 2}])

    services.abandon_bundle(bundle_id=bundle.id)
    assert calculate_available_quantity(unit.product_id) == 2


@pytest.mark.django_db
def test_bound_unit_cannot_be_sold_in_store(bound_unit):
    bundle, unit = bound_unit
    with pytest.raises(UnitBoundToBundle) as exc:
        order_services.validate_item_for_sale(unit.qr_code)
    assert exc.value.status_code == 409
    assert exc.value.bundle_id == bundle.id

    with pytest.raises(UnitBoundToBundle):
        order_services.process_outbound_order(
            user=UserFactory(),
            cart_items=[{"shipment_item_id": unit.id}],
            customer_info={"name": "Tran Thi B", "phone": "0901234567"},
        )
    unit.refresh_from_db()
    assert unit.status == ShipmentItem.STATUS_RECEIVED


@pytest.mark.django_db
def test_bound_unit_cannot_fulfill_shopify_order(bound_unit):
    _, unit = bound_unit
    order = ShopifyOrderFactory()
    item = OrderItemFactory(order=order, product=unit.product)

    with pytest.raises(UnitBoundToBundle):
        order_services.scan_and_fulfill_item(order_id=order.id, qr_code=unit.qr_code)
    item.refresh_from_db()
    assert item.unit_id is None
    unit.refresh_from_db()
    assert unit.status == ShipmentItem.STATUS_RECEIVED


@pytest.mark.django_db
def test_bundle_completes_after_rejected_sale(bound_unit):
    bundle, unit = bound_unit
    with pytest.raises(UnitBoundToBundle):
        order_services.validate_item_for_sale(unit.qr_code)

    paddle_two = ReceivedUnitFactory(product=unit.product)
    services.scan_assembly(bundle_id=bundle.id, code=paddle_two.qr_code)
    services.confirm_phase_transition(bundle_id=bundle.id)
    ball = bundle.items.get(phase_order=1).product
    services.scan_assembly(bundle_id=bundle.id, code=ReceivedUnitFactory(product=ball).qr_code)

    assert services.complete_assembly(bundle_id=bundle.id)["items_created"] == 3
