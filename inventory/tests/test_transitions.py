import pytest
from common.choices import UnitStatus
from common.exceptions import InvalidTransition
from inventory import transitions
from inventory.models import ShipmentItem
from inventory.tests.factories import ShipmentItemFactory

ALL = [s for s, _ in UnitStatus.choices]


@pytest.mark.parametrize(
    "current,target",
    [
        ("pending", "received"),
        ("received", "allocated"),
        ("received", "sold"),
        ("received", "returned"),
        ("allocated", "sold"),
        ("allocated", "returned"),
        ("sold", "shipped"),
        ("sold", "returned"),
        ("shipped", "delivered"),
        ("shipped", "returned"),
        ("returned", "received"),
    ],
)
def test_legal_transitions(current, target):
    assert transitions.can_transition(current, target)


def test_delivered_is_terminal():
    assert not any(transitions.can_transition("delivered", target) for target in ALL)


def test_illegal_examples():
    assert not transitions.can_transition("pending", "sold")
    assert not transitions.can_transition("received", "shipped")
    assert not transitions.can_transition("allocated", "received")
    assert not transitions.can_transition("sold", "received")


@pytest.mark.django_db
def test_ensure_status_message_names_unit_and_status():
    unit = ShipmentItemFactory(status=ShipmentItem.STATUS_SOLD, qr_code="ABCD1234")
    with pytest.raises(InvalidTransition) as exc:
        transitions.ensure_status(unit, transitions.SELLABLE, action="sale")
    message = exc.value.message
    assert "Item ABCD1234" in message
    assert "not available for sale" in message
    assert "status: sold" in message
    assert "allocated, received" in message


@pytest.mark.django_db
def test_transition_unit_persists_extra_fields():
    unit = ShipmentItemFactory()
    transitions.transition_unit(unit, ShipmentItem.STATUS_RECEIVED, is_authentic=True)
    unit.refresh_from_db()
    assert unit.status == ShipmentItem.STATUS_RECEIVED


@pytest.mark.django_db
def test_transition_units_is_all_or_nothing():
    ok = ShipmentItemFactory(status=ShipmentItem.STATUS_SOLD)
    bad = ShipmentItemFactory(status=ShipmentItem.STATUS_PENDING)
    with pytest.raises(InvalidTransition):
        transitions.transition_units([ok, bad], ShipmentItem.STATUS_SHIPPED)
    ok.refresh_from_db()
    bad.refresh_from_db()
    assert ok.status == ShipmentItem.STATUS_SOLD
    assert bad.status == ShipmentItem.STATUS_PENDING

    assert transitions.transition_units([ok], ShipmentItem.STATUS_SHIPPED) == 1
    ok.refresh_from_db()
    assert ok.status == ShipmentItem.STATUS_SHIPPED
