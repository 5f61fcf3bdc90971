"""Unit status state machine.

``UNIT_TRANSITIONS`` is the only place that decides which status a unit may
move to next. Services check preconditions with ``ensure_status`` and write
with ``transition_unit``/``transition_units``; nothing assigns
``ShipmentItem.status`` directly.
"""

from typing import Iterable

from common.choices import UnitStatus
from common.exceptions import InvalidTransition, UnitBoundToBundle
from django.utils import timezone

UNIT_TRANSITIONS: dict[str, frozenset[str]] = {
    UnitStatus.PENDING: frozenset({UnitStatus.RECEIVED}),
    UnitStatus.RECEIVED: frozenset({UnitStatus.ALLOCATED, UnitStatus.SOLD, UnitStatus.RETURNED}),
    UnitStatus.ALLOCATED: frozenset({UnitStatus.SOLD, UnitStatus.RETURNED}),
    UnitStatus.SOLD: frozenset({UnitStatus.SHIPPED, UnitStatus.RETURNED}),
    UnitStatus.SHIPPED: frozenset({UnitStatus.DELIVERED, UnitStatus.RETURNED}),
    # Re-import after a failed delivery resolution
    UnitStatus.RETURNED: frozenset({UnitStatus.RECEIVED}),
    UnitStatus.DELIVERED: frozenset(),
}

# Statuses each warehouse action accepts
SCANNABLE_INBOUND = frozenset({UnitStatus.PENDING})
SELLABLE = frozenset({UnitStatus.RECEIVED, UnitStatus.ALLOCATED})
PICKABLE = frozenset({UnitStatus.RECEIVED})
SHIPPABLE = frozenset({UnitStatus.SOLD, UnitStatus.ALLOCATED})
DELIVERABLE = frozenset({UnitStatus.SHIPPED})


def can_transition(current: str, target: str) -> bool:
    return target in UNIT_TRANSITIONS.get(current, frozenset())


def ensure_status(unit, allowed: Iterable[str], action: str | None = None) -> None:
    """Raise ``InvalidTransition`` unless ``unit.status`` is one of ``allowed``."""
    allowed = frozenset(allowed)
    if unit.status not in allowed:
        raise InvalidTransition(unit.label, unit.status, allowed, action=action)


def transition_unit(unit, target: str, *, save: bool = True, **fields):
    """Move one unit to ``target``, setting any extra ``fields`` alongside."""
    if not can_transition(unit.status, target):
        raise InvalidTransition(unit.label, unit.status, UNIT_TRANSITIONS.get(unit.status, ()), action=target)
    unit.status = target
    for name, value in fields.items():
        setattr(unit, name, value)
    if save:
        unit.save(update_fields=["status", "updated_at", *fields.keys()])
    return unit


def transition_units(units, target: str, **fields) -> int:
    """Move many units to ``target`` in one write.

    All units are checked before anything is written, so an illegal move for
    any unit leaves every unit untouched.
    """
    from .models import ShipmentItem

    units = list(units)
    for unit in units:
        if not can_transition(unit.status, target):
            raise InvalidTransition(unit.label, unit.status, UNIT_TRANSITIONS.get(unit.status, ()), action=target)
    if not units:
        return 0
    now = timezone.now()
    for unit in units:
        unit.status = target
        unit.updated_at = now
        for name, value in fields.items():
            setattr(unit, name, value)
    ShipmentItem.objects.bulk_update(units, ["status", "updated_at", *fields.keys()])
    return len(units)


def bundle_bindings(unit_ids) -> dict[int, int]:
    """Map unit id to bundle id for the given units that a bundle holds."""
    from assembly.models import AssemblyScan

    return dict(AssemblyScan.objects.filter(unit_id__in=list(unit_ids)).values_list("unit_id", "bundle_id"))


def ensure_unbound(unit, action: str | None = None) -> None:
    """Raise ``UnitBoundToBundle`` if ``unit`` has been scanned into a bundle."""
    bound = bundle_bindings([unit.id])
    if bound:
        raise UnitBoundToBundle(unit.label, bound[unit.id], action=action)
