"""Merge policy for concurrent writes to a scanning session.

Carts merge as a set union keyed by ``shipment_item_id`` so two devices
scanning at once never drop each other's units. Customer fields are
last-write-wins per field.
"""

from datetime import datetime

from common.exceptions import ValidationFailed

CART_KEY = "shipment_item_id"


def _cart_key(item: dict) -> int:
    try:
        return int(item[CART_KEY])
    except (KeyError, TypeError, ValueError):
        raise ValidationFailed(f"Cart item is missing {CART_KEY}")


def merge_cart(current: list[dict], incoming: list[dict]) -> list[dict]:
    """Union of both carts; incoming entries replace existing ones in place."""
    merged: dict[int, dict] = {}
    for item in current or []:
        merged[_cart_key(item)] = item
    for item in incoming or []:
        merged[_cart_key(item)] = item
    return list(merged.values())


def remove_from_cart(current: list[dict], shipment_item_ids) -> list[dict]:
    drop = {int(i) for i in shipment_item_ids}
    return [item for item in current or [] if _cart_key(item) not in drop]


def merge_customer(
    current: dict, incoming: dict, stamps: dict | None = None, written_at: datetime | None = None
) -> dict:
    """Apply the non-null ``incoming`` fields.

    With ``stamps`` (field name to ISO time of its last write) and
    ``written_at``, a field whose stamp is newer than ``written_at`` keeps its
    value. Accepted fields are re-stamped in place.
    """
    merged = dict(current or {})
    for field, value in (incoming or {}).items():
        if value is None:
            continue
        if stamps is not None and written_at is not None:
            seen = stamps.get(field)
            if seen and datetime.fromisoformat(seen) > written_at:
                continue
            stamps[field] = written_at.isoformat()
        merged[field] = value
    return merged
