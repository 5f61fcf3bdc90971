from datetime import datetime, timedelta, timezone

import pytest
from common.exceptions import ValidationFailed
from scanning.merge import merge_cart, merge_customer, remove_from_cart


def test_cart_merge_is_a_union_keyed_by_unit():
    phone = [{"shipment_item_id": 1, "qr_code": "AAAA1111"}, {"shipment_item_id": 2, "qr_code": "AAAA2222"}]
    desktop = [{"shipment_item_id": 3, "qr_code": "AAAA3333"}]
    merged = merge_cart(phone, desktop)
    assert [item["shipment_item_id"] for item in merged] == [1, 2, 3]


def test_incoming_entry_replaces_existing_in_place():
    current = [{"shipment_item_id": 1, "price": 100}, {"shipment_item_id": 2, "price": 200}]
    merged = merge_cart(current, [{"shipment_item_id": "1", "price": 150}])
    assert merged == [{"shipment_item_id": "1", "price": 150}, {"shipment_item_id": 2, "price": 200}]


def test_merge_is_idempotent():
    cart = [{"shipment_item_id": 7}]
    assert merge_cart(merge_cart([], cart), cart) == cart


def test_cart_items_need_a_unit_id():
    with pytest.raises(ValidationFailed):
        merge_cart([], [{"qr_code": "AAAA1111"}])


def test_remove_from_cart():
    cart = [{"shipment_item_id": 1}, {"shipment_item_id": 2}]
    assert remove_from_cart(cart, ["2"]) == [{"shipment_item_id": 1}]


def test_customer_merge_is_last_write_wins_per_field():
    current = {"name": "Old", "phone": "0901", "address": "A"}
    merged = merge_customer(current, {"name": "New", "address": None})
    assert merged == {"name": "New", "phone": "0901", "address": "A"}


def test_customer_merge_keeps_fields_stamped_after_the_write():
    written = datetime(2025, 1, 1, 9, 0, tzinfo=timezone.utc)
    stamps = {"name": (written + timedelta(seconds=1)).isoformat()}
    merged = merge_customer({"name": "Kept", "phone": ""}, {"name": "Lost", "phone": "0901"}, stamps, written)
    assert merged == {"name": "Kept", "phone": "0901"}
    assert stamps["phone"] == written.isoformat()
