from datetime import datetime, timedelta, timezone

import pytest
from scanning.models import ScanningSession
from scanning.store import SessionStore
from users.tests.factories import UserFactory


class FakeClock:
    def __init__(self):
        self.now = datetime(2025, 1, 1, 9, 0, tzinfo=timezone.utc)

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += timedelta(seconds=seconds)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store(clock):
    return SessionStore(clock=clock)


@pytest.mark.django_db
def test_get_or_create_returns_one_session_per_user(store):
    user = UserFactory()
    first = store.get_or_create(user)
    second = store.get_or_create(user)
    assert first.id == second.id
    assert first.customer_info["payment_method"] == "cash"


@pytest.mark.django_db
def test_two_devices_adding_items_keep_both(store):
    user = UserFactory()
    store.update_cart(user, [{"shipment_item_id": 1}])
    store.update_cart(user, [{"shipment_item_id": 2}])
    session = store.remove_cart_items(user, [1])
    assert session.cart_items == [{"shipment_item_id": 2}]


@pytest.mark.django_db
def test_older_customer_write_loses_only_the_fields_written_since(store, clock):
    user = UserFactory()
    early = clock()
    clock.advance(5)
    store.update_customer(user, {"name": "Newer"})
    session = store.update_customer(user, {"name": "Older", "phone": "0901234567"}, written_at=early)
    assert session.customer_info["name"] == "Newer"
    assert session.customer_info["phone"] == "0901234567"


@pytest.mark.django_db
def test_cart_scan_does_not_hide_an_earlier_customer_edit(store, clock):
    user = UserFactory()
    typed_at = clock() + timedelta(seconds=2)
    clock.advance(5)
    store.update_cart(user, [{"shipment_item_id": 1}])
    seen = clock()
    clock.advance(1)

    session = store.update_customer(user, {"name": "Nguyen"}, written_at=typed_at)

    assert session.customer_info["name"] == "Nguyen"
    assert session.cart_items == [{"shipment_item_id": 1}]
    assert store.sync(user, since=seen).customer_info["name"] == "Nguyen"


@pytest.mark.django_db
def test_clear_rejects_customer_writes_from_before_it(store, clock):
    user = UserFactory()
    typed_at = clock()
    store.update_customer(user, {"name": "Nguyen"})
    clock.advance(3)
    store.clear(user)
    session = store.update_customer(user, {"name": "Nguyen"}, written_at=typed_at)
    assert session.customer_info["name"] == ""


@pytest.mark.django_db
def test_sync_returns_none_without_changes_and_pings(store, clock):
    user = UserFactory()
    assert store.sync(user) is None
    store.update_cart(user, [{"shipment_item_id": 1}])
    seen = clock()
    clock.advance(3)
    assert store.sync(user, since=seen) is None
    assert ScanningSession.objects.get(user=user).last_ping == clock()
    clock.advance(1)
    store.update_cart(user, [{"shipment_item_id": 2}])
    assert len(store.sync(user, since=seen).cart_items) == 2


@pytest.mark.django_db
def test_device_count_only_includes_recent_pings(store, clock):
    user = UserFactory()
    assert store.ping(user, "phone") == 1
    clock.advance(4)
    assert store.ping(user, "desktop") == 2
    clock.advance(8)
    # phone last pinged 12 s ago
    assert store.ping(user, "desktop") == 1


@pytest.mark.django_db
def test_clear_empties_cart_and_customer(store):
    user = UserFactory()
    store.update_cart(user, [{"shipment_item_id": 1}])
    store.update_customer(user, {"name": "A"})
    store.clear(user)
    session = ScanningSession.objects.get(user=user)
    assert session.cart_items == []
    assert session.customer_info["name"] == ""
