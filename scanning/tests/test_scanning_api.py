import pytest
from rest_framework.test import APIClient
from users.tests.factories import UserFactory


@pytest.fixture
def client():
    api = APIClient()
    api.force_authenticate(user=UserFactory())
    return api


@pytest.mark.django_db
def test_cart_updates_round_trip_through_the_session(client):
    resp = client.post("/api/v1/scanning/session/cart/", {"items": [{"shipment_item_id": 5}]}, format="json")
    assert resp.status_code == 200
    assert resp.json()["data"]["cart_items"] == [{"shipment_item_id": 5}]

    session = client.get("/api/v1/scanning/session/").json()["data"]
    assert session["cart_items"] == [{"shipment_item_id": 5}]


@pytest.mark.django_db
def test_bad_cart_item_is_rejected_in_envelope(client):
    resp = client.post("/api/v1/scanning/session/cart/", {"items": [{"qr_code": "X"}]}, format="json")
    assert resp.status_code == 400
    assert resp.json()["success"] is False


@pytest.mark.django_db
def test_ping_reports_device_count(client):
    resp = client.post("/api/v1/scanning/session/ping/", {"device_id": "tablet-1"}, format="json")
    assert resp.json()["data"] == {"device_count": 1}


@pytest.mark.django_db
def test_sync_rejects_bad_since(client):
    resp = client.get("/api/v1/scanning/session/sync/?since=yesterday")
    assert resp.status_code == 400
