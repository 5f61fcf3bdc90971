import pytest
from catalog.tests.factories import ProductFactory
from inventory.models import ShipmentItem
from inventory.tests.factories import ShipmentItemFactory, StorageFactory
from rest_framework.test import APIClient
from users.tests.factories import UserFactory


@pytest.fixture
def client():
    c = APIClient()
    c.force_authenticate(user=UserFactory())
    return c


@pytest.mark.django_db
def test_create_shipment_endpoint_envelope(client):
    product = ProductFactory()
    resp = client.post(
        "/api/v1/shipments/",
        {
            "receipt_number": "RN-API",
            "receipt_date": "2025-03-01",
            "supplier_name": "Acme",
            "items": [{"product_id": product.id, "quantity": 2}],
        },
        format="json",
    )
    assert resp.status_code == 201
    assert resp.data["success"] is True
    assert len(resp.data["data"]["items"]) == 2

    listing = client.get("/api/v1/shipments/")
    assert listing.status_code == 200
    assert listing.data["results"][0]["unit_count"] == 2


@pytest.mark.django_db
def test_create_shipment_missing_product_is_404_envelope(client):
    resp = client.post(
        "/api/v1/shipments/",
        {
            "receipt_number": "RN-API",
            "receipt_date": "2025-03-01",
            "supplier_name": "Acme",
            "items": [{"product_id": 4242, "quantity": 1}],
        },
        format="json",
    )
    assert resp.status_code == 404
    assert resp.data["success"] is False
    assert resp.data["message"] == "Product not found: 4242"


@pytest.mark.django_db
def test_scan_endpoint_and_progress(client):
    storage = StorageFactory()
    unit = ShipmentItemFactory(qr_code="ABCD1234")

    resp = client.post("/api/v1/inventory/scan/", {"qr_code": "ABCD1234", "storage_id": storage.id}, format="json")
    assert resp.status_code == 200
    assert resp.data["data"]["qr_code"] == "ABCD1234"

    again = client.post("/api/v1/inventory/scan/", {"qr_code": "ABCD1234", "storage_id": storage.id}, format="json")
    assert again.status_code == 400
    assert "already received" in again.data["message"]

    progress = client.get(f"/api/v1/shipments/{unit.shipment_id}/progress/")
    assert progress.data == {"total": 1, "scanned": 1, "pending": 0}


@pytest.mark.django_db
def test_availability_endpoint(client):
    product = ProductFactory()
    ShipmentItemFactory(product=product, status=ShipmentItem.STATUS_RECEIVED)
    resp = client.get(f"/api/v1/inventory/availability/?product_ids={product.id}")
    assert resp.data == {str(product.id): 1}


@pytest.mark.django_db
def test_unexpected_error_reported_generically(client, monkeypatch):
    def boom(**kwargs):
        raise RuntimeError("database exploded")

    monkeypatch.setattr("inventory.services.scan_item", boom)
    resp = client.post("/api/v1/inventory/scan/", {"qr_code": "ABCD1234", "storage_id": 1}, format="json")
    assert resp.status_code == 500
    assert resp.data == {"success": False, "message": "An unexpected error occurred", "error": "internal_error"}
