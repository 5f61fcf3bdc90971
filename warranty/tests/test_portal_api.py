import datetime

import pytest
from django.utils import timezone
from inventory.models import ShipmentItem
from inventory.tests.factories import ShipmentItemFactory
from rest_framework.test import APIClient
from warranty.models import OwnershipTransfer, WarrantyClaim
from warranty.tests.factories import OWNER_ID, OwnedUnitFactory
from warranty.views import SESSION_CUSTOMER_KEY

SYNC_URL = "/api/webhooks/warehouse-sync"
SECRET = "test-warehouse-secret"


def _signed_in(customer_id=OWNER_ID) -> APIClient:
    client = APIClient()
    session = client.session
    session[SESSION_CUSTOMER_KEY] = customer_id
    session.save()
    return client


@pytest.mark.django_db
def test_sync_webhook_requires_shared_secret():
    client = APIClient()
    body = {"event": "product.returned", "data": {"qrCode": "ABCD1234"}}

    assert client.post(SYNC_URL, body, format="json").status_code == 401
    resp = client.post(SYNC_URL, body, format="json", HTTP_X_WEBHOOK_SECRET="wrong")
    assert resp.status_code == 401
    assert resp.json() == {"success": False, "error": "Unauthorized"}


@pytest.mark.django_db
def test_sync_webhook_without_configured_secret_is_server_error(settings):
    settings.WAREHOUSE_WEBHOOK_SECRET = ""
    resp = APIClient().post(SYNC_URL, {"event": "product.returned", "data": {}}, format="json")
    assert resp.status_code == 500


@pytest.mark.django_db
def test_sync_webhook_applies_product_sold():
    unit = ShipmentItemFactory(status=ShipmentItem.STATUS_DELIVERED)
    body = {
        "event": "product.sold",
        "data": {
            "qrCode": unit.qr_code,
            "shopifyOrderId": None,
            "customerId": "email:buyer@example.com",
            "productDetails": {"name": "Pro Paddle", "brand": "Joola", "model": "Hyperion"},
            "purchaseDate": "2025-06-01T10:00:00Z",
            "warrantyMonths": 18,
        },
    }

    resp = APIClient().post(SYNC_URL, body, format="json", HTTP_X_WEBHOOK_SECRET=SECRET)

    assert resp.status_code == 200
    assert resp.json() == {"success": True, "productUnitId": unit.id}
    unit.refresh_from_db()
    assert unit.warranty_status == ShipmentItem.WARRANTY_ACTIVE
    assert unit.warranty_months == 18
    assert unit.current_owner_id == "email:buyer@example.com"


@pytest.mark.django_db
def test_sync_webhook_delivery_completed_reports_count():
    unit = ShipmentItemFactory(status=ShipmentItem.STATUS_DELIVERED)
    body = {
        "event": "delivery.completed",
        "data": {
            "deliveredAt": "2025-06-03T08:00:00Z",
            "customerId": "phone:0911111111",
            "items": [{"qrCode": unit.qr_code}, {"qrCode": "ZZZZ9999"}],
        },
    }
    resp = APIClient().post(SYNC_URL, body, format="json", HTTP_X_WEBHOOK_SECRET=SECRET)
    assert resp.status_code == 200
    assert resp.json() == {"success": True, "processedCount": 1}


@pytest.mark.django_db
def test_sync_webhook_rejects_invalid_payloads_and_unknown_units():
    client = APIClient()
    bad = client.post(
        SYNC_URL,
        {"event": "product.sold", "data": {"qrCode": "bad"}},
        format="json",
        HTTP_X_WEBHOOK_SECRET=SECRET,
    )
    assert bad.status_code == 400
    assert bad.json()["error"] == "Invalid payload"
    assert "details" in bad.json()

    missing = client.post(
        SYNC_URL,
        {"event": "product.returned", "data": {"qrCode": "ZZZZ9999"}},
        format="json",
        HTTP_X_WEBHOOK_SECRET=SECRET,
    )
    assert missing.status_code == 404
    assert missing.json() == {"success": False, "error": "Product not found"}


@pytest.mark.django_db
def test_verify_is_public_and_counts_scans():
    unit = OwnedUnitFactory()
    resp = APIClient().get(f"/api/products/verify/{unit.qr_code}")

    assert resp.status_code == 200
    body = resp.json()
    assert body["success"] is True
    assert body["unit"]["qr_code"] == unit.qr_code
    assert body["product"]["name"] == unit.product.name
    assert "ownership" not in body
    unit.refresh_from_db()
    assert unit.customer_scan_count == 1


@pytest.mark.django_db
def test_verify_includes_ownership_for_signed_in_owner():
    unit = OwnedUnitFactory()
    body = _signed_in().get(f"/api/products/verify/{unit.qr_code}").json()
    assert body["ownership"]["owner_id"] == OWNER_ID


@pytest.mark.django_db
def test_verify_errors():
    client = APIClient()
    assert client.get("/api/products/verify/nope").status_code == 400
    resp = client.get("/api/products/verify/ZZZZ9999")
    assert resp.status_code == 404
    assert resp.json() == {"success": False, "error": "Product not found"}


def _claim_body(qr_code, **overrides):
    body = {
        "qrCode": qr_code,
        "claimType": "defect",
        "title": "Handle loose",
        "description": "The grip came off after two sessions",
        "images": ["https://img.example.com/a.jpg"],
    }
    body.update(overrides)
    return body


@pytest.mark.django_db
def test_claim_requires_sign_in():
    unit = OwnedUnitFactory()
    resp = APIClient().post("/api/warranty/claim", _claim_body(unit.qr_code), format="json")
    assert resp.status_code == 401


@pytest.mark.django_db
def test_owner_submits_claim():
    unit = OwnedUnitFactory()
    resp = _signed_in().post("/api/warranty/claim", _claim_body(unit.qr_code), format="json")

    assert resp.status_code == 200
    body = resp.json()
    assert body["success"] is True
    claim = WarrantyClaim.objects.get(id=body["claimId"])
    assert claim.unit_id == unit.id
    assert claim.customer_id == OWNER_ID


@pytest.mark.django_db
def test_claim_validation_and_ownership():
    unit = OwnedUnitFactory()
    owner = _signed_in()

    invalid = owner.post("/api/warranty/claim", _claim_body(unit.qr_code, claimType="lost"), format="json")
    assert invalid.status_code == 400
    assert invalid.json()["error"] == "Invalid payload"

    too_long = owner.post("/api/warranty/claim", _claim_body(unit.qr_code, title="x" * 201), format="json")
    assert too_long.status_code == 400

    stranger = _signed_in("email:other@example.com")
    denied = stranger.post("/api/warranty/claim", _claim_body(unit.qr_code), format="json")
    assert denied.status_code == 403
    assert denied.json() == {"success": False, "error": "You are not the owner of this product"}


@pytest.mark.django_db
def test_claim_on_expired_warranty_is_rejected():
    unit = OwnedUnitFactory(warranty_months=1, warranty_started_at=timezone.now() - datetime.timedelta(days=90))
    resp = _signed_in().post("/api/warranty/claim", _claim_body(unit.qr_code), format="json")
    assert resp.status_code == 400
    assert resp.json() == {"success": False, "error": "Warranty has expired"}


@pytest.mark.django_db
def test_owner_transfers_product():
    unit = OwnedUnitFactory()
    resp = _signed_in().post(
        "/api/warranty/transfer",
        {"qrCode": unit.qr_code, "newOwnerEmail": "friend@example.com"},
        format="json",
    )

    assert resp.status_code == 200
    transfer = OwnershipTransfer.objects.get(id=resp.json()["transferId"])
    assert transfer.to_owner_id == "email:friend@example.com"
    unit.refresh_from_db()
    assert unit.current_owner_id == "email:friend@example.com"


@pytest.mark.django_db
def test_transfer_requires_valid_email_and_sign_in():
    unit = OwnedUnitFactory()
    body = {"qrCode": unit.qr_code, "newOwnerEmail": "not-an-email"}
    assert APIClient().post("/api/warranty/transfer", body, format="json").status_code == 401
    assert _signed_in().post("/api/warranty/transfer", body, format="json").status_code == 400
