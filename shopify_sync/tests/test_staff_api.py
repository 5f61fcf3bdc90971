from unittest import mock

import pytest
from rest_framework.test import APIClient
from shopify_sync.models import ShopifyProductMapping
from shopify_sync.tests.factories import ShopifyProductMappingFactory
from users.tests.factories import UserFactory


@pytest.fixture
def client():
    api = APIClient()
    api.force_authenticate(user=UserFactory())
    return api


@pytest.mark.django_db
def test_mapping_list_filters_by_sync_status(client):
    ok = ShopifyProductMappingFactory(last_sync_status=ShopifyProductMapping.SYNC_SUCCESS)
    ShopifyProductMappingFactory(last_sync_status=ShopifyProductMapping.SYNC_ERROR, last_sync_error="boom")

    resp = client.get("/api/v1/shopify/mappings/?status=success")

    assert resp.status_code == 200
    assert resp.json()["count"] == 1
    assert resp.json()["results"][0]["product"] == ok.product_id


@pytest.mark.django_db
def test_mapping_list_requires_auth():
    assert APIClient().get("/api/v1/shopify/mappings/").status_code == 401


@pytest.mark.django_db
def test_inventory_sync_is_queued_after_commit(client, django_capture_on_commit_callbacks):
    with mock.patch("shopify_sync.tasks.sync_inventory.delay") as task:
        with django_capture_on_commit_callbacks(execute=True):
            resp = client.post("/api/v1/shopify/inventory/sync/", {"product_ids": [5, 2, 5]}, format="json")

    assert resp.status_code == 202
    assert resp.json()["data"] == {"queued": [2, 5]}
    task.assert_called_once_with([2, 5])


@pytest.mark.django_db
def test_inventory_sync_needs_product_ids(client):
    resp = client.post("/api/v1/shopify/inventory/sync/", {"product_ids": []}, format="json")
    assert resp.status_code == 400
