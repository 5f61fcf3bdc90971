import pytest
from catalog.models import Product
from catalog.tests.factories import BallProductFactory, ProductFactory
from rest_framework.test import APIClient
from users.tests.factories import UserFactory


@pytest.fixture
def staff_client():
    user = UserFactory()
    client = APIClient()
    client.force_authenticate(user=user)
    return client, user


@pytest.mark.django_db
def test_product_list_requires_auth():
    resp = APIClient().get("/api/v1/products/")
    assert resp.status_code == 401


@pytest.mark.django_db
def test_product_list_search_and_type_filter(staff_client):
    client, user = staff_client
    ProductFactory(organization=user.organization, brand="Joola", model="Perseus", name="Joola Perseus")
    BallProductFactory(organization=user.organization, brand="Franklin", model="X-40", name="Franklin X-40")
    ProductFactory(brand="Other", model="Org", name="Other org product")

    resp = client.get("/api/v1/products/")
    assert resp.status_code == 200
    names = {row["name"] for row in resp.data["results"]}
    assert names == {"Joola Perseus", "Franklin X-40"}
    assert all(row["available_quantity"] == 0 for row in resp.data["results"])

    resp = client.get("/api/v1/products/?type=ball")
    assert [row["name"] for row in resp.data["results"]] == ["Franklin X-40"]

    resp = client.get("/api/v1/products/?search=perse")
    assert [row["name"] for row in resp.data["results"]] == ["Joola Perseus"]


@pytest.mark.django_db
def test_create_product_returns_envelope(staff_client):
    client, user = staff_client
    resp = client.post(
        "/api/v1/products/",
        {"name": "Selkirk Vanguard", "brand": "Selkirk", "model": "Vanguard", "product_type": "individual"},
        format="json",
    )
    assert resp.status_code == 201
    assert resp.data["success"] is True
    product = Product.objects.get(id=resp.data["data"]["id"])
    assert product.organization_id == user.organization_id
    assert product.product_type == Product.TYPE_INDIVIDUAL


@pytest.mark.django_db
def test_create_product_rejects_blank_brand(staff_client):
    client, _ = staff_client
    resp = client.post(
        "/api/v1/products/",
        {"name": "Nameless", "brand": " ", "model": "M"},
        format="json",
    )
    assert resp.status_code == 400


@pytest.mark.django_db
def test_update_price_and_missing_product(staff_client):
    client, _ = staff_client
    product = ProductFactory(price=100)

    resp = client.patch(f"/api/v1/products/{product.id}/", {"price": 150}, format="json")
    assert resp.status_code == 200
    assert resp.data["data"]["price"] == 150

    resp = client.patch("/api/v1/products/999999/", {"price": 150}, format="json")
    assert resp.status_code == 404
    assert resp.data == {"success": False, "message": "Product not found", "error": "NotFound"}
