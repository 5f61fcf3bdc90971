import threading
from typing import List

import pytest
from catalog.models import Product
from catalog.services import find_or_create_pack_product
from catalog.tests.factories import BallProductFactory, ProductFactory
from common.exceptions import ValidationFailed
from django.db import IntegrityError, close_old_connections, connection, transaction


@pytest.mark.django_db
def test_pack_product_created_once_and_reused():
    base = BallProductFactory(brand="Franklin", model="X-40", price=40000)

    pack, created = find_or_create_pack_product(base_product=base, pack_size=3)
    assert created is True
    assert pack.is_pack_product
    assert pack.base_product_id == base.id
    assert pack.pack_size == 3
    assert pack.model == "X-40 3-Pack"
    assert pack.price == 120000

    again, created_again = find_or_create_pack_product(base_product=base, pack_size=3)
    assert created_again is False
    assert again.id == pack.id
    assert Product.objects.filter(base_product=base, pack_size=3).count() == 1


@pytest.mark.django_db
def test_distinct_pack_sizes_are_distinct_products():
    base = BallProductFactory()
    three, _ = find_or_create_pack_product(base_product=base, pack_size=3)
    six, _ = find_or_create_pack_product(base_product=base, pack_size=6)
    assert three.id != six.id
    assert list(base.pack_products.order_by("pack_size").values_list("pack_size", flat=True)) == [3, 6]


@pytest.mark.django_db
def test_pack_size_below_two_rejected():
    base = BallProductFactory()
    with pytest.raises(ValidationFailed):
        find_or_create_pack_product(base_product=base, pack_size=1)


@pytest.mark.django_db
def test_cannot_pack_a_pack_product():
    base = BallProductFactory()
    pack, _ = find_or_create_pack_product(base_product=base, pack_size=3)
    with pytest.raises(ValidationFailed):
        find_or_create_pack_product(base_product=pack, pack_size=2)


@pytest.mark.django_db
def test_duplicate_pack_row_violates_constraint():
    base = BallProductFactory()
    find_or_create_pack_product(base_product=base, pack_size=4)
    with pytest.raises(IntegrityError):
        with transaction.atomic():
            ProductFactory(is_pack_product=True, base_product=base, pack_size=4, product_type=Product.TYPE_BALL)


@pytest.mark.django_db
def test_pack_row_requires_base_and_size():
    with pytest.raises(IntegrityError):
        with transaction.atomic():
            ProductFactory(is_pack_product=True, base_product=None, pack_size=None)


def _pack_worker(barrier: threading.Barrier, base_id: int, results: List[int], errors: List[Exception]):
    close_old_connections()
    barrier.wait()
    try:
        with transaction.atomic():
            base = Product.objects.get(id=base_id)
            pack, _ = find_or_create_pack_product(base_product=base, pack_size=3)
        results.append(pack.id)
    except Exception as exc:  # pragma: no cover
        errors.append(exc)
    finally:
        connection.close()


@pytest.mark.django_db(transaction=True)
def test_concurrent_pack_resolution_yields_single_row():
    if connection.vendor == "sqlite":
        pytest.skip("SQLite lacks real concurrent transactions; skipping threaded test.")
    base = BallProductFactory()

    barrier = threading.Barrier(4)
    results: List[int] = []
    errors: List[Exception] = []
    threads = [threading.Thread(target=_pack_worker, args=(barrier, base.id, results, errors)) for _ in range(4)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert errors == []
    assert len(set(results)) == 1
    assert Product.objects.filter(base_product=base, pack_size=3, is_pack_product=True).count() == 1
