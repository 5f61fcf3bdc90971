import factory
from assembly.models import Bundle, BundleItem
from catalog.tests.factories import ProductFactory
from common.codes import generate_short_code
from factory.django import DjangoModelFactory


class BundleFactory(DjangoModelFactory):
    class Meta:
        model = Bundle

    name = factory.Sequence(lambda n: f"Starter kit {n}")
    qr_code = factory.LazyFunction(generate_short_code)


class BundleItemFactory(DjangoModelFactory):
    class Meta:
        model = BundleItem

    bundle = factory.SubFactory(BundleFactory)
    product = factory.SubFactory(ProductFactory)
    expected_count = 1
    phase_order = factory.Sequence(lambda n: n)
