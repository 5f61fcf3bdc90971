import factory
from catalog.tests.factories import ProductFactory
from factory.django import DjangoModelFactory
from shopify_sync.models import ShopifyProductMapping, ShopifySettings
from users.tests.factories import OrganizationFactory


class ShopifySettingsFactory(DjangoModelFactory):
    class Meta:
        model = ShopifySettings

    organization = factory.SubFactory(OrganizationFactory)
    enabled = True
    store_domain = "demo-store.myshopify.com"
    access_token = "shpat_test_token"
    location_id = "gid://shopify/Location/777"
    webhook_secret = "whsec_test"


class ShopifyProductMappingFactory(DjangoModelFactory):
    class Meta:
        model = ShopifyProductMapping

    product = factory.SubFactory(ProductFactory)
    shopify_product_id = factory.Sequence(lambda n: f"gid://shopify/Product/{100 + n}")
    shopify_variant_id = factory.Sequence(lambda n: f"gid://shopify/ProductVariant/{200 + n}")
    shopify_inventory_item_id = factory.Sequence(lambda n: f"gid://shopify/InventoryItem/{300 + n}")
