import factory
from catalog.tests.factories import ProductFactory
from customer.tests.factories import CustomerFactory
from factory.django import DjangoModelFactory
from orders.models import Order, OrderItem


class OrderFactory(DjangoModelFactory):
    class Meta:
        model = Order

    order_number = factory.Sequence(lambda n: f"ORD-20250101-{n:04d}")
    customer = factory.SubFactory(CustomerFactory)
    source = Order.SOURCE_IN_STORE
    total_amount = 0


class ShopifyOrderFactory(OrderFactory):
    source = Order.SOURCE_SHOPIFY
    shopify_order_id = factory.Sequence(lambda n: f"{5000000 + n}")
    shopify_order_number = factory.Sequence(lambda n: f"#{1000 + n}")
    payment_method = Order.PAYMENT_BANK_TRANSFER
    payment_status = Order.PAYMENT_PAID
    fulfillment_status = Order.FULFILLMENT_PENDING


class OrderItemFactory(DjangoModelFactory):
    class Meta:
        model = OrderItem

    order = factory.SubFactory(OrderFactory)
    product = factory.SubFactory(ProductFactory)
    price = factory.LazyAttribute(lambda o: o.product.price)
