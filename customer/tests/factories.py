import factory
from customer.models import Customer
from factory.django import DjangoModelFactory


class CustomerFactory(DjangoModelFactory):
    class Meta:
        model = Customer

    name = factory.Faker("name")
    phone = factory.Sequence(lambda n: f"09{n:08d}")
    email = factory.Faker("email")
    address = factory.Faker("address")
