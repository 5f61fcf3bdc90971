"""Customer domain services.

Keep business rules here and keep views thin.
"""

import logging

from common.exceptions import ValidationFailed
from django.db import IntegrityError, transaction

from .models import Customer

logger = logging.getLogger(__name__)


def normalize_phone(phone: str | None) -> str:
    return "".join((phone or "").split())


@transaction.atomic
def upsert_customer(*, name: str, phone: str | None, email: str | None = None, address: str | None = None) -> Customer:
    """Find a customer by phone and refresh their details, or create one.

    When no phone is known the email address is used as the lookup key. A
    blank name never replaces a stored one.
    """
    key = normalize_phone(phone) or (email or "").strip().lower()
    if not key:
        raise ValidationFailed("Customer phone or email is required")
    name = (name or "").strip()

    customer = Customer.objects.select_for_update().filter(phone=key).first()
    if customer is None:
        try:
            with transaction.atomic():
                customer = Customer.objects.create(
                    name=name or key, phone=key, email=(email or "").strip(), address=address or ""
                )
        except IntegrityError:
            customer = Customer.objects.select_for_update().get(phone=key)
        else:
            logger.info("customer.created", extra={"event": "customer.created", "customer_id": customer.id})
            return customer

    fields = ["updated_at"]
    if name:
        customer.name = name
        fields.append("name")
    if address:
        customer.address = address
        fields.append("address")
    if email and not customer.email:
        customer.email = email.strip()
        fields.append("email")
    customer.save(update_fields=fields)
    return customer
