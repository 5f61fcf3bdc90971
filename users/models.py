"""Organizations and warehouse staff accounts.

Every staff ``User`` may belong to one ``Organization``; the organization
scopes external integrations such as the Shopify store connection.
"""

from django.contrib.auth.models import AbstractUser
from django.core.validators import RegexValidator
from django.db import models


class Organization(models.Model):
    """A tenant operating one warehouse and, optionally, one Shopify store."""

    name = models.CharField(max_length=120)
    slug = models.SlugField(max_length=140, unique=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["name"]

    def __str__(self) -> str:  # pragma: no cover
        return self.name


class User(AbstractUser):
    """Staff account with a unique, normalized email."""

    email = models.EmailField(unique=True)
    phone = models.CharField(
        max_length=16,
        blank=True,
        validators=[RegexValidator(r"^\+?[0-9]\d{1,14}$", message="Use digits only, optionally prefixed with +")],
    )
    organization = models.ForeignKey(
        Organization, null=True, blank=True, related_name="members", on_delete=models.SET_NULL
    )

    def save(self, *args, **kwargs):
        if self.email:
            self.email = self.email.strip().lower()
        if self.phone:
            self.phone = self.phone.strip()
        super().save(*args, **kwargs)
