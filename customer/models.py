"""Customer records used by in-store and Shopify orders.

Customers are keyed by phone number: every order path upserts by phone, so
the same buyer across channels resolves to one row.
"""

from django.db import models


class TimeStampedModel(models.Model):
    """Abstract base model adding created/updated timestamps."""

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True


class Customer(TimeStampedModel):
    name = models.CharField(max_length=200)
    phone = models.CharField(
        max_length=255,
        unique=True,
        help_text="Phone number; an email address stands in when no phone is known",
    )
    email = models.EmailField(blank=True, default="")
    address = models.TextField(blank=True, default="")

    class Meta:
        ordering = ["name", "id"]

    def __str__(self) -> str:  # pragma: no cover
        return f"{self.name} ({self.phone})"

    def save(self, *args, **kwargs):
        if self.phone:
            self.phone = self.phone.strip()
        if self.email:
            self.email = self.email.strip().lower()
        super().save(*args, **kwargs)
