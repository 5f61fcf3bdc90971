import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("inventory", "0001_initial"),
        ("orders", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Delivery",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("shipper_name", models.CharField(max_length=120)),
                ("shipper_phone", models.CharField(blank=True, default="", max_length=32)),
                ("tracking_number", models.CharField(blank=True, default="", max_length=120)),
                ("shopify_fulfillment_id", models.CharField(blank=True, default="", max_length=120)),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("waiting_for_delivery", "Waiting for delivery"),
                            ("delivered", "Delivered"),
                            ("failed", "Failed"),
                            ("cancelled", "Cancelled"),
                        ],
                        default="waiting_for_delivery",
                        max_length=24,
                    ),
                ),
                ("delivered_at", models.DateTimeField(blank=True, null=True)),
                ("failure_reason", models.TextField(blank=True, default="")),
                (
                    "failure_category",
                    models.CharField(
                        blank=True,
                        choices=[
                            ("customer_unavailable", "Customer unavailable"),
                            ("wrong_address", "Wrong address"),
                            ("damaged_package", "Damaged package"),
                            ("refused_delivery", "Refused delivery"),
                        ],
                        default="",
                        max_length=32,
                    ),
                ),
                ("notes", models.TextField(blank=True, default="")),
                (
                    "confirmed_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="confirmed_deliveries",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "order",
                    models.OneToOneField(
                        on_delete=django.db.models.deletion.CASCADE, related_name="delivery", to="orders.order"
                    ),
                ),
            ],
            options={
                "ordering": ["-created_at", "-id"],
                "indexes": [models.Index(fields=["status", "created_at"], name="delivery_status_created_idx")],
            },
        ),
        migrations.CreateModel(
            name="DeliveryHistory",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("from_status", models.CharField(blank=True, default="", max_length=48)),
                ("to_status", models.CharField(max_length=48)),
                ("notes", models.TextField(blank=True, default="")),
                (
                    "changed_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="+",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "delivery",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE, related_name="history", to="deliveries.delivery"
                    ),
                ),
            ],
            options={
                "ordering": ["created_at", "id"],
            },
        ),
        migrations.CreateModel(
            name="DeliveryResolution",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "resolution_type",
                    models.CharField(
                        choices=[
                            ("re_import", "Re-import to storage"),
                            ("return_to_supplier", "Return to supplier"),
                            ("retry_delivery", "Retry delivery"),
                        ],
                        max_length=24,
                    ),
                ),
                (
                    "resolution_status",
                    models.CharField(
                        choices=[("pending", "Pending"), ("in_progress", "In progress"), ("completed", "Completed")],
                        default="pending",
                        max_length=16,
                    ),
                ),
                ("supplier_return_reason", models.TextField(blank=True, default="")),
                ("scheduled_date", models.DateField(blank=True, null=True)),
                ("completed_at", models.DateTimeField(blank=True, null=True)),
                ("notes", models.TextField(blank=True, default="")),
                (
                    "delivery",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="resolutions",
                        to="deliveries.delivery",
                    ),
                ),
                (
                    "processed_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="+",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "target_storage",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="resolutions",
                        to="inventory.storage",
                    ),
                ),
            ],
            options={
                "ordering": ["-created_at", "-id"],
                "constraints": [
                    models.UniqueConstraint(
                        condition=models.Q(("resolution_status__in", ["pending", "in_progress"])),
                        fields=("delivery",),
                        name="delivery_one_open_resolution",
                    ),
                ],
            },
        ),
    ]
