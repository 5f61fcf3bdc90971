import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("catalog", "0001_initial"),
        ("customer", "0001_initial"),
        ("inventory", "0001_initial"),
        ("users", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Order",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("order_number", models.CharField(max_length=32, unique=True)),
                (
                    "source",
                    models.CharField(
                        choices=[("in-store", "In store"), ("shopify", "Shopify"), ("manual", "Manual")],
                        default="in-store",
                        max_length=16,
                    ),
                ),
                ("shopify_order_id", models.CharField(blank=True, max_length=64, null=True)),
                ("shopify_order_number", models.CharField(blank=True, default="", max_length=64)),
                (
                    "customer_type",
                    models.CharField(choices=[("b2b", "B2B"), ("b2c", "B2C")], default="b2c", max_length=8),
                ),
                ("total_amount", models.PositiveBigIntegerField(default=0)),
                (
                    "payment_method",
                    models.CharField(
                        choices=[("cash", "Cash"), ("bank_transfer", "Bank transfer")], default="cash", max_length=16
                    ),
                ),
                (
                    "payment_status",
                    models.CharField(
                        choices=[
                            ("Unpaid", "Unpaid"),
                            ("Paid", "Paid"),
                            ("Cancelled", "Cancelled"),
                            ("Refunded", "Refunded"),
                        ],
                        default="Unpaid",
                        max_length=16,
                    ),
                ),
                ("payment_code", models.CharField(blank=True, default="", max_length=64)),
                (
                    "delivery_status",
                    models.CharField(
                        choices=[
                            ("processing", "Processing"),
                            ("shipped", "Shipped"),
                            ("waiting_for_delivery", "Waiting for delivery"),
                            ("delivered", "Delivered"),
                            ("failed", "Failed"),
                        ],
                        default="processing",
                        max_length=24,
                    ),
                ),
                (
                    "fulfillment_status",
                    models.CharField(
                        choices=[("pending", "Pending"), ("in_progress", "In progress"), ("fulfilled", "Fulfilled")],
                        default="fulfilled",
                        max_length=16,
                    ),
                ),
                ("notes", models.TextField(blank=True, default="")),
                (
                    "customer",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT, related_name="orders", to="customer.customer"
                    ),
                ),
                (
                    "organization",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="orders",
                        to="users.organization",
                    ),
                ),
                (
                    "processed_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="processed_orders",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "ordering": ["-created_at", "-id"],
                "indexes": [
                    models.Index(fields=["source", "fulfillment_status"], name="order_source_fulfill_idx"),
                    models.Index(fields=["delivery_status", "created_at"], name="order_delivery_created_idx"),
                ],
                "constraints": [
                    models.UniqueConstraint(
                        condition=models.Q(("shopify_order_id__isnull", False)),
                        fields=("organization", "shopify_order_id"),
                        name="orders_org_shopify_order_unique",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="OrderItem",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("quantity", models.PositiveIntegerField(default=1)),
                ("price", models.PositiveBigIntegerField(default=0)),
                ("qr_code", models.CharField(blank=True, max_length=16, null=True)),
                (
                    "fulfillment_status",
                    models.CharField(
                        choices=[("pending", "Pending"), ("fulfilled", "Fulfilled")], default="pending", max_length=16
                    ),
                ),
                ("scanned_at", models.DateTimeField(blank=True, null=True)),
                (
                    "order",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE, related_name="items", to="orders.order"
                    ),
                ),
                (
                    "product",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT, related_name="order_items", to="catalog.product"
                    ),
                ),
                (
                    "unit",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="order_items",
                        to="inventory.shipmentitem",
                    ),
                ),
            ],
            options={
                "ordering": ["id"],
                "indexes": [
                    models.Index(
                        fields=["order", "product", "fulfillment_status"], name="orderitem_pending_lookup_idx"
                    )
                ],
            },
        ),
    ]
