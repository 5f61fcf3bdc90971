import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("catalog", "0001_initial"),
        ("users", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="ShopifySettings",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("enabled", models.BooleanField(default=False)),
                ("store_domain", models.CharField(blank=True, default="", max_length=255)),
                ("access_token", models.CharField(blank=True, default="", max_length=255)),
                ("api_version", models.CharField(default="2025-04", max_length=16)),
                ("location_id", models.CharField(blank=True, default="", max_length=120)),
                ("webhook_secret", models.CharField(blank=True, default="", max_length=255)),
                ("default_warranty_months", models.PositiveIntegerField(default=12)),
                (
                    "organization",
                    models.OneToOneField(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="shopify_settings",
                        to="users.organization",
                    ),
                ),
            ],
            options={
                "verbose_name_plural": "Shopify settings",
            },
        ),
        migrations.CreateModel(
            name="ShopifyProductMapping",
            fields=[
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "product",
                    models.OneToOneField(
                        on_delete=django.db.models.deletion.CASCADE,
                        primary_key=True,
                        related_name="shopify_mapping",
                        serialize=False,
                        to="catalog.product",
                    ),
                ),
                ("shopify_product_id", models.CharField(max_length=120)),
                ("shopify_variant_id", models.CharField(max_length=120, unique=True)),
                ("shopify_inventory_item_id", models.CharField(blank=True, default="", max_length=120)),
                ("last_synced_at", models.DateTimeField(blank=True, null=True)),
                (
                    "last_sync_status",
                    models.CharField(
                        choices=[
                            ("pending", "Pending"),
                            ("success", "Success"),
                            ("error", "Error"),
                            ("skipped", "Skipped"),
                        ],
                        default="pending",
                        max_length=16,
                    ),
                ),
                ("last_sync_error", models.TextField(blank=True, default="")),
            ],
            options={
                "indexes": [models.Index(fields=["shopify_product_id"], name="mapping_shopify_product_idx")],
            },
        ),
    ]
