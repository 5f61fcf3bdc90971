import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("users", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="Product",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("name", models.CharField(max_length=255)),
                ("brand", models.CharField(max_length=120)),
                ("model", models.CharField(max_length=160)),
                (
                    "product_type",
                    models.CharField(
                        choices=[("general", "General"), ("individual", "Individual"), ("ball", "Ball")],
                        default="general",
                        max_length=16,
                    ),
                ),
                ("description", models.TextField(blank=True)),
                ("price", models.PositiveIntegerField(default=0, help_text="Unit price in VND")),
                ("attributes", models.JSONField(blank=True, default=dict)),
                ("is_active", models.BooleanField(db_index=True, default=True)),
                ("is_pack_product", models.BooleanField(default=False)),
                ("pack_size", models.PositiveIntegerField(blank=True, null=True)),
                (
                    "base_product",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="pack_products",
                        to="catalog.product",
                    ),
                ),
                (
                    "organization",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="products",
                        to="users.organization",
                    ),
                ),
            ],
            options={
                "ordering": ["brand", "model", "id"],
                "indexes": [
                    models.Index(fields=["brand", "model"], name="product_brand_model_idx"),
                    models.Index(fields=["product_type"], name="product_type_idx"),
                ],
                "constraints": [
                    models.UniqueConstraint(
                        condition=models.Q(("is_pack_product", True)),
                        fields=("base_product", "pack_size"),
                        name="products_base_pack_unique",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(
                            ("is_pack_product", False),
                            models.Q(("base_product__isnull", False), ("pack_size__gte", 2)),
                            _connector="OR",
                        ),
                        name="products_pack_fields_consistent",
                    ),
                ],
            },
        ),
    ]
