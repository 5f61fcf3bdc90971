import django.db.models.deletion
import django.utils.timezone
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("inventory", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="CustomerScan",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("qr_code", models.CharField(db_index=True, max_length=16)),
                ("customer_id", models.CharField(blank=True, default="", max_length=255)),
                ("scanned_at", models.DateTimeField(default=django.utils.timezone.now)),
                (
                    "unit",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="customer_scans",
                        to="inventory.shipmentitem",
                    ),
                ),
            ],
            options={
                "ordering": ["-scanned_at", "-id"],
            },
        ),
        migrations.CreateModel(
            name="OwnershipTransfer",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("from_owner_id", models.CharField(max_length=255)),
                ("to_owner_id", models.CharField(max_length=255)),
                ("warranty_transferred", models.BooleanField(default=True)),
                ("transferred_at", models.DateTimeField(default=django.utils.timezone.now)),
                (
                    "unit",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="ownership_transfers",
                        to="inventory.shipmentitem",
                    ),
                ),
            ],
            options={
                "ordering": ["-transferred_at", "-id"],
            },
        ),
        migrations.CreateModel(
            name="WarrantyClaim",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("customer_id", models.CharField(max_length=255)),
                (
                    "claim_type",
                    models.CharField(
                        choices=[
                            ("defect", "Defect"),
                            ("damage", "Damage"),
                            ("repair", "Repair"),
                            ("replacement", "Replacement"),
                        ],
                        max_length=16,
                    ),
                ),
                ("title", models.CharField(max_length=200)),
                ("description", models.TextField(max_length=2000)),
                ("images", models.JSONField(blank=True, default=list)),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("pending", "Pending"),
                            ("approved", "Approved"),
                            ("rejected", "Rejected"),
                            ("completed", "Completed"),
                            ("cancelled", "Cancelled"),
                        ],
                        default="pending",
                        max_length=16,
                    ),
                ),
                ("submitted_at", models.DateTimeField(default=django.utils.timezone.now)),
                (
                    "unit",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="warranty_claims",
                        to="inventory.shipmentitem",
                    ),
                ),
            ],
            options={
                "ordering": ["-submitted_at", "-id"],
                "indexes": [models.Index(fields=["status", "submitted_at"], name="claim_status_submitted_idx")],
            },
        ),
    ]
