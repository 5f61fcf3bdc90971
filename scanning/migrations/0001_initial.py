import django.db.models.deletion
import django.utils.timezone
import scanning.models
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="ScanningSession",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("cart_items", models.JSONField(blank=True, default=list)),
                ("customer_info", models.JSONField(blank=True, default=scanning.models.default_customer_info)),
                ("customer_stamps", models.JSONField(blank=True, default=dict)),
                ("devices", models.JSONField(blank=True, default=dict)),
                ("device_count", models.PositiveIntegerField(default=1)),
                ("last_updated", models.DateTimeField(default=django.utils.timezone.now)),
                ("last_ping", models.DateTimeField(default=django.utils.timezone.now)),
                (
                    "user",
                    models.OneToOneField(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="scanning_session",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "abstract": False,
            },
        ),
    ]
