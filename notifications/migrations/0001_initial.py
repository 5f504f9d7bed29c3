import uuid

import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):
    initial = True

    dependencies = [
        ("orders", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="EmailLog",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("type", models.CharField(choices=[("ORDER", "Order")], default="ORDER", max_length=32)),
                ("subject", models.CharField(max_length=255)),
                ("recipient", models.EmailField(max_length=254)),
                ("cc", models.JSONField(blank=True, default=list)),
                ("provider", models.CharField(max_length=32)),
                ("preview_url", models.URLField(blank=True, max_length=500, null=True)),
                ("status", models.CharField(choices=[("SENT", "Sent"), ("FAILED", "Failed")], max_length=16)),
                ("error_message", models.TextField(blank=True, null=True)),
                ("sent_at", models.DateTimeField(auto_now_add=True)),
                (
                    "order",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="email_logs",
                        to="orders.order",
                    ),
                ),
                (
                    "sent_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="email_logs",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "ordering": ["-sent_at"],
                "indexes": [
                    models.Index(fields=["sent_by", "sent_at"], name="emaillog_sender_sent_idx"),
                    models.Index(fields=["order", "sent_at"], name="emaillog_order_sent_idx"),
                    models.Index(fields=["type", "sent_at"], name="emaillog_type_sent_idx"),
                ],
            },
        ),
    ]
