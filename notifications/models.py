import uuid

from django.db import models

from core.models import User


class EmailLog(models.Model):
    class Type(models.TextChoices):
        ORDER = "ORDER", "Order"

    class Status(models.TextChoices):
        SENT = "SENT", "Sent"
        FAILED = "FAILED", "Failed"

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    type = models.CharField(max_length=32, choices=Type.choices, default=Type.ORDER)
    subject = models.CharField(max_length=255)
    recipient = models.EmailField()
    cc = models.JSONField(default=list, blank=True)
    order = models.ForeignKey("orders.Order", on_delete=models.SET_NULL, null=True, blank=True, related_name="email_logs")
    sent_by = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True, related_name="email_logs")
    provider = models.CharField(max_length=32)
    preview_url = models.URLField(max_length=500, null=True, blank=True)
    status = models.CharField(max_length=16, choices=Status.choices)
    error_message = models.TextField(null=True, blank=True)
    sent_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-sent_at"]
        indexes = [
            models.Index(fields=["sent_by", "sent_at"], name="emaillog_sender_sent_idx"),
            models.Index(fields=["order", "sent_at"], name="emaillog_order_sent_idx"),
            models.Index(fields=["type", "sent_at"], name="emaillog_type_sent_idx"),
        ]

    def __str__(self):
        return f"{self.type} {self.status} -> {self.recipient}"
