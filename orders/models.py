import uuid

from django.db import models

from catalog.models import Product, Supplier
from core.models import User


class Order(models.Model):
    class Status(models.TextChoices):
        PENDING = "PENDING", "Pending"
        PARTIALLY_RECEIVED = "PARTIALLY_RECEIVED", "Partially Received"
        RECEIVED = "RECEIVED", "Received"
        CANCELLED = "CANCELLED", "Cancelled"

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    order_number = models.CharField(max_length=32, unique=True)
    employee = models.ForeignKey(User, on_delete=models.PROTECT, related_name="orders")
    supplier = models.ForeignKey(Supplier, on_delete=models.PROTECT, related_name="orders")
    status = models.CharField(max_length=32, choices=Status.choices, default=Status.PENDING)
    notes = models.TextField(null=True, blank=True)
    order_date = models.DateTimeField(auto_now_add=True)
    email_sent_at = models.DateTimeField(null=True, blank=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        indexes = [
            models.Index(fields=["employee", "order_date"], name="order_employee_date_idx"),
            models.Index(fields=["status", "order_date"], name="order_status_date_idx"),
            models.Index(fields=["supplier", "status"], name="order_supplier_status_idx"),
        ]

    def __str__(self):
        return self.order_number


class OrderItem(models.Model):
    class Unit(models.TextChoices):
        PIECE = "PIECE", "Piece"
        BOX = "BOX", "Box"
        PALLET = "PALLET", "Pallet"

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    order = models.ForeignKey(Order, on_delete=models.CASCADE, related_name="items")
    product = models.ForeignKey(Product, on_delete=models.PROTECT, related_name="order_items")
    quantity = models.PositiveIntegerField()
    unit = models.CharField(max_length=16, choices=Unit.choices)
    quantity_received = models.PositiveIntegerField(null=True, blank=True)
    received_date = models.DateField(null=True, blank=True)
    received_by = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True, related_name="received_order_items")

    class Meta:
        indexes = [
            models.Index(fields=["order"], name="orderitem_order_idx"),
            models.Index(fields=["product"], name="orderitem_product_idx"),
        ]
        constraints = [
            models.CheckConstraint(condition=models.Q(quantity__gte=1), name="orderitem_quantity_positive"),
        ]


class OrderNumberSequence(models.Model):
    """Last order number handed out per prefix; its row lock serializes allocation."""

    prefix = models.CharField(max_length=16, primary_key=True)
    last_value = models.PositiveIntegerField(default=0)
    updated_at = models.DateTimeField(auto_now=True)
