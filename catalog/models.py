import uuid

from django.db import models


class Supplier(models.Model):
    class ArticleGroup(models.TextChoices):
        PACKAGING = "PACKAGING", "Packaging"
        LABELS = "LABELS", "Labels"
        TAPE = "TAPE", "Tape"
        PALLETS = "PALLETS", "Pallets"
        OTHER = "OTHER", "Other"

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=255)
    email = models.EmailField()
    cc_emails = models.JSONField(default=list, blank=True)
    article_group = models.CharField(max_length=16, choices=ArticleGroup.choices)
    language = models.CharField(max_length=8, default="en")
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["name"]
        indexes = [models.Index(fields=["is_active", "name"], name="supplier_active_name_idx")]

    def __str__(self):
        return self.name


class ProductType(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=128, unique=True)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["name"]

    def __str__(self):
        return self.name


class Product(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=255)
    article_code = models.CharField(max_length=64, unique=True)
    supplier = models.ForeignKey(Supplier, on_delete=models.PROTECT, related_name="products")
    product_type = models.ForeignKey(ProductType, on_delete=models.SET_NULL, null=True, blank=True, related_name="products")
    units_per_box = models.PositiveIntegerField(null=True, blank=True)
    units_per_pallet = models.PositiveIntegerField(null=True, blank=True)
    price_per_unit = models.DecimalField(max_digits=12, decimal_places=4, null=True, blank=True)
    csrd_requirements = models.TextField(null=True, blank=True)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["name"]
        indexes = [
            models.Index(fields=["supplier", "is_active"], name="product_supplier_active_idx"),
        ]

    def __str__(self):
        return f"{self.name} ({self.article_code})"
