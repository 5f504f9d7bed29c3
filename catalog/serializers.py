from rest_framework import serializers
from rest_framework.validators import UniqueValidator

from catalog.models import Product, ProductType, Supplier


class SupplierSerializer(serializers.ModelSerializer):
    ccEmails = serializers.ListField(source="cc_emails", child=serializers.EmailField(), required=False)
    articleGroup = serializers.ChoiceField(source="article_group", choices=Supplier.ArticleGroup.choices)
    isActive = serializers.BooleanField(source="is_active", required=False)
    productCount = serializers.SerializerMethodField()
    createdAt = serializers.DateTimeField(source="created_at", read_only=True)
    updatedAt = serializers.DateTimeField(source="updated_at", read_only=True)

    class Meta:
        model = Supplier
        fields = [
            "id",
            "name",
            "email",
            "ccEmails",
            "articleGroup",
            "language",
            "isActive",
            "productCount",
            "createdAt",
            "updatedAt",
        ]
        read_only_fields = ["id"]

    def get_productCount(self, obj):
        annotated = getattr(obj, "product_count", None)
        if annotated is not None:
            return annotated
        return obj.products.count()


class SupplierSummarySerializer(serializers.ModelSerializer):
    articleGroup = serializers.CharField(source="article_group", read_only=True)

    class Meta:
        model = Supplier
        fields = ["id", "name", "articleGroup"]
        read_only_fields = fields


class ProductTypeSerializer(serializers.ModelSerializer):
    name = serializers.CharField(
        max_length=128,
        validators=[UniqueValidator(queryset=ProductType.objects.all(), message="A product type with this name already exists.")],
    )
    isActive = serializers.BooleanField(source="is_active", required=False)

    class Meta:
        model = ProductType
        fields = ["id", "name", "isActive"]
        read_only_fields = ["id"]


class ProductSupplierSerializer(serializers.ModelSerializer):
    class Meta:
        model = Supplier
        fields = ["id", "name"]
        read_only_fields = fields


class ProductSerializer(serializers.ModelSerializer):
    articleCode = serializers.CharField(
        source="article_code",
        max_length=64,
        validators=[UniqueValidator(queryset=Product.objects.all(), message="A product with this article code already exists.")],
    )
    supplierId = serializers.PrimaryKeyRelatedField(source="supplier", queryset=Supplier.objects.all())
    supplier = ProductSupplierSerializer(read_only=True)
    productTypeId = serializers.PrimaryKeyRelatedField(
        source="product_type",
        queryset=ProductType.objects.all(),
        required=False,
        allow_null=True,
    )
    productType = serializers.SerializerMethodField()
    unitsPerBox = serializers.IntegerField(source="units_per_box", min_value=1, required=False, allow_null=True)
    unitsPerPallet = serializers.IntegerField(source="units_per_pallet", min_value=1, required=False, allow_null=True)
    pricePerUnit = serializers.DecimalField(
        source="price_per_unit",
        max_digits=12,
        decimal_places=4,
        min_value=0,
        required=False,
        allow_null=True,
    )
    csrdRequirements = serializers.CharField(source="csrd_requirements", required=False, allow_null=True, allow_blank=True)
    isActive = serializers.BooleanField(source="is_active", required=False)
    createdAt = serializers.DateTimeField(source="created_at", read_only=True)
    updatedAt = serializers.DateTimeField(source="updated_at", read_only=True)

    class Meta:
        model = Product
        fields = [
            "id",
            "name",
            "articleCode",
            "supplierId",
            "supplier",
            "productTypeId",
            "productType",
            "unitsPerBox",
            "unitsPerPallet",
            "pricePerUnit",
            "csrdRequirements",
            "isActive",
            "createdAt",
            "updatedAt",
        ]
        read_only_fields = ["id"]

    def get_productType(self, obj):
        return obj.product_type.name if obj.product_type_id else None

    def validate_pricePerUnit(self, value):
        if value is not None and value <= 0:
            raise serializers.ValidationError("Price per unit must be positive.")
        return value
