from rest_framework import serializers

from catalog.models import Product, Supplier
from core.serializers import EmployeeSummarySerializer
from orders.models import Order, OrderItem

MAX_QUANTITY = 2147483647

RECEIVED_DATE_INPUT_FORMATS = ["iso-8601", "%Y-%m-%dT%H:%M:%S.%fZ", "%Y-%m-%dT%H:%M:%SZ", "%Y-%m-%dT%H:%M:%S"]


class OrderItemInputSerializer(serializers.Serializer):
    productId = serializers.UUIDField()
    quantity = serializers.IntegerField(min_value=1, max_value=MAX_QUANTITY)
    unit = serializers.ChoiceField(choices=OrderItem.Unit.choices)


class OrderCreateSerializer(serializers.Serializer):
    supplierId = serializers.UUIDField()
    notes = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    items = OrderItemInputSerializer(many=True, allow_empty=False)

    def to_service_kwargs(self):
        data = self.validated_data
        return {
            "supplier_id": data["supplierId"],
            "notes": data.get("notes") or None,
            "items": [
                {"product_id": item["productId"], "quantity": item["quantity"], "unit": item["unit"]}
                for item in data["items"]
            ],
        }


class GoodsReceiptItemSerializer(serializers.Serializer):
    orderItemId = serializers.UUIDField()
    quantityReceived = serializers.IntegerField(min_value=0, max_value=MAX_QUANTITY)
    receivedDate = serializers.DateField(input_formats=RECEIVED_DATE_INPUT_FORMATS)


class GoodsReceiptSerializer(serializers.Serializer):
    items = GoodsReceiptItemSerializer(many=True, allow_empty=False)
    notes = serializers.CharField(required=False, allow_blank=True, allow_null=True)

    def validate_items(self, value):
        seen = set()
        for item in value:
            if item["orderItemId"] in seen:
                raise serializers.ValidationError(f"Item {item['orderItemId']} is listed more than once.")
            seen.add(item["orderItemId"])
        return value

    def to_service_kwargs(self):
        data = self.validated_data
        return {
            "notes": data.get("notes") or None,
            "items": [
                {
                    "order_item_id": item["orderItemId"],
                    "quantity_received": item["quantityReceived"],
                    "received_date": item["receivedDate"],
                }
                for item in data["items"]
            ],
        }


class OrderProductSerializer(serializers.ModelSerializer):
    articleCode = serializers.CharField(source="article_code", read_only=True)

    class Meta:
        model = Product
        fields = ["id", "name", "articleCode"]
        read_only_fields = fields


class OrderSupplierSerializer(serializers.ModelSerializer):
    class Meta:
        model = Supplier
        fields = ["id", "name", "email"]
        read_only_fields = fields


class OrderItemSerializer(serializers.ModelSerializer):
    productId = serializers.UUIDField(source="product_id", read_only=True)
    product = OrderProductSerializer(read_only=True)
    unitLabel = serializers.CharField(source="get_unit_display", read_only=True)
    quantityReceived = serializers.IntegerField(source="quantity_received", read_only=True)
    receivedDate = serializers.DateField(source="received_date", read_only=True)
    receivedById = serializers.UUIDField(source="received_by_id", read_only=True)

    class Meta:
        model = OrderItem
        fields = ["id", "productId", "product", "quantity", "unit", "unitLabel", "quantityReceived", "receivedDate", "receivedById"]
        read_only_fields = fields


class OrderSerializer(serializers.ModelSerializer):
    orderNumber = serializers.CharField(source="order_number", read_only=True)
    statusLabel = serializers.CharField(source="get_status_display", read_only=True)
    orderDate = serializers.DateTimeField(source="order_date", read_only=True)
    emailSentAt = serializers.DateTimeField(source="email_sent_at", read_only=True)
    supplierId = serializers.UUIDField(source="supplier_id", read_only=True)
    supplier = OrderSupplierSerializer(read_only=True)
    employeeId = serializers.UUIDField(source="employee_id", read_only=True)
    employee = EmployeeSummarySerializer(read_only=True)
    items = OrderItemSerializer(many=True, read_only=True)
    itemCount = serializers.SerializerMethodField()

    class Meta:
        model = Order
        fields = [
            "id",
            "orderNumber",
            "status",
            "statusLabel",
            "notes",
            "orderDate",
            "emailSentAt",
            "supplierId",
            "supplier",
            "employeeId",
            "employee",
            "items",
            "itemCount",
        ]
        read_only_fields = fields

    def get_itemCount(self, obj):
        return len(obj.items.all())
