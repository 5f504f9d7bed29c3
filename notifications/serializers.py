from rest_framework import serializers

from notifications.models import EmailLog


class EmailLogSerializer(serializers.ModelSerializer):
    toAddress = serializers.EmailField(source="recipient", read_only=True)
    ccAddresses = serializers.ListField(source="cc", child=serializers.CharField(), read_only=True)
    orderId = serializers.UUIDField(source="order_id", read_only=True)
    sentById = serializers.UUIDField(source="sent_by_id", read_only=True)
    sentAt = serializers.DateTimeField(source="sent_at", read_only=True)
    etherealUrl = serializers.CharField(source="preview_url", read_only=True)
    errorMessage = serializers.CharField(source="error_message", read_only=True)
    order = serializers.SerializerMethodField()
    sentBy = serializers.SerializerMethodField()

    class Meta:
        model = EmailLog
        fields = [
            "id",
            "type",
            "subject",
            "toAddress",
            "ccAddresses",
            "orderId",
            "sentById",
            "sentAt",
            "provider",
            "etherealUrl",
            "status",
            "errorMessage",
            "order",
            "sentBy",
        ]
        read_only_fields = fields

    def get_order(self, obj):
        if obj.order_id is None:
            return None
        return {"orderNumber": obj.order.order_number}

    def get_sentBy(self, obj):
        if obj.sent_by_id is None:
            return None
        return {"firstName": obj.sent_by.first_name, "lastName": obj.sent_by.last_name}
