from rest_framework import viewsets
from rest_framework.permissions import IsAuthenticated

from common.permissions import RoleCapabilityPermission, user_is_admin
from common.utils import choice_query_param, uuid_query_param
from notifications.models import EmailLog
from notifications.serializers import EmailLogSerializer


class EmailLogViewSet(viewsets.ReadOnlyModelViewSet):
    queryset = EmailLog.objects.select_related("order", "sent_by").order_by("-sent_at")
    serializer_class = EmailLogSerializer
    permission_classes = [IsAuthenticated, RoleCapabilityPermission]
    permission_action_map = {"list": "emails.view", "retrieve": "emails.view"}

    def get_queryset(self):
        qs = super().get_queryset()
        if not user_is_admin(self.request.user):
            qs = qs.filter(sent_by=self.request.user)
        if self.action != "list":
            return qs

        email_type = choice_query_param(self.request, "type", EmailLog.Type.values)
        if email_type:
            qs = qs.filter(type=email_type)
        order_id = uuid_query_param(self.request, "orderId")
        if order_id:
            qs = qs.filter(order_id=order_id)
        return qs
