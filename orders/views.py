from django.apps import apps
from rest_framework import mixins, status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from catalog.models import Product, Supplier
from common.audit import get_request_id
from common.exceptions import ConflictError
from common.permissions import RoleCapabilityPermission, ensure_order_access, scope_orders_for_user
from common.utils import bool_query_param, choice_query_param
from orders.models import Order
from orders.serializers import GoodsReceiptSerializer, OrderCreateSerializer, OrderSerializer
from orders.services import RECEIVABLE_STATUSES, place_order, receive_goods, send_order_notification


def get_order_dispatcher():
    return apps.get_app_config("notifications").dispatcher


class OrderViewSet(
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    mixins.CreateModelMixin,
    viewsets.GenericViewSet,
):
    queryset = Order.objects.select_related("supplier", "employee").prefetch_related("items__product")
    serializer_class = OrderSerializer
    permission_classes = [IsAuthenticated, RoleCapabilityPermission]
    permission_action_map = {
        "list": "orders.view",
        "retrieve": "orders.view",
        "create": "orders.place",
        "receive": "orders.receive",
        "resend_email": "orders.place",
    }

    def get_queryset(self):
        qs = super().get_queryset().order_by("-order_date", "-order_number")
        if self.action != "list":
            return qs

        qs = scope_orders_for_user(qs, self.request.user)
        status_filter = choice_query_param(self.request, "status", Order.Status.values)
        if status_filter:
            qs = qs.filter(status=status_filter)
        elif bool_query_param(self.request, "receivable"):
            qs = qs.filter(status__in=RECEIVABLE_STATUSES)
        return qs

    def get_object(self):
        order = super().get_object()
        ensure_order_access(self.request.user, order)
        return order

    def _reload(self, order):
        return self.get_queryset().get(pk=order.pk)

    def create(self, request, *args, **kwargs):
        serializer = OrderCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        request_id = get_request_id(request)

        order = place_order(employee=request.user, request_id=request_id, **serializer.to_service_kwargs())
        notification = send_order_notification(
            order,
            dispatcher=get_order_dispatcher(),
            sent_by=request.user,
            request_id=request_id,
        )

        payload = OrderSerializer(self._reload(order)).data
        payload["etherealUrl"] = notification["preview_url"]
        return Response(payload, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=["patch"], url_path="receive")
    def receive(self, request, pk=None):
        order = self.get_object()
        serializer = GoodsReceiptSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        order = receive_goods(
            order=order,
            user=request.user,
            request_id=get_request_id(request),
            **serializer.to_service_kwargs(),
        )
        return Response(OrderSerializer(self._reload(order)).data)

    @action(detail=True, methods=["post"], url_path="resend-email")
    def resend_email(self, request, pk=None):
        order = self.get_object()
        if order.status == Order.Status.CANCELLED:
            raise ConflictError("Cannot send an email for a cancelled order.")

        notification = send_order_notification(
            order,
            dispatcher=get_order_dispatcher(),
            sent_by=request.user,
            request_id=get_request_id(request),
        )
        return Response(
            {
                "order": OrderSerializer(self._reload(order)).data,
                "etherealUrl": notification["preview_url"],
                "sent": notification["sent"],
            }
        )


class DashboardView(APIView):
    permission_classes = [IsAuthenticated, RoleCapabilityPermission]
    permission_action_map = {"get": "dashboard.view"}

    def get(self, request):
        orders = scope_orders_for_user(Order.objects.all(), request.user)
        return Response(
            {
                "totalOrders": orders.count(),
                "pendingOrders": orders.filter(status=Order.Status.PENDING).count(),
                "totalProducts": Product.objects.filter(is_active=True).count(),
                "totalSuppliers": Supplier.objects.filter(is_active=True).count(),
            }
        )
