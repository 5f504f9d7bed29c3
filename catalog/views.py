from django.db import transaction
from django.db.models import Count
from rest_framework import mixins, viewsets
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from catalog.models import Product, ProductType, Supplier
from catalog.serializers import ProductSerializer, ProductTypeSerializer, SupplierSerializer, SupplierSummarySerializer
from common.audit import AuditedMutationMixin
from common.permissions import RoleCapabilityPermission
from common.utils import uuid_query_param
from core.models import AuditLog

ADMIN_ACTIONS = ["list", "retrieve", "create", "update", "partial_update"]


class SupplierViewSet(viewsets.ReadOnlyModelViewSet):
    queryset = Supplier.objects.filter(is_active=True)
    serializer_class = SupplierSummarySerializer
    permission_classes = [IsAuthenticated, RoleCapabilityPermission]
    permission_action_map = {"list": "catalog.view", "retrieve": "catalog.view"}


class ProductViewSet(viewsets.ReadOnlyModelViewSet):
    queryset = Product.objects.filter(is_active=True, supplier__is_active=True).select_related("supplier", "product_type")
    serializer_class = ProductSerializer
    permission_classes = [IsAuthenticated, RoleCapabilityPermission]
    permission_action_map = {"list": "catalog.view", "retrieve": "catalog.view"}

    def get_queryset(self):
        qs = super().get_queryset()
        supplier_id = uuid_query_param(self.request, "supplierId")
        if supplier_id:
            qs = qs.filter(supplier_id=supplier_id)
        return qs


class ProductTypeViewSet(viewsets.ReadOnlyModelViewSet):
    queryset = ProductType.objects.filter(is_active=True)
    serializer_class = ProductTypeSerializer
    permission_classes = [IsAuthenticated, RoleCapabilityPermission]
    permission_action_map = {"list": "catalog.view", "retrieve": "catalog.view"}


class AdminCatalogViewSet(
    AuditedMutationMixin,
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    mixins.CreateModelMixin,
    mixins.UpdateModelMixin,
    viewsets.GenericViewSet,
):
    permission_classes = [IsAuthenticated, RoleCapabilityPermission]
    permission_action_map = {action: "catalog.manage" for action in ADMIN_ACTIONS}
    # Records are deactivated with isActive instead of being deleted.
    http_method_names = ["get", "post", "patch", "head", "options"]


class AdminSupplierViewSet(AdminCatalogViewSet):
    queryset = Supplier.objects.annotate(product_count=Count("products"))
    serializer_class = SupplierSerializer
    audit_entity = "Supplier"


class AdminProductViewSet(AdminCatalogViewSet):
    queryset = Product.objects.select_related("supplier", "product_type")
    serializer_class = ProductSerializer
    audit_entity = "Product"

    def get_queryset(self):
        qs = super().get_queryset()
        supplier_id = uuid_query_param(self.request, "supplierId")
        if supplier_id:
            qs = qs.filter(supplier_id=supplier_id)
        return qs


class AdminProductTypeViewSet(AdminCatalogViewSet):
    queryset = ProductType.objects.all()
    serializer_class = ProductTypeSerializer
    audit_entity = "ProductType"
    permission_action_map = {**AdminCatalogViewSet.permission_action_map, "destroy": "catalog.manage"}
    # DELETE deactivates the product type; products keep their reference.
    http_method_names = [*AdminCatalogViewSet.http_method_names, "delete"]

    def destroy(self, request, *args, **kwargs):
        instance = self.get_object()
        with transaction.atomic():
            instance.is_active = False
            instance.save(update_fields=["is_active", "updated_at"])
            self._audit(action=AuditLog.Action.UPDATE, instance=instance, details="fields: is_active")
        return Response(self.get_serializer(instance).data)
