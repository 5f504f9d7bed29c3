from rest_framework.routers import DefaultRouter

from catalog.views import (
    AdminProductTypeViewSet,
    AdminProductViewSet,
    AdminSupplierViewSet,
    ProductTypeViewSet,
    ProductViewSet,
    SupplierViewSet,
)

router = DefaultRouter()
router.register(r"suppliers", SupplierViewSet, basename="supplier")
router.register(r"products", ProductViewSet, basename="product")
router.register(r"product-types", ProductTypeViewSet, basename="product-type")
router.register(r"admin/suppliers", AdminSupplierViewSet, basename="admin-supplier")
router.register(r"admin/products", AdminProductViewSet, basename="admin-product")
router.register(r"admin/product-types", AdminProductTypeViewSet, basename="admin-product-type")

urlpatterns = router.urls
