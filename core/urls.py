from django.urls import path
from rest_framework.routers import DefaultRouter

from core.views import AdminEmployeeViewSet, healthz, readyz

router = DefaultRouter()
router.register(r"admin/employees", AdminEmployeeViewSet, basename="admin-employee")

urlpatterns = router.urls + [
    path("healthz/", healthz, name="healthz"),
    path("readyz/", readyz, name="readyz"),
]
