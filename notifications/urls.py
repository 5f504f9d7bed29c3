from rest_framework.routers import DefaultRouter

from notifications.views import EmailLogViewSet

router = DefaultRouter()
router.register(r"emails", EmailLogViewSet, basename="email")

urlpatterns = router.urls
