"""
Blood stock URL configuration.
"""

from django.urls import include, path
from rest_framework.routers import SimpleRouter

from .views import BloodStockViewSet

router = SimpleRouter()
router.register("", BloodStockViewSet, basename="blood-stock")

urlpatterns = [
    path("", include(router.urls)),
]
