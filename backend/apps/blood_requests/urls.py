"""
Blood request URL configuration.
"""

from django.urls import include, path
from rest_framework.routers import SimpleRouter

from .views import BloodRequestViewSet

router = SimpleRouter()
router.register("", BloodRequestViewSet, basename="blood-request")

urlpatterns = [
    path("", include(router.urls)),
]
