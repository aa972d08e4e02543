"""
Hospital URL configuration.
"""

from django.urls import include, path
from rest_framework.routers import SimpleRouter

from .views import HospitalViewSet

router = SimpleRouter()
router.register("", HospitalViewSet, basename="hospital")

urlpatterns = [
    path("", include(router.urls)),
]
