"""
Donor registration and donation URL configuration.
"""

from django.urls import include, path
from rest_framework.routers import SimpleRouter

from .views import DonationViewSet, DonorRegistrationViewSet

router = SimpleRouter()
router.register("donor-registrations", DonorRegistrationViewSet, basename="donor-registration")
router.register("donations", DonationViewSet, basename="donation")

urlpatterns = [
    path("", include(router.urls)),
]
