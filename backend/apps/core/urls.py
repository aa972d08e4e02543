"""
API URL configuration.
Includes all app routes.
"""

from django.urls import include, path

from apps.accounts.urls import auth_urlpatterns, profile_urlpatterns

urlpatterns = [
    path("auth/", include(auth_urlpatterns)),
    path("profile/", include(profile_urlpatterns)),
    path("hospitals/", include("apps.hospitals.urls")),
    path("blood-requests/", include("apps.blood_requests.urls")),
    path("blood-stock/", include("apps.stock.urls")),
    path("dashboard/", include("apps.dashboard.urls")),
    path("", include("apps.donors.urls")),
]
