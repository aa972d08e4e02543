"""
URL configuration for the blood bank backend.
"""

from django.contrib import admin
from django.http import JsonResponse
from django.urls import include, path


def health(request):
    return JsonResponse({"status": "ok"})


urlpatterns = [
    path("admin/", admin.site.urls),
    path("health/", health, name="health"),
    path("api/v1/", include("apps.core.urls")),
    # Prometheus metrics endpoint
    path("", include("django_prometheus.urls")),
]
